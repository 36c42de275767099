# tests/test_errors.py
import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from fitpass.core.errors import register_exception_handlers


def _app_raising(exc: Exception) -> FastAPI:
    app = FastAPI()

    @app.middleware("http")
    async def tag_request(request: Request, call_next):
        request.state.request_id = "req-1"
        return await call_next(request)

    register_exception_handlers(app)

    @app.get("/boom")
    async def boom():
        raise exc

    return app


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc, status_code",
    [
        (LookupError("订阅不存在"), 404),
        (PermissionError("无权操作"), 403),
        (ValueError("已取消的订阅不能续费"), 409),
    ],
)
async def test_untranslated_service_errors_are_mapped(exc, status_code):
    transport = ASGITransport(app=_app_raising(exc))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/boom")

    assert resp.status_code == status_code
    assert resp.json() == {"detail": str(exc), "request_id": "req-1"}


@pytest.mark.asyncio
async def test_unexpected_errors_become_500():
    transport = ASGITransport(app=_app_raising(RuntimeError("kaboom")), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/boom")

    assert resp.status_code == 500
    assert resp.json()["request_id"] == "req-1"

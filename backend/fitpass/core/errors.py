"""
统一错误响应：所有错误体为 {"detail": ..., "request_id": ...}

服务层前置条件失败抛出的 LookupError / PermissionError / ValueError
若未被路由捕获，在此分别映射为 404 / 403 / 409。
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

SERVICE_ERROR_STATUS = (
    (LookupError, status.HTTP_404_NOT_FOUND),
    (PermissionError, status.HTTP_403_FORBIDDEN),
    (ValueError, status.HTTP_409_CONFLICT),
)


def error_body(request: Request, detail: str, **extra) -> dict:
    body = {"detail": detail}
    rid: Optional[str] = getattr(request.state, "request_id", None)
    if rid:
        body["request_id"] = rid
    body.update(extra)
    return body


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()]
    detail = errors[0].get("msg", "请求参数校验失败") if errors else "请求参数校验失败"
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(request, detail, errors=errors),
    )


async def service_exception_handler(request: Request, exc: Exception):
    for exc_type, code in SERVICE_ERROR_STATUS:
        if isinstance(exc, exc_type):
            return JSONResponse(status_code=code, content=error_body(request, str(exc)))
    return await unhandled_exception_handler(request, exc)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("未捕获异常 %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(request, "服务器内部错误"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    for exc_type, _ in SERVICE_ERROR_STATUS:
        app.add_exception_handler(exc_type, service_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

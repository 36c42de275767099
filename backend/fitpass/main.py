"""
FitPass API 入口：场馆通行证、预约、商家套餐、通知
"""
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

import fitpass.models  # noqa: F401  建表前需要注册全部模型
from fitpass.api.v1 import api_router
from fitpass.core.config import settings
from fitpass.core.database import Base, engine
from fitpass.core.errors import register_exception_handlers
from fitpass.core.health import check_dependencies
from fitpass.core.logging import setup_logging

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s %s 已启动", settings.PROJECT_NAME, VERSION)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="场馆通行证售卖、预约、商家套餐与通知限流API",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """透传或生成 X-Request-ID，审计日志与错误响应都会带上它"""
    rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = rid
    response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    return response


register_exception_handlers(app)
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    return {"service": settings.PROJECT_NAME, "version": VERSION, "docs": "/docs"}


@app.get("/health")
async def health_check():
    """Redis 不可用时通知限流放行，服务标记为 degraded 但仍可用"""
    deps = await check_dependencies()
    healthy = all(d["ok"] for d in deps.values())
    return {
        "status": "healthy" if healthy else "degraded",
        "service": "fitpass-api",
        "dependencies": deps,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fitpass.main:app", host="0.0.0.0", port=8000, reload=True)

"""
API v1 路由
"""
from fastapi import APIRouter
from fitpass.api.v1 import (
    auth,
    venues,
    subscriptions,
    bookings,
    business_plan,
    pass_config,
    admin,
    notifications,
    audit,
)

api_router = APIRouter()

# 注册子路由
api_router.include_router(auth.router, prefix="/auth", tags=["认证"])
api_router.include_router(venues.router, prefix="/venues", tags=["场馆"])
api_router.include_router(subscriptions.router, prefix="/subscriptions", tags=["会员通行证"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["预约"])
api_router.include_router(business_plan.router, prefix="/business/plan", tags=["商家套餐"])
api_router.include_router(pass_config.router, prefix="/business/pass-config", tags=["通行证配置"])
api_router.include_router(admin.router, prefix="/admin", tags=["管理员"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["通知"])
api_router.include_router(audit.router, prefix="/audit-logs", tags=["审计"])

"""
通知设置与日志API
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.database import get_db
from fitpass.schemas.auth import UserResponse
from fitpass.schemas.notification import (
    BusinessNotificationSettingsResponse,
    ChannelToggleRequest,
    DailyCapRequest,
    NotificationLogItem,
    NotificationLogListResponse,
    UserNotificationPreferenceResponse,
)
from fitpass.api.deps import get_current_active_user, require_business
from fitpass.services.notification_service import NotificationService

router = APIRouter()

@router.get("/business", response_model=BusinessNotificationSettingsResponse)
async def get_business_settings(
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """商家通知设置"""
    service = NotificationService(db)
    return service.business_settings_response(await service.get_business_settings(current_user.id))

@router.put("/business", response_model=BusinessNotificationSettingsResponse)
async def toggle_business_channel(
    body: ChannelToggleRequest,
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """开关商家通知渠道"""
    service = NotificationService(db)
    row = await service.toggle_business_channel(current_user.id, body.channel, body.enabled)
    return service.business_settings_response(row)

@router.put("/business/cap", response_model=BusinessNotificationSettingsResponse)
async def set_business_daily_cap(
    body: DailyCapRequest,
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """设置每用户每日上限（超过管理员最大值时截断）"""
    service = NotificationService(db)
    await service.set_business_daily_cap(current_user.id, body.channel, body.cap)
    return service.business_settings_response(await service.get_business_settings(current_user.id))

@router.get("/preferences", response_model=UserNotificationPreferenceResponse)
async def get_user_preferences(
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """我的通知偏好与今日用量"""
    service = NotificationService(db)
    return service.user_preferences_response(await service.get_user_preferences(current_user.id))

@router.put("/preferences", response_model=UserNotificationPreferenceResponse)
async def toggle_user_channel(
    body: ChannelToggleRequest,
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """开关个人通知渠道"""
    service = NotificationService(db)
    row = await service.toggle_user_channel(current_user.id, body.channel, body.enabled)
    return service.user_preferences_response(row)

@router.get("/logs", response_model=NotificationLogListResponse)
async def get_notification_logs(
    limit: int = 100,
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """通知记录：商家看本商家发出的，普通用户看自己收到的，管理员看全部"""
    service = NotificationService(db)
    if current_user.role == "admin":
        logs = await service.get_notification_logs(limit=limit)
    elif current_user.role == "business":
        logs = await service.get_notification_logs(business_id=current_user.id, limit=limit)
    else:
        logs = await service.get_notification_logs(user_id=current_user.id, limit=limit)
    items = [NotificationLogItem.model_validate(x) for x in logs]
    return {"items": items, "total": len(items)}

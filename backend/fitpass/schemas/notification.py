"""
通知相关Schema
"""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Dict, Any


class ChannelFlags(BaseModel):
    sms: bool = True
    email: bool = True
    whatsapp: bool = True


class ChannelCaps(BaseModel):
    sms: int = 5
    email: int = 5
    whatsapp: int = 5


class BusinessNotificationSettingsResponse(BaseModel):
    business_id: int
    channels_enabled: ChannelFlags
    daily_cap_per_user: ChannelCaps
    max_allowed_cap: ChannelCaps


class ChannelToggleRequest(BaseModel):
    channel: str = Field(..., pattern="^(sms|email|whatsapp)$")
    enabled: bool


class DailyCapRequest(BaseModel):
    channel: str = Field(..., pattern="^(sms|email|whatsapp)$")
    cap: int = Field(..., ge=0)


class UserNotificationPreferenceResponse(BaseModel):
    user_id: int
    enabled: ChannelFlags
    daily_usage: Dict[str, int] = {}


class NotificationLogItem(BaseModel):
    id: int
    user_id: int
    business_id: Optional[int] = None
    channel: str
    type: str
    subject: Optional[str] = None
    message: str
    status: str
    extra: Optional[Dict[str, Any]] = None
    sent_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NotificationLogListResponse(BaseModel):
    items: List[NotificationLogItem]
    total: int


class NotificationRecipient(BaseModel):
    """通知接收人"""
    user_id: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

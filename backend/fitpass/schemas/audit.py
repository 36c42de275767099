"""审计日志 Schema"""
from datetime import datetime
from typing import Any, Dict, Optional, List
from pydantic import BaseModel


class AuditLogItem(BaseModel):
    id: int
    user_id: int
    action: str
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    detail: Optional[Dict[str, Any]] = None
    ip: Optional[str] = None
    request_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AuditLogListResponse(BaseModel):
    """分页结果，新的在前"""
    items: List[AuditLogItem]
    total: int
    page: int
    page_size: int

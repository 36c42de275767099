"""
场馆相关Schema
"""
from pydantic import BaseModel, Field
from typing import Optional, List


class VenueCreate(BaseModel):
    """场馆创建"""
    name: str = Field(..., min_length=1, max_length=100)
    category: str = Field("gym", pattern="^(gym|library|coaching)$")
    city: Optional[str] = None
    address: Optional[str] = None


class VenueResponse(BaseModel):
    """场馆响应"""
    id: int
    owner_id: int
    name: str
    category: str
    city: Optional[str] = None
    address: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class VenueListResponse(BaseModel):
    venues: List[VenueResponse]
    total: int

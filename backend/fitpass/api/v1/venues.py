"""
场馆相关API
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.database import get_db
from fitpass.schemas.auth import UserResponse
from fitpass.schemas.venue import VenueCreate, VenueResponse, VenueListResponse
from fitpass.api.deps import require_business
from fitpass.services.venue_service import VenueService

router = APIRouter()

@router.post("", response_model=VenueResponse, status_code=status.HTTP_201_CREATED)
async def create_venue(
    data: VenueCreate,
    current_user: UserResponse = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    """商家创建场馆"""
    return await VenueService(db).create_venue(current_user.id, data)

@router.get("", response_model=VenueListResponse)
async def list_venues(
    owner_id: Optional[int] = Query(None, description="按商家筛选"),
    category: Optional[str] = Query(None, description="gym / library / coaching"),
    city: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """场馆列表"""
    venues = await VenueService(db).list_venues(owner_id=owner_id, category=category, city=city)
    return {"venues": venues, "total": len(venues)}

@router.get("/{venue_id}", response_model=VenueResponse)
async def get_venue(venue_id: int, db: AsyncSession = Depends(get_db)):
    """场馆详情"""
    venue = await VenueService(db).get_venue(venue_id)
    if not venue:
        raise HTTPException(status_code=404, detail="场馆不存在")
    return venue

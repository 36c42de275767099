"""
场馆服务
"""
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.models.venue import Venue
from fitpass.repositories.venue import VenueRepository
from fitpass.schemas.venue import VenueCreate


class VenueService:
    """场馆服务类"""

    def __init__(self, db: AsyncSession, venues: Optional[VenueRepository] = None):
        self.db = db
        self.venues = venues or VenueRepository(db)

    async def create_venue(self, owner_id: int, data: VenueCreate) -> Venue:
        """创建场馆"""
        venue = Venue(
            owner_id=owner_id,
            name=data.name,
            category=data.category,
            city=data.city,
            address=data.address,
            is_active=True,
        )
        await self.venues.add(venue)
        await self.venues.commit()
        return venue

    async def get_venue(self, venue_id: int) -> Optional[Venue]:
        return await self.venues.get_by_id(venue_id)

    async def list_venues(
        self,
        owner_id: Optional[int] = None,
        category: Optional[str] = None,
        city: Optional[str] = None,
    ) -> List[Venue]:
        return await self.venues.list_venues(owner_id=owner_id, category=category, city=city)

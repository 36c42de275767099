"""场馆仓储"""
from typing import List, Optional

from sqlalchemy import select

from fitpass.models.venue import Venue
from fitpass.repositories.base import BaseRepository


class VenueRepository(BaseRepository[Venue]):
    model = Venue

    async def list_venues(
        self,
        owner_id: Optional[int] = None,
        category: Optional[str] = None,
        city: Optional[str] = None,
    ) -> List[Venue]:
        stmt = select(Venue).where(Venue.is_active == True)  # noqa: E712
        if owner_id is not None:
            stmt = stmt.where(Venue.owner_id == owner_id)
        if category:
            stmt = stmt.where(Venue.category == category)
        if city:
            stmt = stmt.where(Venue.city == city)
        result = await self.db.execute(stmt.order_by(Venue.id))
        return list(result.scalars().all())

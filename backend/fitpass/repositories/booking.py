"""预约仓储"""
from typing import List

from sqlalchemy import select

from fitpass.models.booking import Booking
from fitpass.repositories.base import BaseRepository


class BookingRepository(BaseRepository[Booking]):
    model = Booking

    async def list_by_user(self, user_id: int) -> List[Booking]:
        result = await self.db.execute(
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(Booking.booking_date.desc(), Booking.id.desc())
        )
        return list(result.scalars().all())

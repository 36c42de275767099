# tests/test_booking_eligibility.py
from datetime import date, datetime, timedelta

import pytest

from fitpass.models.booking import Booking
from fitpass.models.subscription import Subscription
from fitpass.models.venue import Venue
from fitpass.schemas.booking import BookingCreate, EligibilityReason
from fitpass.services.booking_service import BookingService
from fitpass.services.notification_service import NotificationService

TODAY = date(2024, 5, 10)


async def add_subscription(db, user, venue, start, end, pass_type="monthly", status="active"):
    sub = Subscription(
        user_id=user.id,
        venue_id=venue.id,
        pass_type=pass_type,
        start_date=start,
        end_date=end,
        price=4999,
        status=status,
        payment_method="online",
    )
    db.add(sub)
    await db.commit()
    await db.refresh(sub)
    return sub


@pytest.fixture
def service(db):
    return BookingService(db)


@pytest.mark.asyncio
async def test_no_subscription(service, member, venue):
    result = await service.check_eligibility(member.id, venue.id, TODAY, today=TODAY)
    assert result.allowed is False
    assert result.reason == EligibilityReason.NO_SUBSCRIPTION
    assert result.subscription is None


@pytest.mark.asyncio
async def test_allowed_within_window(db, service, member, venue):
    await add_subscription(db, member, venue, TODAY, TODAY + timedelta(days=30))
    result = await service.check_eligibility(member.id, venue.id, TODAY + timedelta(days=30), today=TODAY)
    assert result.allowed is True
    assert result.reason is None
    assert result.subscription.pass_type == "monthly"
    assert result.subscription.end_date == TODAY + timedelta(days=30)


@pytest.mark.asyncio
async def test_date_past_end_is_rejected(db, service, member, venue):
    end = TODAY + timedelta(days=7)
    await add_subscription(db, member, venue, TODAY, end, pass_type="weekly")
    result = await service.check_eligibility(member.id, venue.id, end + timedelta(days=1), today=TODAY)
    assert result.allowed is False
    assert result.reason == EligibilityReason.DATE_OUTSIDE_RANGE
    assert end.isoformat() in result.message
    assert result.subscription.end_date == end


@pytest.mark.asyncio
async def test_only_lapsed_subscription_reports_expired(db, service, member, venue):
    await add_subscription(db, member, venue, date(2024, 4, 1), date(2024, 5, 1))
    result = await service.check_eligibility(member.id, venue.id, TODAY, today=TODAY)
    assert result.allowed is False
    assert result.reason == EligibilityReason.SUBSCRIPTION_EXPIRED
    assert result.subscription.end_date == date(2024, 5, 1)


@pytest.mark.asyncio
async def test_cancelled_subscription_does_not_count(db, service, member, venue):
    await add_subscription(db, member, venue, TODAY, TODAY + timedelta(days=30), status="cancelled")
    result = await service.check_eligibility(member.id, venue.id, TODAY, today=TODAY)
    assert result.reason == EligibilityReason.NO_SUBSCRIPTION


@pytest.mark.asyncio
async def test_other_venue_subscription_does_not_count(db, service, member, venue, business):
    elsewhere = Venue(owner_id=business.id, name="City Library", category="library", is_active=True)
    db.add(elsewhere)
    await db.commit()
    await add_subscription(db, member, elsewhere, TODAY, TODAY + timedelta(days=30))
    result = await service.check_eligibility(member.id, venue.id, TODAY, today=TODAY)
    assert result.reason == EligibilityReason.NO_SUBSCRIPTION


@pytest.mark.asyncio
async def test_requester_must_be_owner_or_admin(db, service, member, other_member, admin, venue):
    await add_subscription(db, member, venue, TODAY, TODAY + timedelta(days=30))
    denied = await service.check_eligibility(member.id, venue.id, TODAY, requester=other_member, today=TODAY)
    assert denied.reason == EligibilityReason.UNAUTHORIZED
    allowed = await service.check_eligibility(member.id, venue.id, TODAY, requester=admin, today=TODAY)
    assert allowed.allowed is True


@pytest.mark.asyncio
async def test_latest_ending_subscription_wins(db, service, member, venue):
    await add_subscription(db, member, venue, TODAY, TODAY + timedelta(days=1), pass_type="daily")
    await add_subscription(db, member, venue, TODAY, TODAY + timedelta(days=30), pass_type="monthly")
    result = await service.check_eligibility(member.id, venue.id, TODAY + timedelta(days=20), today=TODAY)
    assert result.allowed is True
    assert result.subscription.pass_type == "monthly"

    assert await service.has_monthly_subscription(member.id, venue.id, today=TODAY)
    assert await service.get_subscription_type(member.id, venue.id, today=TODAY) == "monthly"
    assert await service.get_subscription_days_remaining(member.id, venue.id, today=TODAY) == 30


@pytest.mark.asyncio
async def test_summary_helpers_without_subscription(service, member, venue):
    assert not await service.has_monthly_subscription(member.id, venue.id, today=TODAY)
    assert await service.get_subscription_type(member.id, venue.id, today=TODAY) is None
    assert await service.get_subscription_days_remaining(member.id, venue.id, today=TODAY) == 0


@pytest.mark.asyncio
async def test_create_booking_sends_confirmations(db, service, member, venue):
    sub = await add_subscription(db, member, venue, TODAY, TODAY + timedelta(days=30))
    result = await service.create_booking(
        member,
        BookingCreate(venue_id=venue.id, booking_date=TODAY + timedelta(days=2), start_time="07:00", end_time="08:00"),
        today=TODAY,
    )
    assert result.eligibility.allowed is True
    assert result.booking.subscription_id == sub.id
    assert result.booking.status == "confirmed"
    assert result.notifications == {"sms": True, "email": True, "whatsapp": True}

    logs = await NotificationService(db).get_notification_logs(user_id=member.id)
    assert {log.type for log in logs} == {"booking_confirmation"}
    assert len(logs) == 3
    assert len(await service.list_user_bookings(member.id)) == 1


@pytest.mark.asyncio
async def test_create_booking_rejected_without_subscription(service, member, venue):
    result = await service.create_booking(member, BookingCreate(venue_id=venue.id, booking_date=TODAY), today=TODAY)
    assert result.booking is None
    assert result.eligibility.reason == EligibilityReason.NO_SUBSCRIPTION
    assert result.notifications == {}


async def add_booking(db, user, venue, sub, status="confirmed"):
    booking = Booking(
        user_id=user.id,
        venue_id=venue.id,
        subscription_id=sub.id,
        booking_date=TODAY + timedelta(days=1),
        status=status,
    )
    db.add(booking)
    await db.commit()
    await db.refresh(booking)
    return booking


@pytest.mark.asyncio
async def test_get_booking_is_owner_scoped(db, service, member, other_member, venue):
    sub = await add_subscription(db, member, venue, TODAY, TODAY + timedelta(days=30))
    booking = await add_booking(db, member, venue, sub)

    assert (await service.get_booking(booking.id, member.id)).id == booking.id
    assert await service.get_booking(booking.id, other_member.id) is None
    assert (await service.get_booking(booking.id)).id == booking.id
    assert await service.get_booking(9999, member.id) is None


@pytest.mark.asyncio
async def test_cancel_booking_by_owner(db, service, member, venue):
    sub = await add_subscription(db, member, venue, TODAY, TODAY + timedelta(days=30))
    booking = await add_booking(db, member, venue, sub)
    cancelled_at = datetime(2024, 5, 10, 9, 30)

    result = await service.cancel_booking(booking.id, member.id, "user", reason="sick", now=cancelled_at)

    assert result.success is True
    assert result.booking.status == "cancelled"
    assert result.booking.cancel_reason == "sick"
    stored = await service.get_booking(booking.id)
    assert stored.status == "cancelled"
    assert stored.cancelled_at.replace(tzinfo=None) == cancelled_at


@pytest.mark.asyncio
async def test_cancel_booking_twice_is_refused(db, service, member, venue):
    sub = await add_subscription(db, member, venue, TODAY, TODAY + timedelta(days=30))
    booking = await add_booking(db, member, venue, sub, status="cancelled")

    result = await service.cancel_booking(booking.id, member.id)

    assert result.success is False
    assert result.reason == "ALREADY_CANCELLED"
    assert result.booking.id == booking.id


@pytest.mark.asyncio
async def test_cancel_booking_requires_owner_or_admin(db, service, member, other_member, admin, venue):
    sub = await add_subscription(db, member, venue, TODAY, TODAY + timedelta(days=30))
    booking = await add_booking(db, member, venue, sub)

    result = await service.cancel_booking(booking.id, other_member.id, "user")
    assert result.success is False
    assert result.reason == "UNAUTHORIZED"
    assert (await service.get_booking(booking.id)).status == "confirmed"

    result = await service.cancel_booking(booking.id, admin.id, "admin")
    assert result.success is True


@pytest.mark.asyncio
async def test_cancel_missing_booking(service, member):
    result = await service.cancel_booking(9999, member.id)
    assert result.success is False
    assert result.reason == "NOT_FOUND"

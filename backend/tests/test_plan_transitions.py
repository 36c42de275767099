# tests/test_plan_transitions.py
from datetime import date, datetime, timedelta

import pytest

from fitpass.services.plan_catalog import get_plan_details, is_plan_downgrade, is_plan_upgrade, plan_rank
from fitpass.services.plan_transition_service import PlanTransitionService

NOW = datetime(2024, 1, 1, 10, 0)
TODAY = NOW.date()


@pytest.fixture
def service(db):
    return PlanTransitionService(db)


def test_plan_ordering():
    assert plan_rank("starter") < plan_rank("growth") < plan_rank("enterprise")
    assert is_plan_upgrade("starter", "enterprise")
    assert is_plan_downgrade("enterprise", "growth")
    assert not is_plan_upgrade("growth", "growth")
    with pytest.raises(ValueError):
        plan_rank("platinum")
    with pytest.raises(ValueError):
        get_plan_details("platinum")


@pytest.mark.asyncio
async def test_init_subscription_is_idempotent(service, business):
    first = await service.init_subscription(business.id, now=NOW)
    second = await service.init_subscription(business.id, now=NOW + timedelta(days=3))
    assert first.id == second.id
    assert first.current_plan == "starter"
    assert first.end_date == TODAY + timedelta(days=30)

    txns = await service.get_transactions(business.id)
    assert [t.type for t in txns] == ["new"]


@pytest.mark.asyncio
async def test_upgrade_takes_effect_immediately(service, business):
    await service.init_subscription(business.id, now=NOW)
    later = NOW + timedelta(days=10)
    sub, txn = await service.upgrade(business.id, "growth", "card", now=later)

    assert sub.current_plan == "growth"
    assert sub.start_date == later.date()
    assert sub.end_date == later.date() + timedelta(days=30)
    assert txn.type == "upgrade"
    assert txn.status == "success"
    assert float(txn.amount) == 3999
    assert txn.from_plan == "starter" and txn.to_plan == "growth"
    assert txn.order_id.startswith("BORD20240111")


@pytest.mark.asyncio
async def test_upgrade_rejects_same_or_lower_plan(service, business):
    await service.upgrade(business.id, "growth", now=NOW)
    with pytest.raises(ValueError):
        await service.upgrade(business.id, "growth", now=NOW)
    with pytest.raises(ValueError):
        await service.upgrade(business.id, "starter", now=NOW)


@pytest.mark.asyncio
async def test_schedule_downgrade_keeps_current_plan(service, business):
    sub, _ = await service.upgrade(business.id, "enterprise", now=NOW)
    cycle_end = sub.end_date

    sub, txn = await service.schedule_downgrade(business.id, "growth", now=NOW + timedelta(days=5))
    assert sub.current_plan == "enterprise"
    assert sub.scheduled_downgrade["to_plan"] == "growth"
    assert sub.scheduled_downgrade["effective_date"] == cycle_end
    assert txn.status == "pending"
    assert float(txn.amount) == 0


@pytest.mark.asyncio
async def test_schedule_downgrade_requires_subscription_and_lower_plan(service, business):
    with pytest.raises(ValueError):
        await service.schedule_downgrade(business.id, "starter", now=NOW)
    await service.init_subscription(business.id, now=NOW)
    with pytest.raises(ValueError):
        await service.schedule_downgrade(business.id, "growth", now=NOW)


@pytest.mark.asyncio
async def test_upgrade_clears_scheduled_downgrade(service, business):
    await service.upgrade(business.id, "growth", now=NOW)
    await service.schedule_downgrade(business.id, "starter", now=NOW)
    sub, _ = await service.upgrade(business.id, "enterprise", now=NOW + timedelta(days=1))
    assert sub.scheduled_downgrade is None


@pytest.mark.asyncio
async def test_cancel_scheduled_downgrade_records_nothing(service, business):
    await service.upgrade(business.id, "growth", now=NOW)
    await service.schedule_downgrade(business.id, "starter", now=NOW)
    before = len(await service.get_transactions(business.id))

    sub = await service.cancel_scheduled_downgrade(business.id)
    assert sub.scheduled_downgrade is None
    assert sub.current_plan == "growth"
    assert len(await service.get_transactions(business.id)) == before


@pytest.mark.asyncio
async def test_cancel_scheduled_downgrade_without_subscription(service, business):
    assert await service.cancel_scheduled_downgrade(business.id) is None


@pytest.mark.asyncio
async def test_change_plan_dispatches_by_rank(service, business):
    sub, txn = await service.change_plan(business.id, "enterprise", now=NOW)
    assert txn.type == "upgrade" and sub.current_plan == "enterprise"

    sub, txn = await service.change_plan(business.id, "starter", now=NOW)
    assert txn.type == "downgrade" and txn.status == "pending"
    assert sub.current_plan == "enterprise"

    with pytest.raises(ValueError):
        await service.change_plan(business.id, "enterprise", now=NOW)
    with pytest.raises(ValueError):
        await service.change_plan(business.id, "platinum", now=NOW)


@pytest.mark.asyncio
async def test_apply_due_downgrades(service, business):
    sub, _ = await service.upgrade(business.id, "growth", now=NOW)
    effective = sub.end_date
    _, pending = await service.schedule_downgrade(business.id, "starter", now=NOW)

    assert await service.apply_due_downgrades(effective - timedelta(days=1)) == []

    applied = await service.apply_due_downgrades(effective)
    assert [s.business_id for s in applied] == [business.id]
    sub = await service.get_subscription(business.id)
    assert sub.current_plan == "starter"
    assert sub.start_date == effective
    assert sub.end_date == effective + timedelta(days=30)
    assert sub.scheduled_downgrade is None

    txns = await service.get_transactions(business.id)
    assert txns[0].type == "downgrade" and txns[0].status == "success"
    assert pending.status == "pending"
    assert [t.status for t in txns].count("pending") == 1

    # already applied
    assert await service.apply_due_downgrades(effective + timedelta(days=1)) == []


@pytest.mark.asyncio
async def test_transactions_are_newest_first(service, business):
    await service.init_subscription(business.id, now=NOW)
    await service.upgrade(business.id, "growth", now=NOW + timedelta(days=1))
    await service.schedule_downgrade(business.id, "starter", now=NOW + timedelta(days=2))
    txns = await service.get_transactions(business.id)
    assert [t.type for t in txns] == ["downgrade", "upgrade", "new"]
    assert [t.id for t in await service.get_all_transactions()] == [t.id for t in txns]

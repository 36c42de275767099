# tests/test_pass_approval.py
import pytest

from fitpass.schemas.pass_config import PassConfigUpdate
from fitpass.services.pass_config_service import PassConfigService, to_response


@pytest.fixture
def service(db):
    return PassConfigService(db)


@pytest.mark.asyncio
async def test_default_config_is_closed(service, business):
    config = await service.get_config(business.id)
    response = to_response(config)
    assert response.active_pass_types == []
    assert response.pending_approval is False
    assert response.daily_price == 299
    assert response.monthly_price == 4999
    # defaults are not persisted
    assert await service.configs.get_by_business(business.id) is None


@pytest.mark.asyncio
async def test_request_then_approve(service, business):
    config = await service.request_pass_approval(business.id, "weekly")
    assert config.is_enabled("weekly")
    assert config.pending_approval is True
    assert not await service.is_pass_type_active(business.id, "weekly")
    assert await service.has_pending_approval(business.id)

    await service.approve_pass(business.id, "weekly")
    assert await service.is_pass_type_active(business.id, "weekly")
    assert not await service.has_pending_approval(business.id)


@pytest.mark.asyncio
async def test_approval_alone_does_not_activate(service, business):
    await service.set_admin_approval(business.id, "daily", True)
    assert not await service.is_pass_type_active(business.id, "daily")
    assert not await service.has_pending_approval(business.id)


@pytest.mark.asyncio
async def test_disabling_clears_approval(service, business):
    await service.request_pass_approval(business.id, "monthly")
    await service.approve_pass(business.id, "monthly")

    await service.update_pass_config(business.id, PassConfigUpdate(monthly_enabled=False))
    config = await service.get_config(business.id)
    assert not config.is_approved("monthly")

    await service.update_pass_config(business.id, PassConfigUpdate(monthly_enabled=True, monthly_price=3999))
    config = await service.get_config(business.id)
    assert config.pending_approval is True
    assert config.price_of("monthly") == 3999
    assert not await service.is_pass_type_active(business.id, "monthly")


@pytest.mark.asyncio
async def test_revoking_approval_deactivates(service, business):
    await service.request_pass_approval(business.id, "daily")
    await service.approve_pass(business.id, "daily")
    await service.set_admin_approval(business.id, "daily", False)
    assert not await service.is_pass_type_active(business.id, "daily")
    assert await service.has_pending_approval(business.id)


@pytest.mark.asyncio
async def test_reject_disables_type(service, business):
    await service.request_pass_approval(business.id, "daily")
    config = await service.reject_pass(business.id, "daily")
    assert not config.is_enabled("daily")
    assert not config.is_approved("daily")
    assert config.pending_approval is False


@pytest.mark.asyncio
async def test_bulk_approve_and_reject(service, business):
    await service.request_pass_approval(business.id, "daily")
    await service.request_pass_approval(business.id, "weekly")
    config = await service.approve_all_pending(business.id)
    assert to_response(config).active_pass_types == ["daily", "weekly"]
    assert not config.is_approved("monthly")

    await service.request_pass_approval(business.id, "monthly")
    config = await service.reject_all_pending(business.id)
    assert to_response(config).active_pass_types == ["daily", "weekly"]
    assert not config.is_enabled("monthly")
    assert config.pending_approval is False


@pytest.mark.asyncio
async def test_list_pending_approvals(service, business, make_user):
    quiet = await make_user("quietgym", role="business")
    await service.request_pass_approval(business.id, "weekly")
    await service.request_pass_approval(quiet.id, "daily")
    await service.approve_pass(quiet.id, "daily")

    pending = await service.list_pending_approvals()
    assert [c.business_id for c in pending] == [business.id]


@pytest.mark.asyncio
async def test_unknown_pass_type(service, business):
    with pytest.raises(ValueError):
        await service.request_pass_approval(business.id, "annual")
    with pytest.raises(ValueError):
        await service.is_pass_type_active(business.id, "annual")

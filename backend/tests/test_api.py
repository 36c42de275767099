# tests/test_api.py
from datetime import date, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from fitpass.core.database import get_db
from fitpass.main import app
from fitpass.models.subscription import Subscription
from fitpass.repositories.pass_config import PassConfigRepository
from fitpass.services.auth_service import create_access_token


def auth_headers(user):
    token = create_access_token(user.username, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(session_factory):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_register_login_and_me(client):
    payload = {"username": "carol", "email": "carol@example.com", "password": "s3cret-pass", "role": "business"}
    resp = await client.post("/api/v1/auth/register", json=payload)
    assert resp.status_code == 201
    assert resp.json()["role"] == "business"

    resp = await client.post("/api/v1/auth/register", json=payload)
    assert resp.status_code == 409

    resp = await client.post(
        "/api/v1/auth/register",
        json={"username": "mallory", "email": "m@example.com", "password": "secret-pass", "role": "admin"},
    )
    assert resp.status_code == 400

    resp = await client.post("/api/v1/auth/login", data={"username": "carol", "password": "s3cret-pass"})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.json()["username"] == "carol"

    resp = await client.post("/api/v1/auth/login", data={"username": "carol", "password": "wrong"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_errors_carry_request_id(client, member):
    resp = await client.get("/api/v1/venues/4040", headers={"X-Request-ID": "req-123"})
    assert resp.status_code == 404
    assert resp.headers["X-Request-ID"] == "req-123"
    assert resp.json()["request_id"] == "req-123"

    resp = await client.get("/api/v1/admin/pass-approvals", headers=auth_headers(member))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_pass_approval_purchase_and_booking_flow(client, member, business, admin):
    resp = await client.post(
        "/api/v1/venues", json={"name": "Quiet Reads", "category": "library"}, headers=auth_headers(business)
    )
    assert resp.status_code == 201
    venue_id = resp.json()["id"]

    resp = await client.post(
        "/api/v1/subscriptions", json={"venue_id": venue_id, "pass_type": "daily"}, headers=auth_headers(member)
    )
    assert resp.status_code == 409

    resp = await client.post("/api/v1/business/pass-config/request/daily", headers=auth_headers(business))
    assert resp.json()["pending_approval"] is True

    resp = await client.get("/api/v1/admin/pass-approvals", headers=auth_headers(admin))
    assert [c["business_id"] for c in resp.json()["configs"]] == [business.id]

    resp = await client.post(
        f"/api/v1/admin/pass-approvals/{business.id}/daily/approve", headers=auth_headers(admin)
    )
    assert resp.json()["active_pass_types"] == ["daily"]

    resp = await client.post(
        "/api/v1/subscriptions", json={"venue_id": venue_id, "pass_type": "daily"}, headers=auth_headers(member)
    )
    assert resp.status_code == 201
    sub = resp.json()
    assert sub["status"] == "active"
    assert sub["price"] == 299

    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    resp = await client.get(
        "/api/v1/bookings/eligibility", params={"venue_id": venue_id, "date": tomorrow}, headers=auth_headers(member)
    )
    assert resp.json()["allowed"] is True

    too_late = (date.today() + timedelta(days=2)).isoformat()
    resp = await client.get(
        "/api/v1/bookings/eligibility", params={"venue_id": venue_id, "date": too_late}, headers=auth_headers(member)
    )
    assert resp.json()["reason"] == "DATE_OUTSIDE_RANGE"

    resp = await client.post(
        "/api/v1/bookings", json={"venue_id": venue_id, "booking_date": tomorrow}, headers=auth_headers(member)
    )
    assert resp.json()["booking"]["subscription_id"] == sub["id"]

    resp = await client.post(f"/api/v1/subscriptions/{sub['id']}/cancel", headers=auth_headers(member))
    assert resp.json()["success"] is True

    resp = await client.get("/api/v1/audit-logs", headers=auth_headers(admin))
    actions = {item["action"] for item in resp.json()["items"]}
    assert {"approve_pass", "request_pass_approval", "cancel_subscription"} <= actions

    resp = await client.get("/api/v1/notifications/logs", headers=auth_headers(business))
    types = {item["type"] for item in resp.json()["items"]}
    assert {"pass_purchase", "booking_confirmation"} <= types


@pytest.mark.asyncio
async def test_business_plan_endpoints(client, business, admin, member):
    resp = await client.get("/api/v1/business/plan", headers=auth_headers(business))
    assert resp.json()["current_plan"] == "starter"

    resp = await client.post(
        "/api/v1/business/plan/change", json={"to_plan": "growth"}, headers=auth_headers(business)
    )
    body = resp.json()
    assert body["subscription"]["current_plan"] == "growth"
    assert body["transaction"]["type"] == "upgrade"

    resp = await client.post(
        "/api/v1/business/plan/downgrade", json={"to_plan": "starter"}, headers=auth_headers(business)
    )
    body = resp.json()
    assert body["subscription"]["current_plan"] == "growth"
    assert body["subscription"]["scheduled_downgrade"]["to_plan"] == "starter"
    assert body["transaction"]["status"] == "pending"

    resp = await client.post(
        "/api/v1/business/plan/upgrade", json={"to_plan": "starter"}, headers=auth_headers(business)
    )
    assert resp.status_code == 400

    resp = await client.delete("/api/v1/business/plan/downgrade", headers=auth_headers(business))
    assert resp.json()["scheduled_downgrade"] is None

    resp = await client.get("/api/v1/business/plan/transactions", headers=auth_headers(business))
    assert [t["type"] for t in resp.json()["transactions"]] == ["downgrade", "upgrade", "new"]

    resp = await client.post("/api/v1/admin/downgrades/apply", headers=auth_headers(admin))
    assert resp.json() == {"applied": 0, "business_ids": []}

    resp = await client.get("/api/v1/business/plan", headers=auth_headers(member))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_notification_settings_endpoints(client, business, member):
    resp = await client.put(
        "/api/v1/notifications/business/cap", json={"channel": "sms", "cap": 100}, headers=auth_headers(business)
    )
    assert resp.json()["daily_cap_per_user"]["sms"] == 20

    resp = await client.put(
        "/api/v1/notifications/business",
        json={"channel": "whatsapp", "enabled": False},
        headers=auth_headers(business),
    )
    assert resp.json()["channels_enabled"]["whatsapp"] is False

    resp = await client.put(
        "/api/v1/notifications/preferences", json={"channel": "sms", "enabled": False}, headers=auth_headers(member)
    )
    body = resp.json()
    assert body["enabled"]["sms"] is False
    assert body["daily_usage"] == {"sms": 0, "email": 0, "whatsapp": 0}

    resp = await client.put(
        "/api/v1/notifications/business/cap", json={"channel": "fax", "cap": 1}, headers=auth_headers(business)
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_health_reports_degraded_dependencies(client, monkeypatch, fake_redis):
    from fitpass.core import health

    async def db_down():
        return False, "connection refused"

    monkeypatch.setattr(health, "check_db", db_down)
    resp = await client.get("/health")
    body = resp.json()
    assert body["status"] == "degraded"
    assert body["dependencies"]["database"]["ok"] is False
    assert body["dependencies"]["redis"]["ok"] is True


@pytest.mark.asyncio
async def test_admin_approval_rejects_unknown_or_non_business_target(client, session_factory, admin, member):
    resp = await client.post("/api/v1/admin/pass-approvals/9999/daily/approve", headers=auth_headers(admin))
    assert resp.status_code == 404

    async with session_factory() as session:
        assert await PassConfigRepository(session).get_by_business(9999) is None

    for method, path, kwargs in [
        ("post", f"/api/v1/admin/pass-approvals/{member.id}/daily/approve", {}),
        ("post", f"/api/v1/admin/pass-approvals/{member.id}/daily/reject", {}),
        ("put", f"/api/v1/admin/pass-approvals/{member.id}/daily", {"json": {"approved": True}}),
        ("post", f"/api/v1/admin/pass-approvals/{member.id}/approve-all", {}),
        ("post", f"/api/v1/admin/pass-approvals/{member.id}/reject-all", {}),
    ]:
        resp = await client.request(method.upper(), path, headers=auth_headers(admin), **kwargs)
        assert resp.status_code == 400, path

    async with session_factory() as session:
        assert await PassConfigRepository(session).get_by_business(member.id) is None

    resp = await client.post("/api/v1/admin/pass-approvals/9999/approve-all", headers=auth_headers(admin))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_booking_detail_and_cancel(client, db, member, other_member, venue):
    today = date.today()
    sub = Subscription(
        user_id=member.id, venue_id=venue.id, pass_type="weekly", start_date=today,
        end_date=today + timedelta(days=7), price=1499, status="active", payment_method="online",
    )
    db.add(sub)
    await db.commit()

    resp = await client.post(
        "/api/v1/bookings",
        json={"venue_id": venue.id, "booking_date": (today + timedelta(days=2)).isoformat()},
        headers=auth_headers(member),
    )
    booking_id = resp.json()["booking"]["id"]

    resp = await client.get(f"/api/v1/bookings/{booking_id}", headers=auth_headers(member))
    assert resp.status_code == 200
    assert resp.json()["status"] == "confirmed"

    resp = await client.get(f"/api/v1/bookings/{booking_id}", headers=auth_headers(other_member))
    assert resp.status_code == 404

    resp = await client.post(f"/api/v1/bookings/{booking_id}/cancel", headers=auth_headers(other_member))
    assert resp.json()["reason"] == "UNAUTHORIZED"

    resp = await client.post(
        f"/api/v1/bookings/{booking_id}/cancel", json={"reason": "travelling"}, headers=auth_headers(member)
    )
    body = resp.json()
    assert body["success"] is True
    assert body["booking"]["status"] == "cancelled"
    assert body["booking"]["cancel_reason"] == "travelling"

    resp = await client.post(f"/api/v1/bookings/{booking_id}/cancel", headers=auth_headers(member))
    assert resp.json()["reason"] == "ALREADY_CANCELLED"


@pytest.mark.asyncio
async def test_can_delete_is_limited_to_member_owner_and_admin(client, db, member, other_member, business, admin, venue):
    sub = Subscription(
        user_id=member.id, venue_id=venue.id, pass_type="monthly", start_date=date.today(),
        end_date=date.today() + timedelta(days=30), price=4999, status="active", payment_method="online",
    )
    db.add(sub)
    await db.commit()
    await db.refresh(sub)
    path = f"/api/v1/subscriptions/{sub.id}/can-delete"

    resp = await client.get(path, headers=auth_headers(other_member))
    assert resp.status_code == 403

    for user in (member, business, admin):
        resp = await client.get(path, headers=auth_headers(user))
        assert resp.status_code == 200
        assert resp.json()["can_delete"] is False

    resp = await client.get("/api/v1/subscriptions/9999/can-delete", headers=auth_headers(member))
    assert resp.status_code == 404

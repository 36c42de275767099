# tests/conftest.py
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import fitpass.models  # noqa: F401
from fitpass.core.database import Base
from fitpass.models.user import User
from fitpass.models.venue import Venue
from fitpass.services import rate_limit_service


class FakeRedis:
    """In-memory stand-in for the few redis commands the rate limiter uses"""

    def __init__(self):
        self.store = {}
        self.ttl = {}

    def get(self, key):
        value = self.store.get(key)
        return None if value is None else str(value)

    def incr(self, key):
        self.store[key] = int(self.store.get(key, 0)) + 1
        return self.store[key]

    def expire(self, key, seconds):
        self.ttl[key] = seconds
        return True

    def ping(self):
        return True


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    client = FakeRedis()
    monkeypatch.setattr(rate_limit_service, "_redis_client", client)
    return client


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def create_user(db, username, role="user", phone="9000000000"):
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash="not-a-real-hash",
        full_name=username.title(),
        phone=phone,
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def member(db):
    return await create_user(db, "alice")


@pytest.fixture
async def other_member(db):
    return await create_user(db, "bob")


@pytest.fixture
async def business(db):
    return await create_user(db, "ironworks", role="business", phone="9111111111")


@pytest.fixture
async def admin(db):
    return await create_user(db, "root", role="admin")


@pytest.fixture
async def venue(db, business):
    venue = Venue(owner_id=business.id, name="Iron Works Gym", category="gym", city="Pune", is_active=True)
    db.add(venue)
    await db.commit()
    await db.refresh(venue)
    return venue


@pytest.fixture
def make_user(db):
    async def _make(username, role="user", phone="9000000000"):
        return await create_user(db, username, role=role, phone=phone)
    return _make

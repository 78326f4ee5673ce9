import os
from typing import AsyncGenerator

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ["RATE_LIMIT_ENABLED"] = "False"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from restopos.auth.auth import create_access_token
from restopos.database.database import Base, get_db
from restopos.main import app
from restopos.models.models import User
from restopos.schemas.user_schema import UserRole
from restopos.services import cart_service, menu_service
from restopos.services.auth_service import hash_password
from restopos.services.realtime_service import manager

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")
TEST_PASSWORD = "@Password123"


class InMemoryRedis:
    """Stands in for the sync redis client used for caching and carts."""

    def __init__(self):
        self.store: dict[str, str] = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ex=None):
        self.store[key] = value
        return True

    def delete(self, *keys):
        return sum(1 for key in keys if self.store.pop(key, None) is not None)


class RecordingPublisher:
    """Stands in for the async redis client the resource feed publishes on."""

    def __init__(self):
        self.published: list[tuple[str, str]] = []

    async def publish(self, channel, message):
        self.published.append((channel, message))
        return 1


@pytest.fixture
def fake_redis(monkeypatch) -> InMemoryRedis:
    fake = InMemoryRedis()
    monkeypatch.setattr(menu_service, "redis_client", fake)
    monkeypatch.setattr(cart_service, "redis_client", fake)
    return fake


@pytest.fixture
def publisher(monkeypatch) -> RecordingPublisher:
    fake = RecordingPublisher()
    monkeypatch.setattr(manager, "redis", fake)
    return fake


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """
    A fresh database per test function.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
        if TEST_DATABASE_URL.startswith("sqlite")
        else {},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(
    session_factory, fake_redis, publisher
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a new httpx client instance for each test function.
    """

    async def get_test_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = get_test_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client
    app.dependency_overrides.clear()


async def make_user(db: AsyncSession, email: str, role: UserRole) -> User:
    user = User(
        email=email,
        full_name=email.split("@")[0].title(),
        password=hash_password(TEST_PASSWORD),
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    return user


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_user(test_db: AsyncSession) -> User:
    return await make_user(test_db, "admin@restopos.io", UserRole.ADMIN)


@pytest_asyncio.fixture
async def waiter_user(test_db: AsyncSession) -> User:
    return await make_user(test_db, "waiter@restopos.io", UserRole.WAITER)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return auth_headers(admin_user)


@pytest.fixture
def waiter_headers(waiter_user: User) -> dict:
    return auth_headers(waiter_user)


async def create_category(client: AsyncClient, headers: dict, **overrides) -> dict:
    data = {"name": "Main Course", "description": "Mains", "sort_order": 1}
    data.update(overrides)
    response = await client.post("/api/menu/categories", json=data, headers=headers)
    assert response.status_code == 201
    return response.json()


async def create_menu_item(
    client: AsyncClient, headers: dict, category_id: int, **overrides
) -> dict:
    data = {
        "name": "Veg Pizza",
        "description": "Cheese and peppers",
        "base_price": "250",
        "category_id": category_id,
        "is_vegetarian": True,
    }
    data.update(overrides)
    response = await client.post("/api/menu/items", json=data, headers=headers)
    assert response.status_code == 201
    return response.json()


def fail_commits(db: AsyncSession, monkeypatch: pytest.MonkeyPatch) -> list:
    """
    Make every later commit on ``db`` fail; returns the rollbacks it sees.
    """
    rollbacks = []
    real_rollback = db.rollback

    async def commit():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    async def rollback():
        rollbacks.append(True)
        await real_rollback()

    monkeypatch.setattr(db, "commit", commit)
    monkeypatch.setattr(db, "rollback", rollback)
    return rollbacks

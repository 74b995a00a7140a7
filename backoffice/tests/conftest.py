"""
Centralized Test Configuration.
"""

from datetime import datetime, timedelta, timezone

import httpx
import pytest
from httpx import AsyncClient, ASGITransport
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from backoffice.app.main import app
from backoffice.app.core.config import settings
from backoffice.app.core.dependencies import get_clock, get_http_client
from backoffice.app.core.jwt import create_access_token
from backoffice.app.core.redis_client import get_redis
from backoffice.app.core.security import get_password_hash
from backoffice.app.db.session import get_db, Base
from backoffice.app.models.driver import Driver
from backoffice.app.models.enums import UserRole
from backoffice.app.models.user import User

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

PLAN_URL = "http://upstream.test/plans"
ROUTE_GROUPS_URL = "http://upstream.test/route-groups"
DELIVERY_ROUTES_URL = "http://upstream.test/routes"
BEARER_TOKEN = "upstream-secret"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self.broken = False

    def _check(self):
        if self.broken:
            raise RedisConnectionError("redis is down")

    async def ping(self):
        self._check()
        return True

    async def setex(self, key, ttl, value):
        self._check()
        self.store[key] = value
        return True

    async def delete(self, key):
        self._check()
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def exists(self, key):
        self._check()
        return 1 if key in self.store else 0

    async def flushdb(self):
        self.store = {}

    async def aclose(self):
        self.store = {}


class FakeUpstream:
    """
    Stand-in for the external services behind an ``httpx.MockTransport``.

    Unknown URLs answer 404; every request is recorded.
    """

    def __init__(self):
        self.responses = {}
        self.requests = []

    def add(self, url, status_code=200, json=None, content=None):
        self.responses[url] = (status_code, json, content)

    def fail(self, url):
        self.responses[url] = "error"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        entry = self.responses.get(str(request.url))
        if entry is None:
            return httpx.Response(404, json={"message": "not found"})
        if entry == "error":
            raise httpx.ConnectError("connection refused", request=request)
        status_code, body, content = entry
        if content is not None:
            return httpx.Response(status_code, content=content)
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def redis_client():
    return MockRedis()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc))


@pytest.fixture(autouse=True)
async def apply_overrides(redis_client, upstream, clock, monkeypatch):
    """Point the app at the test database, fake Redis, fake upstream and frozen clock."""
    monkeypatch.setattr(settings, "plan_external_service_url", PLAN_URL)
    monkeypatch.setattr(settings, "route_groups_external_service_url", ROUTE_GROUPS_URL)
    monkeypatch.setattr(settings, "external_service_url", DELIVERY_ROUTES_URL)
    monkeypatch.setattr(settings, "bearer_token", BEARER_TOKEN)
    monkeypatch.setattr(settings, "login_delay_seconds", 0)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    async def override_get_redis():
        return redis_client

    async def override_get_http_client():
        return http_client

    def override_get_clock():
        return clock

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_http_client] = override_get_http_client
    app.dependency_overrides[get_clock] = override_get_clock
    yield

    app.dependency_overrides = {}
    await http_client.aclose()


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def user_factory(db_session):
    async def create(
        email="user@example.com",
        password="secret-pass",
        role=UserRole.USER,
        is_active=True,
        name="Test User",
    ) -> User:
        user = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return create


def _auth_headers(user: User) -> dict:
    token = create_access_token(data={"sub": user.id, "user_id": user.id, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_headers(user_factory):
    admin = await user_factory(email="admin@example.com", role=UserRole.ADMIN, name="Admin")
    return _auth_headers(admin)


@pytest.fixture
async def drivers(db_session):
    rows = [Driver(id=1, name="Carlos Mendoza"), Driver(id=2, name="Lucia Fernandez")]
    db_session.add_all(rows)
    await db_session.commit()
    return rows


@pytest.fixture
def headers_for():
    """Build a bearer header carrying a fresh session token for ``user``."""
    return _auth_headers

"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from parceltrack.app.main import app
from parceltrack.app.core.config import settings
from parceltrack.app.db.session import get_db, Base
import parceltrack.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Cheap hashes keep the suite fast
settings.bcrypt_rounds = 4


def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False
    
    async def ping(self):
        if self._closed:
            return False
        return True
    
    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)
        
    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True
    
    async def setex(self, key, ttl, value):
        return await self.set(key, value, ex=ttl)
    
    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0
    
    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0
        
    async def flushdb(self):
        if not self._closed:
            self.store = {}
        
    async def aclose(self):
        self._closed = True
        self.store = {}


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(test_engine.sync_engine, "connect", set_sqlite_pragma)
    
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    yield test_engine
    
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Session for fixture data creation and direct service tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_redis():
    return MockRedis()


@pytest.fixture(autouse=True)
def apply_overrides(session_factory, mock_redis):
    """Point the app at the test database and the in-memory Redis."""
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = mock_redis
    
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield
    
    # Restore and clear
    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def register(client, name, email, role="sender", password="password123"):
    """Register a user through the API; returns (token, user dict)."""
    response = await client.post("/v1/auth/register", json={
        "name": name,
        "email": email,
        "password": password,
        "role": role,
    })
    assert response.status_code == 201, response.text
    body = response.json()
    return body["access_token"], body["user"]


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def sender(client):
    return await register(client, "Sam Sender", "sam@parcels.io", "sender")


@pytest.fixture
async def receiver(client):
    return await register(client, "Rita Receiver", "rita@parcels.io", "receiver")


@pytest.fixture
async def courier(client):
    return await register(client, "Dan Delivery", "dan@parcels.io", "delivery")


@pytest.fixture
async def admin(client, db_session):
    """Admins cannot self-register: create one directly, then log in."""
    from parceltrack.app.core.security import get_password_hash
    from parceltrack.app.models.enums import UserRole
    from parceltrack.app.models.user import User
    
    db_session.add(User(
        name="Ada Admin",
        email="ada@parcels.io",
        hashed_password=get_password_hash("admin123", settings.bcrypt_rounds),
        role=UserRole.ADMIN,
        is_blocked=False,
    ))
    await db_session.commit()
    
    response = await client.post("/v1/auth/login", json={"email": "ada@parcels.io", "password": "admin123"})
    assert response.status_code == 200, response.text
    body = response.json()
    return body["access_token"], body["user"]

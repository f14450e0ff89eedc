"""
Centralized Test Configuration.
"""

import itertools

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from backend.app.main import app
from backend.app.db.session import get_db, Base
import backend.app.core.redis_client as redis_client_module
from backend.app.core.security import get_password_hash
from backend.app.core.jwt import create_account_token
from backend.app.models.passenger import Passenger
from backend.app.models.driver import Driver
from backend.app.models.admin import Admin
from backend.app.models.vehicle import Vehicle
from backend.app.models.enums import AccountType, AdminRole, DriverStatus

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "password123"
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)

# Event handler to enable foreign keys for SQLite
from sqlalchemy import event
from sqlalchemy.pool import Pool

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
    engine, class_=AsyncSession, expire_on_commit=False
)


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

    async def setex(self, key, seconds, value):
        if self._closed:
            raise ConnectionError("Redis is closed")
        self.store[key] = value
        self.ttls[key] = seconds
        return True

    async def exists(self, key):
        if self._closed:
            raise ConnectionError("Redis is closed")
        return 1 if key in self.store else 0

    async def flushdb(self):
        self.store = {}
        self.ttls = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


# Redis Fixture (Session Scope)
@pytest.fixture(scope="session")
def redis_client_session():
    return MockRedis()


@pytest.fixture(scope="session", autouse=True)
def apply_overrides(redis_client_session):
    """Apply overrides once for the session."""

    # Patch the global redis client used by token revocation and /health
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = redis_client_session

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield

    # Restore and clear
    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client


@pytest.fixture(autouse=True)
async def setup_database(redis_client_session):
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await redis_client_session.flushdb()
    redis_client_session._closed = False

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


# Account factories

def auth_headers(account, account_type: AccountType) -> dict:
    token = create_account_token(account.id, account_type.value, account.email)
    return {"Authorization": f"Bearer {token}"}


_sequence = itertools.count(1)


@pytest.fixture
def make_passenger(db_session):
    async def _make(full_name="Asha Verma", email=None, phone=None):
        n = next(_sequence)
        passenger = Passenger(
            full_name=full_name,
            email=email or f"passenger{n}@test.com",
            phone=phone or f"91{n:08d}",
            hashed_password=TEST_PASSWORD_HASH
        )
        db_session.add(passenger)
        await db_session.commit()
        await db_session.refresh(passenger)
        return passenger
    return _make


@pytest.fixture
def make_driver(db_session):
    """Driver, optionally owning one vehicle of ``vehicle_type``."""
    async def _make(full_name="Ravi Kumar", status=DriverStatus.ACTIVE, vehicle_type=None, email=None):
        n = next(_sequence)
        driver = Driver(
            full_name=full_name,
            email=email or f"driver{n}@test.com",
            phone=f"92{n:08d}",
            license_no=f"DL-{n:06d}",
            status=status,
            hashed_password=TEST_PASSWORD_HASH
        )
        db_session.add(driver)
        await db_session.flush()

        if vehicle_type is not None:
            db_session.add(Vehicle(
                driver_id=driver.id,
                model=f"{vehicle_type.value} Model {n}",
                capacity=4,
                vehicle_type=vehicle_type
            ))

        await db_session.commit()
        await db_session.refresh(driver)
        return driver
    return _make


@pytest.fixture
async def admin(db_session):
    account = Admin(
        name="Platform Admin",
        email="admin@test.com",
        role=AdminRole.SUPER_ADMIN,
        hashed_password=TEST_PASSWORD_HASH
    )
    db_session.add(account)
    await db_session.commit()
    await db_session.refresh(account)
    return account


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin, AccountType.ADMIN)


@pytest.fixture
def headers_for():
    """headers_for(account, AccountType) -> Authorization header for that account."""
    return auth_headers

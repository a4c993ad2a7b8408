"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from fleet_ledger.app.main import app
from fleet_ledger.app.db.session import get_db, Base
import fleet_ledger.app.core.redis_client as redis_client_module
from fleet_ledger.app.models.vehicle import Vehicle
from fleet_ledger.app.models.driver import Driver
from fleet_ledger.app.models.client import Client
from fleet_ledger.app.models.enums import VehicleStatus
from fleet_ledger.app.services.ledger_store import LedgerStore
from fleet_ledger.app.services.refresh import refresh_notifier

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.published = []
        self._closed = False

    async def publish(self, channel, message):
        if self._closed:
            raise RedisConnectionError("Connection closed by server.")
        self.published.append((channel, message))
        return 1

    async def aclose(self):
        self._closed = True


# Fresh database per test, created on the test's own event loop
@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def mock_redis():
    return MockRedis()


@pytest.fixture(autouse=True)
def apply_overrides(session_factory, mock_redis):
    """Point the app at the per-test database and the mock Redis."""
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


# Shared session for fixture data creation
@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session):
    return LedgerStore(db_session)


@pytest.fixture
def refresh_events():
    """Collects refresh events emitted during the test."""
    events = []

    async def listener(event):
        events.append(event)

    refresh_notifier.subscribe(listener)
    yield events
    refresh_notifier.unsubscribe(listener)


@pytest.fixture
async def fleet(db_session):
    """Two vehicles, one driver and two clients (the second has no trips by default)."""
    truck = Vehicle(vehicle_number="MH12AB1234", vehicle_type="truck", status=VehicleStatus.ACTIVE)
    tempo = Vehicle(vehicle_number="MH14CD5678", vehicle_type="tempo", status=VehicleStatus.MAINTENANCE)
    driver = Driver(name="Ramesh Kumar", phone="9876543210", is_active=True)
    acme = Client(name="Acme Traders", company_name="Acme Pvt Ltd", gst_number="27ABCDE1234F1Z5")
    zenith = Client(name="Zenith Foods", company_name="Zenith Foods LLP")

    db_session.add_all([truck, tempo, driver, acme, zenith])
    await db_session.commit()

    return {"truck": truck, "tempo": tempo, "driver": driver, "acme": acme, "zenith": zenith}


@pytest.fixture
def fail_commits_after(mocker):
    """Let the first `allowed` session commits through, then fail every later one."""
    original_commit = AsyncSession.commit

    def install(allowed):
        calls = {"count": 0}

        async def commit(self):
            calls["count"] += 1
            if calls["count"] > allowed:
                raise OperationalError("COMMIT", {}, Exception("server closed the connection"))
            return await original_commit(self)

        mocker.patch.object(AsyncSession, "commit", commit)
        return calls

    return install

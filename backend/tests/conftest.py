"""Test fixtures for the backend."""
import os
from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.pool import NullPool

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_backend.db")
os.environ.setdefault("SECRET_KEY", "test-secret")

from lumitrack import models  # noqa: E402
from lumitrack.database import build_engine  # noqa: E402
from lumitrack.dependencies import get_clock, get_db_session, get_notifier  # noqa: E402
from lumitrack.main import app  # noqa: E402
from lumitrack.schemas import AreaCreate, DeviceCreate, PropertyCreate  # noqa: E402
from lumitrack.services import areas, devices, distributors, properties, users  # noqa: E402

from factories import (  # noqa: E402
    OWNER_CPF,
    STRANGER_CPF,
    FakeClock,
    RecordingNotifier,
    distributor_payload,
    individual_payload,
)


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh schema per test on a throwaway SQLite file."""

    test_engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test_backend.db'}", poolclass=NullPool
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as db_session:
        yield db_session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, 0))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture
async def client(session_factory, clock, notifier) -> AsyncClient:
    """Provide an HTTP client wired to the per-test database, clock and notifier."""

    async def override_session():
        async with session_factory() as db_session:
            yield db_session

    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notifier] = lambda: notifier
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def owner(session):
    return await users.create_user(session, individual_payload("owner@example.com", OWNER_CPF))


@pytest_asyncio.fixture
async def stranger(session):
    return await users.create_user(
        session, individual_payload("stranger@example.com", STRANGER_CPF)
    )


@pytest_asyncio.fixture
async def distributor(session, owner):
    return await distributors.create_distributor(session, owner.id, distributor_payload())


@pytest_asyncio.fixture
async def prop(session, owner, distributor):
    payload = PropertyCreate(
        distributor_id=distributor.id, name="Casa", state="SP", zip_code="01310-100"
    )
    return await properties.create_property(session, owner.id, payload)


@pytest_asyncio.fixture
async def area(session, owner, prop):
    return await areas.create_area(session, owner.id, prop.id, AreaCreate(name="Cozinha"))


@pytest_asyncio.fixture
async def device(session, owner, prop, area):
    payload = DeviceCreate(name="Geladeira", power_watts=Decimal("150"))
    return await devices.create_device(session, owner.id, prop.id, area.id, payload)

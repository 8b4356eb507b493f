"""Pytest configuration and fixtures."""

import os

# Settings are read on first import of subway.core.config, so the test
# environment must be in place before any subway import
os.environ["DEBUG"] = "true"
os.environ["SECRET_DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["OTEL_ENABLED"] = "false"
os.environ["OTEL_SDK_DISABLED"] = "true"

from collections.abc import AsyncGenerator, Awaitable, Callable, Generator

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from subway.core.database import enable_sqlite_foreign_keys, get_db
from subway.main import app
from subway.models import Base, Station

pytest_plugins = ["tests.fixtures.otel"]

StationFactory = Callable[[str], Awaitable[Station]]


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """
    Create an in-memory SQLite database with the full schema.

    StaticPool keeps the single in-memory connection alive for the whole
    test, so every session sees the same database.

    Yields:
        AsyncEngine bound to the fresh database
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """
    Database session for one test.

    Yields:
        Async SQLAlchemy session (expire_on_commit disabled, like the app factory)
    """
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """
    Async HTTP client whose requests share the test database session.

    Yields:
        Async HTTP client with ASGI transport
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client() -> Generator[TestClient]:
    """
    FastAPI synchronous test client (runs the app lifespan).

    Yields:
        Synchronous test client
    """
    with TestClient(app) as test_client:
        yield test_client


# Station fixtures


@pytest.fixture
def create_station(db_session: AsyncSession) -> StationFactory:
    """Factory fixture that persists a station and returns it."""

    async def _create(name: str) -> Station:
        station = Station(name=name)
        db_session.add(station)
        await db_session.commit()
        await db_session.refresh(station)
        return station

    return _create


@pytest.fixture
async def gangnam(create_station: StationFactory) -> Station:
    """강남역."""
    return await create_station("강남역")


@pytest.fixture
async def yeoksam(create_station: StationFactory) -> Station:
    """역삼역."""
    return await create_station("역삼역")


@pytest.fixture
async def jihacheol(create_station: StationFactory) -> Station:
    """지하철역."""
    return await create_station("지하철역")

"""Shared pytest fixtures for the flight-search test suite."""
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from agents.flight_query_parser import FlightQueryParser
from agents.structured_output import StructuredOutputClient
from api.dependencies import get_provider, get_query_parser
from api.main import app
from core.search_history import SearchHistoryRepository
from db.database import get_db
from db.models import Base
from providers.mock.flight_provider import MockFlightProvider

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TODAY = date(2025, 1, 1)


@pytest.fixture
def anthropic_client():
    """Stand-in for AsyncAnthropic; set messages.create per test."""
    client = MagicMock()
    client.messages = MagicMock()
    client.messages.create = AsyncMock()
    return client


@pytest.fixture
def structured_client(anthropic_client):
    return StructuredOutputClient(client=anthropic_client, model="test-model", max_tokens=256)


@pytest.fixture
def parser(structured_client):
    return FlightQueryParser(client=structured_client, clock=lambda: TODAY)


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine(TEST_DB_URL, echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine) -> AsyncSession:
    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def history(db):
    return SearchHistoryRepository(db)


# ── API test client ────────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def api_client(engine, parser):
    """AsyncClient wired to FastAPI with an in-memory DB and a mocked model."""
    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_query_parser] = lambda: parser
    app.dependency_overrides[get_provider] = MockFlightProvider
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client
    app.dependency_overrides.clear()

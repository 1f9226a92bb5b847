"""Shared test fixtures.

Each test gets its own SQLite database file (aiosqlite) with tables created
from the ORM metadata, and a frozen clock injected through dependency
overrides.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterator
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from momentum.clock import FixedClock, get_clock
from momentum.config import get_settings
from momentum.database import close_db, create_tables, get_session, init_db
from momentum.main import create_app

FIXED_NOW = datetime(2025, 6, 15, 8, 30, tzinfo=timezone.utc)
TODAY = FIXED_NOW.date()

ALICE = {"email": "alice@example.com", "password": "Passw0rd", "firstName": "Alice", "lastName": "Smith"}
BOB = {"email": "bob@example.com", "password": "B0bSecret", "firstName": "Bob", "lastName": "Jones"}


@pytest.fixture(autouse=True)
def test_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Point settings at a throwaway SQLite file for every test."""
    monkeypatch.setenv("MOMENTUM_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'momentum.db'}")
    monkeypatch.setenv("MOMENTUM_LOG_FORMAT", "console")
    monkeypatch.setenv("MOMENTUM_ENVIRONMENT", "test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(FIXED_NOW)


@pytest.fixture
def app(clock: FixedClock) -> FastAPI:
    application = create_app()
    application.dependency_overrides[get_clock] = lambda: clock
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client over the ASGI app, with a fresh database."""
    await init_db(get_settings().database_url)
    await create_tables()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await close_db()


@pytest_asyncio.fixture
async def db_session(client: AsyncClient) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for test setup and assertions."""
    async for session in get_session():
        yield session
        break


async def register(client: AsyncClient, user: dict) -> dict:
    """Register a user through the API and return the auth response body."""
    response = await client.post("/api/auth/register", json=user)
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def alice_headers(client: AsyncClient) -> dict[str, str]:
    data = await register(client, ALICE)
    return bearer(data["token"])


@pytest_asyncio.fixture
async def bob_headers(client: AsyncClient) -> dict[str, str]:
    data = await register(client, BOB)
    return bearer(data["token"])

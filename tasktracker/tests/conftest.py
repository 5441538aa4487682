"""Async test fixtures for task tracker tests using in-memory SQLite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tasktracker.app import create_app
from tasktracker.services.task_store import TaskStore


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def tomorrow() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=1)


@pytest.fixture
def yesterday() -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=1)


@pytest_asyncio.fixture
async def store():
    task_store = TaskStore("sqlite+aiosqlite:///:memory:")
    await task_store.initialize()
    yield task_store
    await task_store.close()


@pytest_asyncio.fixture
async def client(store: TaskStore):
    """HTTPX async test client against an app wired to the test store."""
    app = create_app(store=store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

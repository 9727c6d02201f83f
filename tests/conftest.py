"""Test fixtures — fresh SQLite database and fresh real-time core per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own in-memory SQLite engine with the schema created
2. The app's get_db dependency is overridden to hand out that session
3. app.state gets a brand-new ConnectionRegistry + EventPublisher, so
   subscribers registered by one test never leak into another

WebSocket tests use Starlette's TestClient as a context manager, which runs
HTTP calls and WebSocket sessions on one event loop. That matters: the
publisher wakes sender tasks, and those must live on the same loop.
"""

import asyncio
import os

# Point the app at a throwaway database before shelfsync.config is imported.
os.environ.setdefault("SHELFSYNC_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SHELFSYNC_ENVIRONMENT", "development")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from shelfsync.auth.dependencies import require_admin
from shelfsync.db.engine import get_db
from shelfsync.db.models import Base
from shelfsync.main import app
from shelfsync.realtime.publisher import EventPublisher
from shelfsync.realtime.registry import ConnectionRegistry


@pytest.fixture()
def registry():
    return ConnectionRegistry()


@pytest.fixture()
def publisher(registry):
    return EventPublisher(registry)


@pytest.fixture()
def realtime(registry, publisher):
    """Install a fresh registry/publisher pair on the app."""
    app.state.registry = registry
    app.state.publisher = publisher
    return registry


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session on a private in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = AsyncSession(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest_asyncio.fixture()
async def client(db_session, realtime):
    """HTTP client with get_db and admin auth overridden for testing."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[require_admin] = lambda: None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def unauthenticated_client(db_session, realtime):
    """HTTP client WITHOUT the admin override — for testing the token check."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture()
def ws_client(tmp_path, realtime):
    """Synchronous TestClient for WebSocket flows, backed by a file database.

    NullPool opens a fresh aiosqlite connection per session, on whichever
    loop the TestClient portal runs.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool
    )

    async def create_schema():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_schema())
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[require_admin] = lambda: None

    with TestClient(app) as tc:
        yield tc

    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())

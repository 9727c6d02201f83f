"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode over SQLite (aiosqlite driver).
create_async_engine for the connection pool, AsyncSession for per-request
database access, dependency injection via FastAPI.

The schema is small and created at startup (init_db) — no migration tool.
"""

from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from shelfsync.config import settings
from shelfsync.db.models import Base

# echo=True in dev to see SQL queries.
engine = create_async_engine(settings.database_url, echo=settings.debug)

# Session factory — each request gets its own session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Create the data directory (for file databases) and all tables."""
    database = make_url(settings.database_url).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncSession:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()

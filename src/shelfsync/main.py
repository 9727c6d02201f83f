"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. The connection registry and event publisher are created here,
once per app, and stored on app.state so every handler receives the same
instances through dependencies (and tests can swap in fresh ones).
Lifespan manages startup/shutdown of the database.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shelfsync import __version__
from shelfsync.api import api_router
from shelfsync.api.health import router as health_router
from shelfsync.config import settings
from shelfsync.realtime.publisher import EventPublisher
from shelfsync.realtime.registry import ConnectionRegistry

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` at shutdown.
    """
    logger.info(
        "shelfsync.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from shelfsync.db.engine import engine, init_db
    await init_db()
    logger.info("shelfsync.database_ready", url=settings.database_url)

    yield

    logger.info(
        "shelfsync.shutdown",
        connected_clients=app.state.registry.connection_count(),
    )
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Shelfsync",
        description="Shared UUID-addressed inventories with live WebSocket updates",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Real-time core (one per app) ─────────────────────────
    app.state.registry = ConnectionRegistry()
    app.state.publisher = EventPublisher(app.state.registry)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → handler

    from shelfsync.middleware.request_id import RequestIdMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes; health is also served at the root
    app.include_router(api_router)
    app.include_router(health_router, tags=["health"])

    # Mount WebSocket route (real-time inventory events)
    from shelfsync.realtime.websocket import router as ws_router
    app.include_router(ws_router)

    return app


# Default app instance (used by uvicorn: shelfsync.main:app)
app = create_app()

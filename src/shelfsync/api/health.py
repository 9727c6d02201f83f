"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running
and the database is reachable. Also reports live WebSocket subscribers.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from shelfsync import __version__
from shelfsync.db.engine import get_db
from shelfsync.realtime.deps import get_registry
from shelfsync.realtime.registry import ConnectionRegistry

router = APIRouter()


@router.get("/health")
async def health_check(
    db: AsyncSession = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_registry),
):
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    status = "ok" if checks["database"] == "ok" else "degraded"
    return {
        "status": status,
        **checks,
        "connected_clients": registry.connection_count(),
    }

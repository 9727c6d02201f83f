"""FastAPI auth dependencies.

Learn: Used as Depends() at the include_router level to protect every
admin route without touching individual handlers.
"""

import secrets
from typing import Optional

from fastapi import Header, HTTPException

from shelfsync.config import settings


def require_admin(
    x_admin_token: Optional[str] = Header(None),
) -> None:
    """Reject the request unless it carries the configured admin token.

    Learn: With no token configured the admin API is open in development
    only (config validation refuses an empty token elsewhere).
    compare_digest keeps the check constant-time.
    """
    expected = settings.admin_token
    if not expected:
        if settings.environment == "development":
            return
        raise HTTPException(status_code=401, detail="Admin token not configured")

    if not x_admin_token or not secrets.compare_digest(
        x_admin_token.encode(), expected.encode()
    ):
        raise HTTPException(
            status_code=401,
            detail="Invalid or missing admin token",
            headers={"WWW-Authenticate": "X-Admin-Token"},
        )

"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Admin auth is applied at the include_router level using FastAPI's
dependencies parameter. Inventory routes are open: knowing the UUID is
what grants access.
"""

from fastapi import APIRouter, Depends

from shelfsync.api.admin import router as admin_router
from shelfsync.api.health import router as health_router
from shelfsync.api.inventories import router as inventories_router
from shelfsync.api.products import router as products_router
from shelfsync.auth.dependencies import require_admin

api_router = APIRouter(prefix="/api/v1")

# Open routes
api_router.include_router(health_router, tags=["health"])
api_router.include_router(inventories_router, tags=["inventories"])
api_router.include_router(products_router, tags=["products"])

# Admin routes — require X-Admin-Token
api_router.include_router(admin_router, tags=["admin"], dependencies=[Depends(require_admin)])

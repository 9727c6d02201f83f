"""Admin API — usage stats, inventory listing, and deletion.

Learn: Every route here is protected at the include_router level
(see api/__init__.py). Deleting an inventory also evicts its live
viewers: they receive inventory:deleted and their socket is closed.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from shelfsync.db.engine import get_db
from shelfsync.realtime.deps import get_publisher
from shelfsync.realtime.publisher import EventPublisher
from shelfsync.schemas.inventory import AdminInventoryRead, AdminStats
from shelfsync.services.admin_service import AdminService
from shelfsync.services.inventory_service import InventoryNotFoundError

router = APIRouter(prefix="/admin")


def _svc(
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_publisher),
) -> AdminService:
    return AdminService(db, publisher)


@router.get("/stats", response_model=AdminStats)
async def get_stats(svc: AdminService = Depends(_svc)):
    return await svc.stats()


@router.get("/inventories", response_model=list[AdminInventoryRead])
async def list_inventories(svc: AdminService = Depends(_svc)):
    return await svc.list_inventories()


@router.delete("/inventories/{inventory_uuid}")
async def delete_inventory(
    inventory_uuid: uuid.UUID,
    svc: AdminService = Depends(_svc),
):
    try:
        evicted = await svc.delete_inventory(str(inventory_uuid))
    except InventoryNotFoundError:
        raise HTTPException(status_code=404, detail="Inventory not found")
    return {"success": True, "evicted_connections": evicted}

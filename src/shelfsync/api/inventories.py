"""Inventory info and rename routes."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shelfsync.db.engine import get_db
from shelfsync.realtime.deps import get_publisher
from shelfsync.realtime.publisher import EventPublisher
from shelfsync.schemas.inventory import InventoryInfo, InventoryRename
from shelfsync.services.inventory_service import InventoryService

router = APIRouter()


def _svc(
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_publisher),
) -> InventoryService:
    return InventoryService(db, publisher)


@router.get("/inventories/{inventory_uuid}/info", response_model=InventoryInfo)
async def get_inventory_info(
    inventory_uuid: uuid.UUID,
    svc: InventoryService = Depends(_svc),
):
    return await svc.info(str(inventory_uuid))


@router.put("/inventories/{inventory_uuid}/name", response_model=InventoryInfo)
async def rename_inventory(
    inventory_uuid: uuid.UUID,
    body: InventoryRename,
    svc: InventoryService = Depends(_svc),
):
    """Rename an inventory. Viewers get an inventory:name-changed event."""
    return await svc.rename(str(inventory_uuid), body.name)

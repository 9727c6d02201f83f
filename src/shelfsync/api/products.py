"""Product API routes for one inventory.

Learn: Routes handle HTTP concerns (status codes, error responses),
InventoryService handles the write + real-time publish. The inventory is
addressed by its UUID; a UUID nobody used before simply becomes a new,
empty inventory.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from shelfsync.db.engine import get_db
from shelfsync.realtime.deps import get_publisher
from shelfsync.realtime.publisher import EventPublisher
from shelfsync.schemas.inventory import ProductCreate, ProductRead, ProductUpdate
from shelfsync.services.inventory_service import InventoryService, ProductNotFoundError

router = APIRouter()


def _svc(
    db: AsyncSession = Depends(get_db),
    publisher: EventPublisher = Depends(get_publisher),
) -> InventoryService:
    return InventoryService(db, publisher)


@router.get("/inventories/{inventory_uuid}/products", response_model=list[ProductRead])
async def list_products(inventory_uuid: uuid.UUID, svc: InventoryService = Depends(_svc)):
    """List products ordered by name."""
    return await svc.list_products(str(inventory_uuid))


@router.post(
    "/inventories/{inventory_uuid}/products",
    response_model=ProductRead,
    status_code=201,
)
async def add_product(
    inventory_uuid: uuid.UUID,
    body: ProductCreate,
    svc: InventoryService = Depends(_svc),
):
    return await svc.add_product(str(inventory_uuid), name=body.name, quantity=body.quantity)


@router.put(
    "/inventories/{inventory_uuid}/products/{product_id}",
    response_model=ProductRead,
)
async def update_product_quantity(
    inventory_uuid: uuid.UUID,
    product_id: int,
    body: ProductUpdate,
    svc: InventoryService = Depends(_svc),
):
    try:
        return await svc.update_quantity(str(inventory_uuid), product_id, body.quantity)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")


@router.delete("/inventories/{inventory_uuid}/products/{product_id}")
async def delete_product(
    inventory_uuid: uuid.UUID,
    product_id: int,
    svc: InventoryService = Depends(_svc),
):
    try:
        await svc.delete_product(str(inventory_uuid), product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"success": True}

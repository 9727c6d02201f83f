"""Inventory service — products and names of one shared inventory.

Learn: Service layer separates business logic from HTTP routing.
Every write follows the same order:
1. Mutate rows and commit (the durable write)
2. Publish a real-time event to the inventory's subscribers

Publishing can't fail the request: the publisher swallows and logs
delivery problems, and by then the data is already committed.
"""

from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shelfsync.config import settings
from shelfsync.db.models import Inventory, Product, utcnow
from shelfsync.realtime.events import (
    InventoryRenamed,
    ProductAdded,
    ProductDeleted,
    ProductSnapshot,
    ProductUpdated,
)
from shelfsync.realtime.publisher import EventPublisher

logger = structlog.get_logger()


class InventoryNotFoundError(Exception):
    """Raised when an inventory UUID has never been used."""


class ProductNotFoundError(Exception):
    """Raised when a product doesn't exist in the given inventory."""


class InventoryService:
    """Business logic for a single inventory's products and name."""

    def __init__(self, db: AsyncSession, publisher: Optional[EventPublisher] = None):
        self.db = db
        self.publisher = publisher

    # ─── Inventories ────────────────────────────────────

    async def get(self, inventory_uuid: str) -> Optional[Inventory]:
        result = await self.db.execute(
            select(Inventory).where(Inventory.uuid == inventory_uuid)
        )
        return result.scalars().first()

    async def get_or_create(self, inventory_uuid: str) -> Inventory:
        """Return the inventory for a UUID, creating it on first use.

        Learn: Two browsers opening a fresh UUID at the same moment can both
        try to insert. The unique constraint makes one of them lose; the
        loser rolls back and reads the winner's row.
        """
        inventory = await self.get(inventory_uuid)
        if inventory:
            return inventory

        inventory = Inventory(uuid=inventory_uuid, name=settings.default_inventory_name)
        self.db.add(inventory)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            inventory = await self.get(inventory_uuid)
            if inventory is None:
                raise
            return inventory

        logger.info("shelfsync.inventory.created", inventory_id=inventory_uuid)
        return inventory

    async def info(self, inventory_uuid: str) -> dict:
        inventory = await self.get_or_create(inventory_uuid)
        product_count = await self.db.scalar(
            select(func.count(Product.id)).where(Product.inventory_id == inventory.id)
        )
        return {
            "uuid": inventory.uuid,
            "name": inventory.name,
            "created_at": inventory.created_at,
            "updated_at": inventory.updated_at,
            "product_count": product_count or 0,
        }

    async def rename(self, inventory_uuid: str, name: str) -> dict:
        inventory = await self.get_or_create(inventory_uuid)
        inventory.name = name
        inventory.updated_at = utcnow()
        await self.db.commit()

        self._publish(inventory_uuid, InventoryRenamed(name=name))
        return await self.info(inventory_uuid)

    # ─── Products ───────────────────────────────────────

    async def list_products(self, inventory_uuid: str) -> list[Product]:
        inventory = await self.get_or_create(inventory_uuid)
        result = await self.db.execute(
            select(Product)
            .where(Product.inventory_id == inventory.id)
            .order_by(Product.name, Product.id)
        )
        return list(result.scalars().all())

    async def add_product(
        self, inventory_uuid: str, name: str, quantity: int = 1
    ) -> Product:
        inventory = await self.get_or_create(inventory_uuid)
        product = Product(inventory_id=inventory.id, name=name, quantity=quantity)
        self.db.add(product)
        inventory.updated_at = utcnow()
        await self.db.commit()

        self._publish(
            inventory_uuid,
            ProductAdded(product=ProductSnapshot.model_validate(product)),
        )
        return product

    async def update_quantity(
        self, inventory_uuid: str, product_id: int, quantity: int
    ) -> Product:
        inventory = await self.get_or_create(inventory_uuid)
        product = await self._get_product(inventory, product_id)
        product.quantity = quantity
        inventory.updated_at = utcnow()
        await self.db.commit()

        self._publish(
            inventory_uuid,
            ProductUpdated(product=ProductSnapshot.model_validate(product)),
        )
        return product

    async def delete_product(self, inventory_uuid: str, product_id: int) -> None:
        inventory = await self.get_or_create(inventory_uuid)
        product = await self._get_product(inventory, product_id)
        await self.db.delete(product)
        inventory.updated_at = utcnow()
        await self.db.commit()

        self._publish(inventory_uuid, ProductDeleted(product_id=product_id))

    async def _get_product(self, inventory: Inventory, product_id: int) -> Product:
        result = await self.db.execute(
            select(Product).where(
                Product.id == product_id,
                Product.inventory_id == inventory.id,
            )
        )
        product = result.scalars().first()
        if not product:
            raise ProductNotFoundError(
                f"Product {product_id} not found in inventory {inventory.uuid}"
            )
        return product

    def _publish(self, inventory_uuid: str, event) -> None:
        if self.publisher is not None:
            self.publisher.publish(inventory_uuid, event)

"""Admin service — list, inspect, and delete inventories.

Learn: Usage figures mix two sources. Product counts and quantities come
from the database in one grouped query; connected clients come from the
live connection registry, which knows who is watching right now.
"""

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shelfsync.db.models import Inventory, Product
from shelfsync.realtime.publisher import EventPublisher
from shelfsync.services.inventory_service import InventoryNotFoundError

logger = structlog.get_logger()


class AdminService:
    """Cross-inventory operations for the admin dashboard."""

    def __init__(self, db: AsyncSession, publisher: EventPublisher):
        self.db = db
        self.publisher = publisher

    async def stats(self) -> dict:
        total_inventories = await self.db.scalar(select(func.count(Inventory.id)))
        total_products = await self.db.scalar(select(func.count(Product.id)))
        return {
            "total_inventories": total_inventories or 0,
            "total_products": total_products or 0,
            "total_connected_clients": self.publisher.registry.connection_count(),
        }

    async def list_inventories(self) -> list[dict]:
        """All inventories, most recently updated first."""
        product_count = func.count(Product.id)
        total_quantity = func.coalesce(func.sum(Product.quantity), 0)
        result = await self.db.execute(
            select(Inventory, product_count, total_quantity)
            .outerjoin(Product, Product.inventory_id == Inventory.id)
            .group_by(Inventory.id)
            .order_by(Inventory.updated_at.desc(), Inventory.id.desc())
        )

        registry = self.publisher.registry
        return [
            {
                "uuid": inventory.uuid,
                "name": inventory.name,
                "created_at": inventory.created_at,
                "updated_at": inventory.updated_at,
                "product_count": count,
                "total_quantity": quantity,
                "connected_clients": registry.subscriber_count(inventory.uuid),
            }
            for inventory, count, quantity in result.all()
        ]

    async def delete_inventory(self, inventory_uuid: str) -> int:
        """Delete an inventory and its products, then evict its live viewers.

        Returns the number of connections that were evicted.
        """
        result = await self.db.execute(
            select(Inventory).where(Inventory.uuid == inventory_uuid)
        )
        inventory = result.scalars().first()
        if not inventory:
            raise InventoryNotFoundError(f"Inventory {inventory_uuid} not found")

        await self.db.execute(delete(Product).where(Product.inventory_id == inventory.id))
        await self.db.execute(delete(Inventory).where(Inventory.id == inventory.id))
        await self.db.commit()

        evicted = self.publisher.evict_inventory(inventory_uuid)
        logger.info(
            "shelfsync.inventory.deleted",
            inventory_id=inventory_uuid,
            evicted=evicted,
        )
        return evicted

"""Event publisher — fan a mutation out to every subscriber of one inventory.

Learn: publish() is fire-and-forget. It runs after the HTTP write has been
committed, takes a snapshot of the inventory's subscribers, serializes the
event once and hands it to each connection's buffer. Nothing here awaits,
so publishes issued in order land in every buffer in that order.

A subscriber that misses an event has no replay; clients re-fetch the
product list when they reconnect.
"""

import structlog

from shelfsync.realtime.events import InventoryDeleted, InventoryEvent
from shelfsync.realtime.registry import ConnectionRegistry

logger = structlog.get_logger()


class EventPublisher:
    """Delivers inventory events to live connections, best-effort."""

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    def publish(self, inventory_id: str, event: InventoryEvent) -> int:
        """Deliver `event` to the current subscribers of `inventory_id`.

        Never raises. Returns how many connections accepted the message.
        """
        subscribers = self.registry.subscribers_of(inventory_id)
        if not subscribers:
            return 0

        payload = event.to_message()
        delivered = 0
        for connection in subscribers:
            try:
                accepted = connection.deliver(payload)
            except Exception as e:
                logger.warning(
                    "shelfsync.publish.delivery_error",
                    inventory_id=inventory_id,
                    event_type=event.type,
                    error=str(e),
                )
                continue
            if accepted:
                delivered += 1
            else:
                logger.info(
                    "shelfsync.publish.skipped",
                    inventory_id=inventory_id,
                    event_type=event.type,
                    connection=repr(connection),
                )

        logger.debug(
            "shelfsync.publish.sent",
            inventory_id=inventory_id,
            event_type=event.type,
            subscribers=len(subscribers),
            delivered=delivered,
        )
        return delivered

    def evict_inventory(self, inventory_id: str) -> int:
        """Tell subscribers the inventory is gone and drop their subscriptions."""
        return self.registry.evict_inventory(
            inventory_id, InventoryDeleted().to_message()
        )

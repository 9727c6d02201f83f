"""Connection registry — which live connections are watching which inventory.

Learn: The registry owns two maps:
- inventory id -> set of subscribed connections (the subscriber sets)
- connection -> inventory id (each connection's current subscription)

Both are mutated together under one lock, so a connection is never seen in
two sets, and a switch from A to B happens inside a single call. Empty sets
are dropped immediately so the registry never accumulates dead entries.

The lock is only held while touching the dicts (never across an await),
which makes it safe to call from the event loop and from worker threads.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Protocol

import structlog

logger = structlog.get_logger()


class Subscriber(Protocol):
    """What the registry needs from a connection handle.

    `deliver` must never block: it queues the payload (or refuses it) and
    returns. With close=True the connection closes after sending it.
    """

    def deliver(self, payload: str, *, close: bool = False) -> bool: ...


class ConnectionRegistry:
    """Tracks, per inventory id, the connections currently subscribed."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[str, set[Subscriber]] = {}
        self._subscriptions: dict[Subscriber, str] = {}

    # ─── Mutations ──────────────────────────────────────

    def subscribe(self, connection: Subscriber, inventory_id: str) -> bool:
        """Subscribe `connection` to `inventory_id`, leaving any previous set.

        Returns False when the connection was already subscribed to this
        exact id (nothing changed, no confirmation needed).
        """
        with self._lock:
            previous = self._subscriptions.get(connection)
            if previous == inventory_id:
                return False
            if previous is not None:
                self._discard(connection, previous)
            self._subscribers.setdefault(inventory_id, set()).add(connection)
            self._subscriptions[connection] = inventory_id

        logger.debug(
            "shelfsync.registry.subscribed",
            inventory_id=inventory_id,
            previous=previous,
        )
        return True

    def unsubscribe(self, connection: Subscriber) -> None:
        """Drop `connection` from its current set. No-op if not subscribed."""
        with self._lock:
            inventory_id = self._subscriptions.pop(connection, None)
            if inventory_id is not None:
                self._discard(connection, inventory_id)

        if inventory_id is not None:
            logger.debug("shelfsync.registry.unsubscribed", inventory_id=inventory_id)

    def evict_inventory(self, inventory_id: str, notice: str) -> int:
        """Send `notice` to every subscriber, then forget them all.

        Used when an inventory is deleted. Each connection closes after
        the notice is flushed. Returns the number of evicted connections.
        """
        with self._lock:
            evicted = self._subscribers.pop(inventory_id, set())
            for connection in evicted:
                self._subscriptions.pop(connection, None)

        for connection in evicted:
            try:
                accepted = connection.deliver(notice, close=True)
            except Exception as e:
                accepted = False
                logger.warning(
                    "shelfsync.registry.eviction_error",
                    inventory_id=inventory_id,
                    error=str(e),
                )
            if not accepted:
                logger.info(
                    "shelfsync.registry.eviction_notice_skipped",
                    inventory_id=inventory_id,
                    connection=repr(connection),
                )

        logger.info(
            "shelfsync.registry.evicted",
            inventory_id=inventory_id,
            connections=len(evicted),
        )
        return len(evicted)

    @contextmanager
    def attached(self, connection: Subscriber) -> Iterator[Subscriber]:
        """Scope a connection's lifetime; it is unsubscribed on exit, always."""
        try:
            yield connection
        finally:
            self.unsubscribe(connection)

    def _discard(self, connection: Subscriber, inventory_id: str) -> None:
        # Caller holds the lock.
        members = self._subscribers.get(inventory_id)
        if members is None:
            return
        members.discard(connection)
        if not members:
            del self._subscribers[inventory_id]

    # ─── Reads ──────────────────────────────────────────

    def subscribers_of(self, inventory_id: str) -> frozenset[Subscriber]:
        """Snapshot of the current subscribers (empty if none)."""
        with self._lock:
            return frozenset(self._subscribers.get(inventory_id, ()))

    def subscription_of(self, connection: Subscriber) -> Optional[str]:
        with self._lock:
            return self._subscriptions.get(connection)

    def subscriber_count(self, inventory_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(inventory_id, ()))

    def connection_count(self) -> int:
        """Number of connections currently subscribed to any inventory."""
        with self._lock:
            return len(self._subscriptions)

    def __contains__(self, inventory_id: str) -> bool:
        with self._lock:
            return inventory_id in self._subscribers

"""Real-time event types — the closed set of messages pushed to subscribers.

Learn: Each mutation kind gets its own frozen model carrying only the fields
that kind needs. The `type` literal is the wire discriminator, and
`to_message()` is the single place where an event becomes a JSON frame.
Events are never persisted: if nobody is subscribed, they are simply lost.
"""

import json
from datetime import datetime
from typing import Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# ─── Wire message types ──────────────────────────────────

CONNECTED = "connected"
SUBSCRIBE = "subscribe"
SUBSCRIBED = "subscribed"

PRODUCT_ADDED = "product:added"
PRODUCT_UPDATED = "product:updated"
PRODUCT_DELETED = "product:deleted"
INVENTORY_RENAMED = "inventory:name-changed"
INVENTORY_DELETED = "inventory:deleted"


class ProductSnapshot(BaseModel):
    """Current state of a product as sent to clients."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    quantity: int
    inventory_id: int
    created_at: datetime


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ClassVar[str]

    def payload(self) -> dict[str, Any]:
        return {"data": self.model_dump(mode="json")}

    def to_message(self) -> str:
        return json.dumps({"type": self.type, **self.payload()})


class ProductAdded(_Event):
    type: ClassVar[str] = PRODUCT_ADDED
    product: ProductSnapshot


class ProductUpdated(_Event):
    type: ClassVar[str] = PRODUCT_UPDATED
    product: ProductSnapshot


class ProductDeleted(_Event):
    type: ClassVar[str] = PRODUCT_DELETED
    product_id: int = Field(serialization_alias="productId")

    def payload(self) -> dict[str, Any]:
        return {"data": self.model_dump(mode="json", by_alias=True)}


class InventoryRenamed(_Event):
    type: ClassVar[str] = INVENTORY_RENAMED
    name: str


class InventoryDeleted(_Event):
    """Terminal notice — the connection is closed right after it is sent."""

    type: ClassVar[str] = INVENTORY_DELETED
    message: str = "This inventory has been deleted"

    def payload(self) -> dict[str, Any]:
        return {"message": self.message}


InventoryEvent = Union[
    ProductAdded,
    ProductUpdated,
    ProductDeleted,
    InventoryRenamed,
    InventoryDeleted,
]


# ─── Control messages ────────────────────────────────────


def connected_message() -> str:
    return json.dumps({"type": CONNECTED, "message": "Connected to inventory updates"})


def subscribed_message(inventory_id: str) -> str:
    return json.dumps({"type": SUBSCRIBED, "uuid": inventory_id})


class MalformedMessageError(ValueError):
    """Raised when an inbound frame can't be understood."""


def parse_subscribe(raw: str) -> str:
    """Return the inventory id requested by a `subscribe` frame.

    Raises MalformedMessageError for anything else: non-JSON, non-object,
    a different type, or a missing/non-string uuid.
    """
    try:
        msg = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedMessageError(f"invalid JSON: {e.msg}") from e

    if not isinstance(msg, dict):
        raise MalformedMessageError("frame is not a JSON object")
    if msg.get("type") != SUBSCRIBE:
        raise MalformedMessageError(f"unsupported message type: {msg.get('type')!r}")

    inventory_id = msg.get("uuid")
    if not isinstance(inventory_id, str) or not inventory_id:
        raise MalformedMessageError("subscribe requires a string uuid")
    return inventory_id

"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Two tables: inventories (addressed publicly by their UUID string) and the
products inside them. Integer primary keys stay internal; the UUID is the
unguessable handle shared in URLs and used as the real-time channel id.

Timestamps use Python-side defaults so they're populated on flush without
an extra round trip.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    TypeDecorator,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetime.

    SQLite keeps no offset, so values are stored as naive UTC and come back
    with UTC re-attached. Every timestamp leaves the app with the same offset.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Inventory(Base):
    """A shared product list. Created the first time anyone opens its UUID."""

    __tablename__ = "inventories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow
    )  # bumped on every product change or rename

    # Relationships
    products: Mapped[list["Product"]] = relationship(
        back_populates="inventory", passive_deletes=True
    )


class Product(Base):
    """A named item with a stock quantity, owned by one inventory."""

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_products_quantity_positive"),
        Index("idx_product_inventory", "inventory_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    inventory_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("inventories.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow
    )

    # Relationships
    inventory: Mapped["Inventory"] = relationship(back_populates="products")

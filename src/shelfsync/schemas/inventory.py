"""Pydantic schemas for inventories, products, and the admin surface.

Learn: Pydantic v2 models validate request/response data. Separate
"Create"/"Update" schemas (input) from "Read" schemas (output) for clean APIs.
Names are trimmed before length validation, so "  " is rejected.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ─── Products ───────────────────────────────────────────

class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(default=1, ge=0)

    model_config = {"str_strip_whitespace": True}


class ProductUpdate(BaseModel):
    quantity: int = Field(..., ge=0)


class ProductRead(BaseModel):
    id: int
    inventory_id: int
    name: str
    quantity: int
    created_at: datetime

    model_config = {"from_attributes": True}


# ─── Inventories ────────────────────────────────────────

class InventoryRename(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    model_config = {"str_strip_whitespace": True}


class InventoryInfo(BaseModel):
    uuid: str
    name: str
    created_at: datetime
    updated_at: datetime
    product_count: int = 0


# ─── Admin ──────────────────────────────────────────────

class AdminInventoryRead(InventoryInfo):
    """Inventory row for the admin table, with usage figures."""
    total_quantity: int = 0
    connected_clients: int = 0


class AdminStats(BaseModel):
    total_inventories: int
    total_products: int
    total_connected_clients: int

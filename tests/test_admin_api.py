"""Admin API tests — stats, listing, deletion with eviction, token check."""

import uuid

import pytest
from _fakes import FakeSubscriber

from shelfsync.config import settings


async def _make_inventory(client, name=None, products=()):
    inv = str(uuid.uuid4())
    await client.get(f"/api/v1/inventories/{inv}/info")
    if name:
        await client.put(f"/api/v1/inventories/{inv}/name", json={"name": name})
    for product_name, qty in products:
        await client.post(
            f"/api/v1/inventories/{inv}/products",
            json={"name": product_name, "quantity": qty},
        )
    return inv


# ═══════════════════════════════════════════════════════════
# Stats
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_stats_empty(client):
    resp = await client.get("/api/v1/admin/stats")
    assert resp.status_code == 200
    assert resp.json() == {
        "total_inventories": 0,
        "total_products": 0,
        "total_connected_clients": 0,
    }


@pytest.mark.asyncio
async def test_stats_counts(client, registry):
    inv = await _make_inventory(client, products=[("A", 1), ("B", 2)])
    await _make_inventory(client, products=[("C", 3)])
    registry.subscribe(FakeSubscriber("c1"), inv)
    registry.subscribe(FakeSubscriber("c2"), inv)

    data = (await client.get("/api/v1/admin/stats")).json()
    assert data["total_inventories"] == 2
    assert data["total_products"] == 3
    assert data["total_connected_clients"] == 2


# ═══════════════════════════════════════════════════════════
# List
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_inventories_with_usage(client, registry):
    inv = await _make_inventory(client, "Garage", [("Drill", 1), ("Saw", 4)])
    empty = await _make_inventory(client)
    registry.subscribe(FakeSubscriber(), inv)

    resp = await client.get("/api/v1/admin/inventories")
    assert resp.status_code == 200
    rows = {row["uuid"]: row for row in resp.json()}

    assert rows[inv]["name"] == "Garage"
    assert rows[inv]["product_count"] == 2
    assert rows[inv]["total_quantity"] == 5
    assert rows[inv]["connected_clients"] == 1

    assert rows[empty]["product_count"] == 0
    assert rows[empty]["total_quantity"] == 0
    assert rows[empty]["connected_clients"] == 0


@pytest.mark.asyncio
async def test_list_inventories_most_recent_first(client):
    older = await _make_inventory(client)
    newer = await _make_inventory(client)
    # Touch the older one so it becomes the most recently updated
    await client.post(f"/api/v1/inventories/{older}/products", json={"name": "Fresh"})

    uuids = [row["uuid"] for row in (await client.get("/api/v1/admin/inventories")).json()]
    assert uuids.index(older) < uuids.index(newer)


# ═══════════════════════════════════════════════════════════
# Delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_inventory_evicts_subscribers(client, registry):
    inv = await _make_inventory(client, products=[("A", 1)])
    c1, c2 = FakeSubscriber("c1"), FakeSubscriber("c2")
    registry.subscribe(c1, inv)
    registry.subscribe(c2, inv)

    resp = await client.delete(f"/api/v1/admin/inventories/{inv}")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "evicted_connections": 2}

    for c in (c1, c2):
        assert c.types == ["inventory:deleted"]
        assert c.closed_by_server
    assert registry.subscribers_of(inv) == frozenset()

    stats = (await client.get("/api/v1/admin/stats")).json()
    assert stats["total_inventories"] == 0
    assert stats["total_products"] == 0


@pytest.mark.asyncio
async def test_delete_inventory_404(client):
    resp = await client.delete(f"/api/v1/admin/inventories/{uuid.uuid4()}")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_deleted_uuid_starts_fresh(client):
    inv = await _make_inventory(client, "Old name", [("A", 1)])
    await client.delete(f"/api/v1/admin/inventories/{inv}")

    info = (await client.get(f"/api/v1/inventories/{inv}/info")).json()
    assert info["name"] == "Warehouse Inventory"
    assert info["product_count"] == 0


# ═══════════════════════════════════════════════════════════
# Admin token
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def admin_token(monkeypatch):
    monkeypatch.setattr(settings, "admin_token", "s3cret")
    return "s3cret"


@pytest.mark.asyncio
async def test_admin_requires_token(unauthenticated_client, admin_token):
    resp = await unauthenticated_client.get("/api/v1/admin/stats")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_admin_rejects_wrong_token(unauthenticated_client, admin_token):
    resp = await unauthenticated_client.get(
        "/api/v1/admin/stats", headers={"X-Admin-Token": "guess"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_admin_accepts_token(unauthenticated_client, admin_token):
    resp = await unauthenticated_client.get(
        "/api/v1/admin/stats", headers={"X-Admin-Token": admin_token}
    )
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_admin_open_in_development_without_token(unauthenticated_client, monkeypatch):
    monkeypatch.setattr(settings, "admin_token", "")
    monkeypatch.setattr(settings, "environment", "development")
    resp = await unauthenticated_client.get("/api/v1/admin/stats")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_inventory_routes_need_no_token(unauthenticated_client, admin_token):
    resp = await unauthenticated_client.get(f"/api/v1/inventories/{uuid.uuid4()}/products")
    assert resp.status_code == 200

"""Shelfsync CLI — run the server and administer inventories.

Usage:
    shelfsync serve                      # Run the API + WebSocket server
    shelfsync new                        # Print a fresh inventory UUID
    shelfsync stats                      # Totals and live connections
    shelfsync inventories                # List inventories with usage
    shelfsync delete <uuid>              # Delete an inventory, evict viewers
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import os
import sys
import uuid

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:3000"


def _api_url() -> str:
    return os.environ.get("SHELFSYNC_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Shelfsync server."""
    headers = {}
    token = os.environ.get("SHELFSYNC_ADMIN_TOKEN")
    if token:
        headers["X-Admin-Token"] = token
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _check(r: httpx.Response) -> None:
    if r.status_code == 401:
        click.secho(
            "Error: admin token rejected (set SHELFSYNC_ADMIN_TOKEN)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    r.raise_for_status()


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="shelfsync")
def main():
    """Shelfsync — shared inventories with live updates."""


@main.command()
@click.option("--host", default=None, help="Bind address (default from SHELFSYNC_HOST)")
@click.option("--port", type=int, default=None, help="Port (default from SHELFSYNC_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the HTTP + WebSocket server."""
    import uvicorn

    from shelfsync.config import settings

    uvicorn.run(
        "shelfsync.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command()
def new():
    """Print a fresh inventory UUID and its URL."""
    inventory_id = uuid.uuid4()
    click.echo(str(inventory_id))
    click.echo(f"{_api_url()}/{inventory_id}")


@main.command()
def stats():
    """Show inventory, product, and live connection totals."""
    _run(_stats_impl())


async def _stats_impl():
    async with _client() as c:
        r = await c.get("/api/v1/admin/stats")
        _check(r)
        data = r.json()

    click.secho("Shelfsync usage", bold=True)
    click.echo(f"  Inventories:        {data['total_inventories']}")
    click.echo(f"  Products:           {data['total_products']}")
    click.echo(f"  Connected clients:  {data['total_connected_clients']}")


@main.command()
def inventories():
    """List inventories, most recently updated first."""
    _run(_inventories_impl())


async def _inventories_impl():
    async with _client() as c:
        r = await c.get("/api/v1/admin/inventories")
        _check(r)
        rows = r.json()

    if not rows:
        click.echo("No inventories yet.")
        return

    _print_table(rows, [
        ("UUID", "uuid", 36),
        ("Name", "name", 24),
        ("Products", "product_count", 8),
        ("Qty", "total_quantity", 8),
        ("Live", "connected_clients", 4),
        ("Updated", "updated_at", 19),
    ])


@main.command()
@click.argument("inventory_uuid")
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation")
def delete(inventory_uuid: str, yes: bool):
    """Delete an inventory and all its products."""
    if not yes:
        click.confirm(
            f"Delete inventory {inventory_uuid} and all its products?", abort=True
        )
    _run(_delete_impl(inventory_uuid))


async def _delete_impl(inventory_uuid: str):
    async with _client() as c:
        r = await c.delete(f"/api/v1/admin/inventories/{inventory_uuid}")
        if r.status_code == 404:
            click.secho(f"Inventory {inventory_uuid} not found.", fg="red", err=True)
            sys.exit(1)
        _check(r)
        data = r.json()

    click.secho(
        f"Deleted {inventory_uuid} "
        f"({data.get('evicted_connections', 0)} live viewer(s) disconnected)",
        fg="green",
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()

"""WebSocket endpoint — live inventory updates for browser clients.

Learn: Each client connects to /ws and then sends
{"type": "subscribe", "uuid": "<inventory uuid>"}. The handler:
1. Accepts and sends a `connected` greeting
2. Registers the connection for the lifetime of the socket (attached())
3. Runs a sender task (buffer → socket) and a receiver task (subscribe frames)
4. When either side finishes, cancels the other and unsubscribes

This is a long-lived connection — one per inventory page per browser tab.
"""

import asyncio

import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from shelfsync.config import settings
from shelfsync.realtime.connection import ClientConnection
from shelfsync.realtime.deps import get_registry
from shelfsync.realtime.events import (
    MalformedMessageError,
    connected_message,
    parse_subscribe,
    subscribed_message,
)
from shelfsync.realtime.registry import ConnectionRegistry

logger = structlog.get_logger()
router = APIRouter()


def handle_subscribe(
    registry: ConnectionRegistry, connection, inventory_id: str
) -> bool:
    """Subscribe `connection` and queue the confirmation.

    A connection that is already closing (evicted) is left alone.
    Returns True when a confirmation was queued.
    """
    if not connection.is_open:
        return False
    if not registry.subscribe(connection, inventory_id):
        return False
    return connection.deliver(subscribed_message(inventory_id))


@router.websocket("/ws")
async def inventory_websocket(
    websocket: WebSocket,
    registry: ConnectionRegistry = Depends(get_registry),
):
    """WebSocket endpoint for real-time inventory events."""
    await websocket.accept()

    connection = ClientConnection(
        websocket, max_pending=settings.ws_max_pending_messages
    )
    log = logger.bind(connection_id=connection.id)
    log.info("shelfsync.ws.connected")

    async def client_listener():
        """Handle inbound frames; only `subscribe` is understood."""
        try:
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(frame.get("code", 1000))
                raw = frame.get("text")
                if raw is None:
                    try:
                        raw = (frame.get("bytes") or b"").decode("utf-8")
                    except UnicodeDecodeError:
                        log.info("shelfsync.ws.malformed_message", error="binary frame")
                        continue
                try:
                    inventory_id = parse_subscribe(raw)
                except MalformedMessageError as e:
                    log.info("shelfsync.ws.malformed_message", error=str(e))
                    continue
                if handle_subscribe(registry, connection, inventory_id):
                    log.info("shelfsync.ws.subscribed", inventory_id=inventory_id)
        except (WebSocketDisconnect, asyncio.CancelledError):
            pass

    try:
        # Unsubscribed on exit, before the socket is closed or discarded
        with registry.attached(connection):
            connection.deliver(connected_message())

            sender_task = asyncio.create_task(connection.run_sender())
            client_task = asyncio.create_task(client_listener())
            try:
                # Wait for either to finish (client disconnect or eviction close)
                await asyncio.wait(
                    [sender_task, client_task],
                    return_when=asyncio.FIRST_COMPLETED,
                )
            finally:
                sender_task.cancel()
                client_task.cancel()
            await asyncio.gather(sender_task, client_task, return_exceptions=True)
    finally:
        if (
            websocket.client_state == WebSocketState.CONNECTED
            and websocket.application_state == WebSocketState.CONNECTED
        ):
            await websocket.close()
        log.info("shelfsync.ws.disconnected")

"""Per-connection outbound buffer and sender loop.

Learn: Publishers never touch the socket. `deliver()` appends to a bounded
FIFO and wakes the sender task, which is the only code that awaits
`send_text`. A slow or half-closed client therefore only stalls its own
sender, and messages reach each client in the order they were delivered.
"""

import asyncio
import itertools
from collections import deque

import structlog
from fastapi import WebSocket
from starlette.websockets import WebSocketState

logger = structlog.get_logger()

_ids = itertools.count(1)


class ClientConnection:
    """One live WebSocket client, as seen by the registry and publisher."""

    def __init__(self, websocket: WebSocket, max_pending: int = 100):
        self.id = next(_ids)
        self.websocket = websocket
        self.max_pending = max_pending
        self._pending: deque[str] = deque()
        self._wakeup = asyncio.Event()
        self._closing = False
        self._closed = False

    @property
    def is_open(self) -> bool:
        return not (self._closing or self._closed)

    def deliver(self, payload: str, *, close: bool = False) -> bool:
        """Queue `payload` for sending. Never blocks.

        Returns False when the message was refused: the connection is closed
        or closing, or its buffer is full. A closing message (close=True) is
        always accepted while the connection is open, even over the limit.
        """
        if not self.is_open:
            return False

        if close:
            self._closing = True
        elif len(self._pending) >= self.max_pending:
            logger.warning(
                "shelfsync.ws.buffer_full",
                connection_id=self.id,
                pending=len(self._pending),
            )
            return False

        self._pending.append(payload)
        self._wakeup.set()
        return True

    async def run_sender(self) -> None:
        """Drain the buffer into the socket until closed or the client drops."""
        try:
            while True:
                await self._wakeup.wait()
                self._wakeup.clear()
                while self._pending:
                    await self.websocket.send_text(self._pending.popleft())
                if self._closing:
                    await self._close_socket()
                    return
        except Exception as e:
            # Transport errors end this connection only.
            logger.info(
                "shelfsync.ws.send_failed",
                connection_id=self.id,
                error=str(e),
            )
        finally:
            self._closed = True
            self._pending.clear()

    async def _close_socket(self) -> None:
        if (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        ):
            await self.websocket.close(code=1000)

    def __repr__(self) -> str:
        return f"<ClientConnection id={self.id} open={self.is_open}>"

"""FastAPI dependencies for the real-time objects stored on app.state.

Learn: HTTPConnection is the common base of Request and WebSocket, so the
same dependency works in HTTP routes and WebSocket endpoints.
"""

from starlette.requests import HTTPConnection

from shelfsync.realtime.publisher import EventPublisher
from shelfsync.realtime.registry import ConnectionRegistry


def get_registry(conn: HTTPConnection) -> ConnectionRegistry:
    return conn.app.state.registry


def get_publisher(conn: HTTPConnection) -> EventPublisher:
    return conn.app.state.publisher

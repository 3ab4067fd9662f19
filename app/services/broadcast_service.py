# app/services/broadcast_service.py
"""
Real-time fan-out over WebSockets.

Clients connect on /api/v1/ws (optionally with ?user_id=...) and receive JSON
frames shaped {"event": "<name>", "data": {...}}.

  broadcast_global(event, payload)      → every open connection
  send_to_user(user_id, event, payload) → only that user's connections
  lookup_connections(user_id)           → that user's open sockets

SafeGateway wraps any gateway so a delivery failure is logged and never
propagates into the scan that triggered it.
"""

from typing import Optional
from fastapi import WebSocket
from app.utils.logger import get_logger

logger = get_logger(__name__)


class ConnectionManager:
    def __init__(self):
        self._connections: dict[WebSocket, Optional[str]] = {}

    async def connect(self, websocket: WebSocket, user_id: Optional[str] = None):
        await websocket.accept()
        self._connections[websocket] = user_id
        logger.info(f"[WS] Connected user={user_id or 'anonymous'} "
                    f"({len(self._connections)} open)")

    def disconnect(self, websocket: WebSocket):
        user_id = self._connections.pop(websocket, None)
        logger.info(f"[WS] Disconnected user={user_id or 'anonymous'} "
                    f"({len(self._connections)} open)")

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def lookup_connections(self, user_id: str) -> list[WebSocket]:
        return [ws for ws, uid in self._connections.items() if uid == user_id]

    async def broadcast_global(self, event: str, payload: dict) -> int:
        return await self._send_many(list(self._connections), event, payload)

    async def send_to_user(self, user_id: str, event: str, payload: dict) -> int:
        return await self._send_many(self.lookup_connections(user_id), event, payload)

    async def _send_many(self, sockets: list[WebSocket], event: str, payload: dict) -> int:
        message = {"event": event, "data": payload}
        delivered = 0
        for ws in sockets:
            try:
                await ws.send_json(message)
                delivered += 1
            except Exception as e:
                # Socket closed under us, drop it
                logger.warning(f"[WS] Send of {event} failed, dropping connection: {e}")
                self._connections.pop(ws, None)
        logger.debug(f"[WS] {event} delivered to {delivered}/{len(sockets)} connections")
        return delivered


class SafeGateway:
    """Delivery errors are logged, never raised."""

    def __init__(self, gateway):
        self._gateway = gateway

    async def broadcast_global(self, event: str, payload: dict) -> int:
        try:
            return await self._gateway.broadcast_global(event, payload)
        except Exception as e:
            logger.error(f"[BROADCAST] {event} failed: {e}", exc_info=True)
            return 0

    async def send_to_user(self, user_id: str, event: str, payload: dict) -> int:
        try:
            return await self._gateway.send_to_user(user_id, event, payload)
        except Exception as e:
            logger.error(f"[BROADCAST] {event} to user {user_id} failed: {e}", exc_info=True)
            return 0


manager = ConnectionManager()


def get_gateway() -> ConnectionManager:
    """FastAPI dependency: the process-wide connection manager."""
    return manager

# app/routers/realtime.py
"""
WebSocket endpoint for real-time occupancy updates.
Pass ?user_id=... to also receive your own user:action notifications.
"""

from typing import Optional
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from app.services.broadcast_service import manager

router = APIRouter()


@router.websocket("/ws")
async def occupancy_socket(websocket: WebSocket, user_id: Optional[str] = None):
    await manager.connect(websocket, user_id)
    try:
        while True:
            # Clients don't send anything meaningful; keep the socket open
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(websocket)

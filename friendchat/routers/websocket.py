"""
WebSocket Router

Real-time transport for the chat event channel.
"""

import json
import logging
import uuid
from typing import Callable, Dict, Iterable, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from friendchat.models.events import Outbound
from friendchat.routers.events import Connection, EventRouter

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Connection Manager
# =============================================================================


class ConnectionManager:
    """
    Manages WebSocket connections.

    Each socket is tracked under its own connection handle. A handle that is
    no longer tracked is stale; sends to it are dropped.

    on_drop is called with the handle of a connection that was dropped after
    a failed send, so presence can be cleared before its receive loop ends.
    """

    def __init__(self, on_drop: Optional[Callable[[str], None]] = None):
        # handle -> WebSocket
        self.active_connections: Dict[str, WebSocket] = {}
        self.on_drop = on_drop

    async def connect(self, websocket: WebSocket) -> str:
        """Accept a new connection and return its handle."""
        await websocket.accept()
        handle = str(uuid.uuid4())
        self.active_connections[handle] = websocket
        return handle

    def disconnect(self, handle: str):
        """Forget a connection."""
        self.active_connections.pop(handle, None)

    def is_live(self, handle: Optional[str]) -> bool:
        return handle is not None and handle in self.active_connections

    async def send_personal(self, handle: str, message: dict) -> bool:
        """Send message to one connection. Returns False if it was not delivered."""
        websocket = self.active_connections.get(handle)
        if websocket is None:
            logger.debug(f"Dropping message for stale handle {handle}")
            return False

        try:
            await websocket.send_json(message)
            return True
        except Exception as e:
            logger.debug(f"Send to {handle} failed, dropping connection: {e}")
            self.disconnect(handle)
            if self.on_drop:
                self.on_drop(handle)
            return False

    async def broadcast_all(self, message: dict):
        """Broadcast message to ALL connected clients."""
        for handle in list(self.active_connections.keys()):
            await self.send_personal(handle, message)

    async def deliver(self, outbound: Iterable[Outbound]):
        """Send the events produced by one handler, in order."""
        for item in outbound:
            frame = item.frame()
            if item.is_broadcast:
                await self.broadcast_all(frame)
            else:
                await self.send_personal(item.target, frame)

    def count(self) -> int:
        return len(self.active_connections)


# =============================================================================
# WebSocket Endpoint
# =============================================================================


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for the chat event channel.

    Frames in both directions are JSON objects: {"type": <event>, "data": <payload>}

    Events accepted from the client:
    - register, login
    - search_users
    - send_friend_request, accept_friend_request, decline_friend_request
    - load_chat_history, private_message
    - global_message
    """
    manager: ConnectionManager = websocket.app.state.connections
    event_router: EventRouter = websocket.app.state.event_router

    handle = await manager.connect(websocket)
    conn = Connection(handle=handle)
    logger.info(f"New connection: {handle}")

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                continue
            if not isinstance(message, dict):
                continue

            outbound = event_router.dispatch(conn, message.get("type"), message.get("data"))
            await manager.deliver(outbound)

    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(handle)
        event_router.disconnect(conn)

import logging
from typing import List
from fastapi import Request, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def broadcast(self, message: dict):
        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
            except (RuntimeError, WebSocketDisconnect) as e:
                logger.warning(f"Dropping dead websocket: {e}")
                self.disconnect(connection)


async def notify(notifier, event: str, data: dict):
    """Broadcast through ``notifier`` when one was injected."""
    if notifier is None:
        return
    try:
        await notifier.broadcast({"event": event, "data": data})
    except Exception:
        # The reported change is already committed
        logger.exception(f"Live feed broadcast of {event} failed")


def get_attendance_notifier(request: Request):
    return getattr(request.app.state, "attendance_manager", None)

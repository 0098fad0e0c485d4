import asyncio
import threading
from collections import defaultdict
from typing import Dict, Optional, Set
from uuid import UUID

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

from money_manager.core.logging_setup import get_logger
from money_manager.services.notifier import Notifier

logger = get_logger(__name__)


class ConnectionHub(Notifier):
    """Websocket connections grouped by user.

    Route handlers run in worker threads, so ``publish`` hands each send to
    the event loop the sockets were accepted on instead of awaiting it.
    """

    def __init__(self):
        self._connections: Dict[UUID, Set[WebSocket]] = defaultdict(set)
        self._lock = threading.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    async def connect(self, user_id: UUID, websocket: WebSocket) -> None:
        await websocket.accept()
        self._loop = asyncio.get_running_loop()
        with self._lock:
            self._connections[user_id].add(websocket)
        logger.info("websocket_connected", user_id=str(user_id))

    def disconnect(self, user_id: UUID, websocket: WebSocket) -> None:
        with self._lock:
            sockets = self._connections.get(user_id)
            if not sockets:
                return
            sockets.discard(websocket)
            if not sockets:
                del self._connections[user_id]
        logger.info("websocket_disconnected", user_id=str(user_id))

    def publish(self, user_id: UUID, event: str, payload: Optional[dict] = None) -> None:
        with self._lock:
            sockets = list(self._connections.get(user_id, ()))
        loop = self._loop
        if not sockets or loop is None or loop.is_closed():
            return

        message = jsonable_encoder({"event": event, "data": {"user_id": user_id, **(payload or {})}})
        for websocket in sockets:
            asyncio.run_coroutine_threadsafe(self._send(user_id, websocket, message), loop)

    async def _send(self, user_id: UUID, websocket: WebSocket, message: dict) -> None:
        try:
            await websocket.send_json(message)
        except Exception:
            # socket cerrado entre publish y send
            logger.info("websocket_send_failed", user_id=str(user_id), event_name=message.get("event"))
            self.disconnect(user_id, websocket)


hub = ConnectionHub()


def get_notifier() -> Notifier:
    return hub

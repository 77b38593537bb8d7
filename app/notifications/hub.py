"""In-process registry of realtime WebSocket rooms.

Subjects listen on ``user:<subject id>``; admin dashboards listen on
``admin``. Publishing is best effort: a socket that fails to receive is
dropped from its room.
"""
import logging
from collections import defaultdict

from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)

ADMIN_ROOM = "admin"


def user_room(subject_id: str) -> str:
    return f"user:{subject_id}"


class RealtimeHub:
    """Track open sockets per room and fan messages out to them."""

    def __init__(self):
        self._rooms: dict[str, set] = defaultdict(set)

    def join(self, room: str, websocket) -> None:
        self._rooms[room].add(websocket)
        logger.debug(f"Socket joined {room} ({len(self._rooms[room])} open)")

    def leave(self, room: str, websocket) -> None:
        sockets = self._rooms.get(room)
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            del self._rooms[room]

    def has_listeners(self, room: str) -> bool:
        return bool(self._rooms.get(room))

    async def publish(self, room: str, event: str, payload: dict) -> int:
        """Send ``{"event", "data"}`` to every socket in a room.

        Returns the number of sockets that received it.
        """
        message = {"event": event, "data": jsonable_encoder(payload)}
        delivered = 0
        for websocket in list(self._rooms.get(room, ())):
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping socket in {room} after send failure: {e}")
                self.leave(room, websocket)
        return delivered


hub = RealtimeHub()

"""WebSocket channels for realtime registration updates."""
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from app.core.errors import RegistrationError
from app.core.security import check_admin_key, subject_from_headers
from app.notifications.hub import ADMIN_ROOM, hub, user_room

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["realtime"])


async def _serve(websocket: WebSocket, room: str) -> None:
    await websocket.accept()
    hub.join(room, websocket)
    try:
        # Clients only listen; anything they send is ignored
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug(f"Socket left {room}")
    finally:
        hub.leave(room, websocket)


@router.websocket("")
async def subject_channel(websocket: WebSocket):
    """Personal channel: status changes and new inbox notifications."""
    try:
        subject_id = subject_from_headers(websocket.headers)
    except RegistrationError as e:
        logger.info(f"Refused subject socket: {e.detail}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await _serve(websocket, user_room(subject_id))


@router.websocket("/admin")
async def admin_channel(websocket: WebSocket):
    """Admin channel: registration statistics updates."""
    try:
        check_admin_key(websocket.headers)
    except RegistrationError as e:
        logger.info(f"Refused admin socket: {e.detail}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await _serve(websocket, ADMIN_ROOM)

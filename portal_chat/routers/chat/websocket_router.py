# portal_chat/routers/chat/websocket_router.py
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
import logging

from ...core.exceptions import AuthenticationError
from ...services.chat.events import AUTH_FAILURE_REASON
from ...services.chat.gateway import chat_gateway

logger = logging.getLogger(__name__)
router = APIRouter()


def frame_text(message: dict) -> str:
    """Text of a received frame; binary frames are read as UTF-8"""
    if message.get("text") is not None:
        return message["text"]
    return (message.get("bytes") or b"").decode("utf-8", errors="replace")

@router.websocket("/ws/chat")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for real-time chat"""
    try:
        session = chat_gateway.authenticate(websocket)
    except AuthenticationError as e:
        logger.warning(f"Rejected chat connection: {e.message}")
        # A close before accept is a bare HTTP 403 that carries no reason
        await websocket.accept()
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=AUTH_FAILURE_REASON)
        return

    try:
        await chat_gateway.open_session(websocket, session)
    except Exception:
        logger.exception(f"Could not open chat session for user {session.user_id}")
        chat_gateway.close_session(session)
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", status.WS_1000_NORMAL_CLOSURE))
            await chat_gateway.handle_frame(session, frame_text(message))
    except WebSocketDisconnect:
        logger.info(f"User {session.user_id} disconnected from chat")
    except Exception:
        logger.exception(f"WebSocket error for user {session.user_id}")
    finally:
        chat_gateway.close_session(session)

# portal_chat/services/chat/gateway.py
"""Real-time session gateway.

Authenticates a connection once, joins it to its personal group and to the
room of every chat the user already has, then serves the per-event
operations. Every event gets exactly one acknowledgement; handler failures
become error acknowledgements and never close the socket.
"""
from typing import Any, Awaitable, Callable, Dict, Optional
import json
import logging

from fastapi import WebSocket
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker

from .chat_service import ChatService
from .connection_manager import ConnectionManager, Session, connection_manager
from .events import (
    FRAME_EVENT, FRAME_DATA, FRAME_ACK,
    EVT_ACK, EVT_ERROR, EVT_GET_MESSAGE_HISTORY, EVT_MESSAGE_HISTORY,
    EVT_SEND_MESSAGE, EVT_TYPING, STATUS_OK, STATUS_ERROR,
)
from .fanout import PresenceFanout
from ..identity_service import IdentityService, normalize_chat_role, require_direct_chat_role
from ...core.database import AsyncSessionLocal
from ...core.exceptions import ChatAccessDenied, ChatError, ValidationException
from ...core.security import decode_access_token, get_token_from_headers
from ...schemas.chat_schemas import HistoryRequest, SendMessageRequest, TypingRequest, serialize_message
from ...utils.ids import parse_uuid

logger = logging.getLogger(__name__)

Handler = Callable[[Session, Dict[str, Any]], Awaitable[Dict[str, Any]]]


class ChatGateway:
    def __init__(self, manager: ConnectionManager, session_factory: async_sessionmaker):
        self.manager = manager
        self.session_factory = session_factory
        self.fanout = PresenceFanout(manager)
        self.handlers: Dict[str, Handler] = {
            EVT_GET_MESSAGE_HISTORY: self.get_message_history,
            EVT_SEND_MESSAGE: self.send_message,
            EVT_TYPING: self.typing,
        }

    # Lifecycle

    def authenticate(self, websocket: WebSocket) -> Session:
        """Build the session from the handshake token or raise AuthenticationError"""
        token = websocket.query_params.get("token") or get_token_from_headers(websocket.headers)
        principal = decode_access_token(token)
        return Session(
            user_id=principal.user_id,
            role=principal.role,
            chat_role=normalize_chat_role(principal.role),
        )

    async def open_session(self, websocket: WebSocket, session: Session):
        await self.manager.connect(websocket, session)

        async with self.session_factory() as db:
            chats = await ChatService(db).find_chats_for_user(session.user_id)
        for chat in chats:
            self.manager.join_room(session.sid, chat.id)
        logger.info(f"Session {session.sid} joined {len(chats)} chat rooms")

    def close_session(self, session: Session):
        self.manager.disconnect(session.sid)

    # Frame handling

    async def handle_frame(self, session: Session, raw: str):
        try:
            frame = json.loads(raw)
        except (TypeError, ValueError):
            await self.manager.send_to_session(session.sid, EVT_ERROR, {"error": "Malformed JSON frame"})
            return

        if not isinstance(frame, dict) or not isinstance(frame.get(FRAME_EVENT), str):
            await self.manager.send_to_session(session.sid, EVT_ERROR, {"error": "Missing event name"})
            return

        event = frame[FRAME_EVENT]
        payload = frame.get(FRAME_DATA)
        result = await self.dispatch(session, event, payload if isinstance(payload, dict) else {})
        await self.manager.send_to_session(session.sid, EVT_ACK, {
            FRAME_ACK: frame.get(FRAME_ACK),
            FRAME_EVENT: event,
            **result,
        })

    async def dispatch(self, session: Session, event: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        handler = self.handlers.get(event)
        if handler is None:
            return {"status": STATUS_ERROR, "error": f"Unknown event: {event}"}

        try:
            return await handler(session, payload)
        except ChatError as e:
            logger.info(f"{event} rejected for user {session.user_id}: {e.message}")
            return {"status": STATUS_ERROR, "error": e.message}
        except Exception:
            logger.exception(f"{event} failed for user {session.user_id}")
            return {"status": STATUS_ERROR, "error": "Internal server error"}

    # Operations

    async def get_message_history(self, session: Session, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            request = HistoryRequest.model_validate(payload)
        except ValidationError:
            raise ValidationException("Invalid history request")

        if request.chatId:
            chat_id = parse_uuid(request.chatId, "chatId")
            async with self.session_factory() as db:
                service = ChatService(db)
                if not await service.is_member(chat_id, session.user_id):
                    raise ChatAccessDenied()
                messages = [serialize_message(m) for m in await service.list_messages(chat_id)]

            await self.manager.send_to_session(session.sid, EVT_MESSAGE_HISTORY, {
                "chatId": str(chat_id),
                "messages": messages,
            })
            return {"status": STATUS_OK, "messages": messages}

        if request.userId:
            my_role = require_direct_chat_role(session.role)
            peer_id = parse_uuid(request.userId, "userId")
            async with self.session_factory() as db:
                peer_role = await IdentityService(db).resolve_role(peer_id)
                service = ChatService(db)
                chat = await service.get_or_create_chat(my_role, session.user_id, peer_role, peer_id)
                messages = [serialize_message(m) for m in await service.list_messages(chat.id)]

            # Covers chats created after this session connected
            self.manager.join_room(session.sid, chat.id)
            return {"status": STATUS_OK, "chatId": str(chat.id), "messages": messages}

        raise ValidationException("chatId or userId is required")

    async def send_message(self, session: Session, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            request = SendMessageRequest.model_validate(payload)
        except ValidationError:
            raise ValidationException("Invalid message data")
        if not request.toUserId or not request.content.strip():
            raise ValidationException("Invalid message data")

        my_role = require_direct_chat_role(session.role)
        peer_id = parse_uuid(request.toUserId, "toUserId")
        async with self.session_factory() as db:
            peer_role = await IdentityService(db).resolve_role(peer_id)
            service = ChatService(db)
            chat = await service.get_or_create_chat(my_role, session.user_id, peer_role, peer_id)
            message = serialize_message(
                await service.append_message(chat.id, session.user_id, request.content)
            )

        await self.fanout.deliver(message, session.user_id, peer_id, temp_id=request.tempId)

        for user_id in (session.user_id, peer_id):
            for sid in self.manager.sessions_for_user(user_id):
                self.manager.join_room(sid, chat.id)

        if request.tempId is not None:
            message = {**message, "tempId": request.tempId}
        return {"status": STATUS_OK, "message": message}

    async def typing(self, session: Session, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            request = TypingRequest.model_validate(payload)
        except ValidationError:
            raise ValidationException("Invalid typing data")

        chat_id = parse_uuid(request.chatId, "chatId")
        async with self.session_factory() as db:
            if not await ChatService(db).is_member(chat_id, session.user_id):
                raise ChatAccessDenied()

        self.manager.join_room(session.sid, chat_id)
        await self.manager.broadcast_to_room(chat_id, EVT_TYPING, {
            "chatId": str(chat_id),
            "userId": str(session.user_id),
            "isTyping": request.isTyping,
        }, exclude_sid=session.sid)
        return {"status": STATUS_OK, "onlineUsers": self.manager.get_online_users_in_room(chat_id)}


# Global gateway instance
chat_gateway = ChatGateway(connection_manager, AsyncSessionLocal)

# portal_chat/services/chat/connection_manager.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set
from uuid import UUID, uuid4
from fastapi import WebSocket
import asyncio
import json
import logging

from .events import FRAME_EVENT, FRAME_DATA
from ...models.chat import ChatRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """One authenticated live connection; fixed for the connection's lifetime"""
    user_id: UUID
    role: str
    chat_role: Optional[ChatRole]
    sid: str = field(default_factory=lambda: uuid4().hex)


@dataclass
class Connection:
    websocket: WebSocket
    session: Session
    rooms: Set[str] = field(default_factory=set)
    send_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class ConnectionManager:
    """Registry of live sessions, keyed by session, by user and by chat room"""

    def __init__(self):
        # {sid: Connection}
        self.active_connections: Dict[str, Connection] = {}
        # Personal-delivery groups: {user_id: {sid}}
        self.user_sessions: Dict[str, Set[str]] = {}
        # Chat room subscriptions: {chat_room_id: {sid}}
        self.room_subscriptions: Dict[str, Set[str]] = {}

    async def connect(self, websocket: WebSocket, session: Session):
        """Accept websocket connection and register it under its user"""
        await websocket.accept()
        self.active_connections[session.sid] = Connection(websocket=websocket, session=session)
        self.user_sessions.setdefault(str(session.user_id), set()).add(session.sid)
        logger.info(f"User {session.user_id} ({session.role}) connected as session {session.sid}")

    def disconnect(self, sid: str):
        """Remove the session from its user group and from all rooms"""
        connection = self.active_connections.get(sid)
        if connection is None:
            return

        for room_key in list(connection.rooms):
            self.leave_room(sid, room_key)
        del self.active_connections[sid]

        user_key = str(connection.session.user_id)
        sessions = self.user_sessions.get(user_key)
        if sessions is not None:
            sessions.discard(sid)
            if not sessions:
                del self.user_sessions[user_key]

        logger.info(f"Session {sid} of user {user_key} disconnected")

    def join_room(self, sid: str, chat_room_id: UUID):
        """Subscribe a session to a chat room"""
        connection = self.active_connections.get(sid)
        room_key = str(chat_room_id)
        if connection is None:
            logger.warning(f"Session {sid} not connected, cannot join room {room_key}")
            return

        connection.rooms.add(room_key)
        self.room_subscriptions.setdefault(room_key, set()).add(sid)

    def leave_room(self, sid: str, chat_room_id: UUID):
        room_key = str(chat_room_id)
        connection = self.active_connections.get(sid)
        if connection is not None:
            connection.rooms.discard(room_key)

        if room_key in self.room_subscriptions:
            self.room_subscriptions[room_key].discard(sid)
            if not self.room_subscriptions[room_key]:
                del self.room_subscriptions[room_key]

    def sessions_for_user(self, user_id: UUID) -> List[str]:
        return sorted(self.user_sessions.get(str(user_id), ()))

    def is_user_online(self, user_id: UUID) -> bool:
        return bool(self.user_sessions.get(str(user_id)))

    def get_online_users_in_room(self, chat_room_id: UUID) -> List[str]:
        """Distinct user ids with at least one session in the room"""
        users = {
            str(self.active_connections[sid].session.user_id)
            for sid in self.room_subscriptions.get(str(chat_room_id), ())
            if sid in self.active_connections
        }
        return sorted(users)

    async def send_to_session(self, sid: str, event: str, data: Any) -> bool:
        """Send one event frame to one session; a dead socket is unregistered"""
        connection = self.active_connections.get(sid)
        if connection is None:
            return False

        frame = json.dumps({FRAME_EVENT: event, FRAME_DATA: data})
        try:
            async with connection.send_lock:
                await connection.websocket.send_text(frame)
            return True
        except Exception as e:
            logger.error(f"Error sending {event} to session {sid}: {e}")
            self.disconnect(sid)
            return False

    async def emit_to_user(self, user_id: UUID, event: str, data: Any, exclude_sid: Optional[str] = None) -> int:
        """Send to every live session of a user; returns how many got it"""
        sent_count = 0
        for sid in self.sessions_for_user(user_id):
            if sid == exclude_sid:
                continue
            if await self.send_to_session(sid, event, data):
                sent_count += 1
        return sent_count

    async def broadcast_to_room(self, chat_room_id: UUID, event: str, data: Any, exclude_sid: Optional[str] = None) -> int:
        """Send to all sessions subscribed to a chat room"""
        room_key = str(chat_room_id)
        sent_count = 0
        for sid in sorted(self.room_subscriptions.get(room_key, ())):
            if sid == exclude_sid:
                continue
            if await self.send_to_session(sid, event, data):
                sent_count += 1

        logger.debug(f"Broadcast {event} to room {room_key}: sent to {sent_count} sessions")
        return sent_count


# Global connection registry instance
connection_manager = ConnectionManager()

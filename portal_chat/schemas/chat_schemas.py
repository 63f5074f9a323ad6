# portal_chat/schemas/chat_schemas.py
"""Wire shapes for the chat HTTP routes and the real-time events."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict

from ..models.chat import ChatRoom, ChatMessage


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; everything we store is UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def isoformat(value: Optional[datetime]) -> Optional[str]:
    value = as_utc(value)
    return value.isoformat() if value else None


def serialize_message(message: ChatMessage) -> Dict[str, Any]:
    return {
        "id": str(message.id),
        "chatId": str(message.chat_room_id),
        "senderId": str(message.sender_id),
        "text": message.text,
        "createdAt": isoformat(message.created_at),
    }


def serialize_history_row(message: ChatMessage, sender_name: Optional[str]) -> Dict[str, Any]:
    """Row shape of the paginated history route"""
    return {
        "id": str(message.id),
        "chatId": str(message.chat_room_id),
        "sender": {
            "id": str(message.sender_id),
            "name": sender_name or "Unknown",
        },
        "text": message.text,
        "timestamp": isoformat(message.created_at),
    }


def serialize_chat(chat: Optional[ChatRoom]) -> Optional[Dict[str, Any]]:
    if chat is None:
        return None
    return {
        "id": str(chat.id),
        "members": [
            {"id": str(member.member_id), "role": member.member_type}
            for member in chat.members
        ],
        "lastUpdated": isoformat(chat.last_updated),
    }


# Real-time payloads

class HistoryRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    chatId: Optional[str] = None
    userId: Optional[str] = None


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    toUserId: str
    content: str
    tempId: Optional[str] = None


class TypingRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    chatId: str
    isTyping: bool = True


# HTTP responses

class LastChatEntry(BaseModel):
    userId: str
    userName: Optional[str] = None
    lastMessage: Optional[str] = None
    lastUpdated: Optional[str] = None


class UnreadCountResponse(BaseModel):
    count: int


class MessageListResponse(BaseModel):
    ok: bool = True
    messages: List[Dict[str, Any]]


class ChatWithMessagesResponse(BaseModel):
    ok: bool = True
    chat: Optional[Dict[str, Any]] = None
    messages: List[Dict[str, Any]]


class DirectoryUserOut(BaseModel):
    id: str
    name: str
    role: str


class UserSearchResponse(BaseModel):
    ok: bool = True
    users: List[DirectoryUserOut]


class UserProfileResponse(BaseModel):
    ok: bool = True
    user: DirectoryUserOut

# portal_chat/models/chat/__init__.py
from .chat_room import ChatRoom, ChatMember, ChatRole, participant_key
from .chat_message import ChatMessage

__all__ = ["ChatRoom", "ChatMember", "ChatRole", "ChatMessage", "participant_key"]

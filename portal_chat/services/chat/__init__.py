# portal_chat/services/chat/__init__.py
from .chat_service import ChatService
from .connection_manager import ConnectionManager, Session, connection_manager
from .fanout import PresenceFanout
from .gateway import ChatGateway, chat_gateway

__all__ = [
    "ChatService",
    "ConnectionManager",
    "Session",
    "connection_manager",
    "PresenceFanout",
    "ChatGateway",
    "chat_gateway",
]

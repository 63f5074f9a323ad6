from . import health
from .chat import chat_router, message_router, last_chats_router, users_router, websocket_router

__all__ = [
    "health",
    "chat_router",
    "message_router",
    "last_chats_router",
    "users_router",
    "websocket_router",
]

# portal_chat/routers/chat/__init__.py
from .chat_router import router as chat_router
from .message_router import router as message_router
from .last_chats_router import router as last_chats_router
from .users_router import router as users_router
from .websocket_router import router as websocket_router

__all__ = ["chat_router", "message_router", "last_chats_router", "users_router", "websocket_router"]

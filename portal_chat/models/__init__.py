# portal_chat/models/__init__.py
"""Import all models here, needed for Alembic migration."""
from .base import Base

# Directory (read-only)
from .user import Student, Teacher, Admin

# Private chat
from .chat import ChatRoom, ChatMember, ChatMessage

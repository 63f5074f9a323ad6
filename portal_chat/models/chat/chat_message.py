# portal_chat/models/chat/chat_message.py
from sqlalchemy import Column, Text, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from ..base import Base

class ChatMessage(Base):
    __tablename__ = "chat_messages"

    chat_room_id = Column(Uuid(as_uuid=True), ForeignKey("chat_rooms.id"), nullable=False, index=True)
    sender_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    text = Column(Text, nullable=False)

    # Relationships
    chat_room = relationship("ChatRoom", back_populates="messages")

    # Index for ordered history reads
    __table_args__ = (
        Index('idx_chat_message_room_time', 'chat_room_id', 'created_at'),
    )

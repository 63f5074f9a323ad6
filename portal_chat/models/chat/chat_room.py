# portal_chat/models/chat/chat_room.py
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from ..base import Base


class ChatRole(str, enum.Enum):
    """Roles a private chat participant can hold"""
    STUDENT = "student"
    TEACHER = "teacher"


def participant_key(user_a, user_b) -> str:
    """Canonical key of an unordered participant pair"""
    first, second = sorted((str(user_a), str(user_b)))
    return f"{first}:{second}"


class ChatRoom(Base):
    __tablename__ = "chat_rooms"

    # At most one private chat per unordered pair of users
    participant_key = Column(String(80), nullable=False, unique=True)
    last_updated = Column(DateTime(timezone=True), nullable=False, index=True)

    # Relationships
    members = relationship(
        "ChatMember",
        back_populates="chat_room",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    messages = relationship("ChatMessage", back_populates="chat_room", cascade="all, delete-orphan")

    def member_ids(self):
        return [member.member_id for member in self.members]

    def counterpart_of(self, user_id):
        for member in self.members:
            if member.member_id != user_id:
                return member
        return None


class ChatMember(Base):
    __tablename__ = "chat_members"

    chat_room_id = Column(Uuid(as_uuid=True), ForeignKey("chat_rooms.id"), nullable=False, index=True)
    member_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    member_type = Column(String(10), nullable=False)  # 'teacher' or 'student'

    chat_room = relationship("ChatRoom", back_populates="members")

    __table_args__ = (
        UniqueConstraint('chat_room_id', 'member_id', name='uq_chat_member'),
    )

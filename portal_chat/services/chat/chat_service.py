# portal_chat/services/chat/chat_service.py
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Dict, Any
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, and_, desc, asc, func

from ..base_service import BaseService
from ..identity_service import IdentityService
from ...core.config import settings
from ...core.exceptions import ChatAccessDenied, ChatNotFound, SelfChatError, ValidationException
from ...models.chat import ChatRoom, ChatMember, ChatMessage, ChatRole, participant_key
from ...schemas.chat_schemas import as_utc, isoformat

logger = logging.getLogger(__name__)

# Smallest step between two messages of the same chat
_TICK = timedelta(microseconds=1)


def clamp_page(limit: Optional[int], offset: Optional[int]) -> tuple:
    """Bound a page request: 1 <= limit <= max, offset >= 0"""
    if limit is None:
        limit = settings.message_page_size
    limit = max(1, min(int(limit), settings.message_page_max))
    offset = max(int(offset or 0), 0)
    return limit, offset


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatService(BaseService[ChatRoom]):
    def __init__(self, db: AsyncSession):
        super().__init__(ChatRoom, db)

    # Chat directory

    async def get_chat_by_key(self, key: str) -> Optional[ChatRoom]:
        stmt = select(ChatRoom).where(ChatRoom.participant_key == key)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create_chat(
        self, role_a: ChatRole, id_a: UUID, role_b: ChatRole, id_b: UUID
    ) -> ChatRoom:
        """Get the private chat of an unordered pair, creating it on first contact"""
        if id_a == id_b:
            raise SelfChatError()

        key = participant_key(id_a, id_b)
        chat = await self.get_chat_by_key(key)
        if chat:
            return chat

        chat = ChatRoom(participant_key=key, last_updated=utcnow())
        chat.members = [
            ChatMember(member_id=id_a, member_type=ChatRole(role_a).value),
            ChatMember(member_id=id_b, member_type=ChatRole(role_b).value),
        ]
        self.db.add(chat)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a concurrent first-contact race; the winner's row is the chat
            await self.db.rollback()
            logger.info(f"Chat {key} created concurrently, fetching existing row")
            chat = await self.get_chat_by_key(key)
            if chat is None:
                raise
            return chat

        logger.info(f"Created chat {chat.id} for pair {key}")
        return chat

    async def find_chats_for_user(self, user_id: UUID, role: Optional[ChatRole] = None) -> List[ChatRoom]:
        """All chats the user takes part in, most recent activity first"""
        conditions = [ChatMember.member_id == user_id]
        if role is not None:
            conditions.append(ChatMember.member_type == ChatRole(role).value)

        stmt = (
            select(ChatRoom)
            .join(ChatMember, ChatMember.chat_room_id == ChatRoom.id)
            .where(and_(*conditions))
            .order_by(desc(ChatRoom.last_updated))
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().unique().all())

    async def find_latest_chat_between(self, user_a: UUID, user_b: UUID) -> Optional[ChatRoom]:
        """Existing chat shared by both users, never creates one"""
        shared = (
            select(ChatMember.chat_room_id)
            .where(ChatMember.member_id.in_([user_a, user_b]))
            .group_by(ChatMember.chat_room_id)
            .having(func.count(func.distinct(ChatMember.member_id)) == 2)
        )
        stmt = (
            select(ChatRoom)
            .where(ChatRoom.id.in_(shared))
            .order_by(desc(ChatRoom.last_updated))
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def is_member(self, chat_id: UUID, user_id: UUID) -> bool:
        stmt = select(ChatMember.id).where(
            and_(
                ChatMember.chat_room_id == chat_id,
                ChatMember.member_id == user_id,
            )
        )
        result = await self.db.execute(stmt)
        return result.first() is not None

    # Message log

    async def append_message(self, chat_id: UUID, sender_id: UUID, text: str) -> ChatMessage:
        """Persist a message and move the chat's last activity to its timestamp"""
        if not isinstance(text, str) or not text.strip():
            raise ValidationException("Message text cannot be empty")

        stmt = (
            select(ChatRoom)
            .where(ChatRoom.id == chat_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        chat = result.scalar_one_or_none()
        if chat is None:
            raise ChatNotFound(str(chat_id))
        if sender_id not in chat.member_ids():
            raise ChatAccessDenied()

        # Strictly increasing per chat even when the clock stalls or steps back
        created_at = max(utcnow(), as_utc(chat.last_updated) + _TICK)

        message = ChatMessage(
            chat_room_id=chat.id,
            sender_id=sender_id,
            text=text,
            created_at=created_at,
        )
        chat.last_updated = created_at
        self.db.add(message)
        await self.db.commit()
        await self.db.refresh(message)
        return message

    async def list_messages(
        self,
        chat_id: UUID,
        limit: Optional[int] = None,
        offset: int = 0,
        order: str = "asc",
    ) -> List[ChatMessage]:
        """Messages of one chat; the whole history when no limit is given"""
        ordering = desc if order == "desc" else asc
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.chat_room_id == chat_id)
            .order_by(ordering(ChatMessage.created_at), ordering(ChatMessage.id))
        )
        if limit is not None or offset:
            limit, offset = clamp_page(limit, offset)
            stmt = stmt.offset(offset).limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_messages_for_user(self, user_id: UUID) -> List[ChatMessage]:
        """Every message across the user's chats, newest first"""
        stmt = (
            select(ChatMessage)
            .join(ChatMember, ChatMember.chat_room_id == ChatMessage.chat_room_id)
            .where(ChatMember.member_id == user_id)
            .order_by(desc(ChatMessage.created_at))
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # Conversation list aggregations

    async def get_last_chats(self, user_id: UUID) -> List[Dict[str, Any]]:
        """One row per counterpart with the newest message of the shared chat"""
        chats = await self.find_chats_for_user(user_id)
        if not chats:
            return []

        latest = (
            select(
                ChatMessage.chat_room_id.label("chat_room_id"),
                func.max(ChatMessage.created_at).label("latest_at"),
            )
            .where(ChatMessage.chat_room_id.in_([chat.id for chat in chats]))
            .group_by(ChatMessage.chat_room_id)
            .subquery()
        )
        stmt = select(ChatMessage).join(
            latest,
            and_(
                ChatMessage.chat_room_id == latest.c.chat_room_id,
                ChatMessage.created_at == latest.c.latest_at,
            ),
        )
        result = await self.db.execute(stmt)
        last_by_chat = {message.chat_room_id: message for message in result.scalars().all()}

        counterparts = {}
        for chat in chats:
            other = chat.counterpart_of(user_id)
            if other is not None:
                counterparts[chat.id] = other.member_id

        names = await IdentityService(self.db).get_display_names(counterparts.values())

        rows = []
        for chat in chats:
            other_id = counterparts.get(chat.id)
            if other_id is None:
                continue
            last = last_by_chat.get(chat.id)
            rows.append((as_utc(last.created_at) if last else None, {
                "userId": str(other_id),
                "userName": names.get(other_id),
                "lastMessage": last.text if last else None,
                "lastUpdated": isoformat(last.created_at) if last else None,
            }))

        # Newest first, chats without messages last
        rows.sort(key=lambda row: (row[0] is not None, row[0] or datetime.min.replace(tzinfo=timezone.utc)), reverse=True)
        return [entry for _, entry in rows]

    async def count_unseen(self, user_id: UUID) -> int:
        """Messages in the user's chats that someone else sent"""
        stmt = (
            select(func.count(ChatMessage.id))
            .join(ChatMember, ChatMember.chat_room_id == ChatMessage.chat_room_id)
            .where(
                and_(
                    ChatMember.member_id == user_id,
                    ChatMessage.sender_id != user_id,
                )
            )
        )
        result = await self.db.execute(stmt)
        return result.scalar() or 0

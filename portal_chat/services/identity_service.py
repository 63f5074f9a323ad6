# portal_chat/services/identity_service.py
"""Resolve user ids against the portal directory and map roles onto chat roles.

The admin -> teacher coercion lives here and nowhere else: admins may take
part in private chats as if they were teachers, but only students and
teachers may open a direct chat from the real-time channel.
"""
from typing import Dict, Iterable, List, NamedTuple, Optional
from uuid import UUID
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .base_service import BaseService
from ..core.exceptions import RoleNotAllowed, UserNotFound
from ..models.chat import ChatRole
from ..models.user import DIRECTORY_MODELS

logger = logging.getLogger(__name__)

_CHAT_ROLES = {
    "student": ChatRole.STUDENT,
    "teacher": ChatRole.TEACHER,
    "admin": ChatRole.TEACHER,
}


class DirectoryUser(NamedTuple):
    id: UUID
    name: str
    role: str


def normalize_chat_role(role) -> Optional[ChatRole]:
    if isinstance(role, ChatRole):
        return role
    if not isinstance(role, str):
        return None
    return _CHAT_ROLES.get(role.strip().lower())


def require_direct_chat_role(role: str) -> ChatRole:
    """Only students and teachers may start a direct chat"""
    if isinstance(role, str) and role.lower() in (ChatRole.STUDENT.value, ChatRole.TEACHER.value):
        return ChatRole(role.lower())
    raise RoleNotAllowed(f"Role '{role}' cannot start a private chat")


class IdentityService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self._lookups = [BaseService(model, db) for model in DIRECTORY_MODELS]

    async def get_user(self, user_id: UUID) -> Optional[DirectoryUser]:
        for lookup in self._lookups:
            person = await lookup.get(user_id)
            if person is not None:
                return DirectoryUser(id=person.id, name=person.name, role=lookup.model.role)
        return None

    async def resolve_role(self, user_id: UUID) -> ChatRole:
        user = await self.get_user(user_id)
        if user is None:
            logger.info(f"Directory lookup failed for {user_id}")
            raise UserNotFound(str(user_id))

        chat_role = normalize_chat_role(user.role)
        if chat_role is None:
            raise RoleNotAllowed(f"Unsupported role for user {user_id}")
        return chat_role

    async def get_display_names(self, user_ids: Iterable[UUID]) -> Dict[UUID, str]:
        pending = set(user_ids)
        names: Dict[UUID, str] = {}
        for lookup in self._lookups:
            if not pending:
                break
            for person in await lookup.get_many(pending):
                names[person.id] = person.name
                pending.discard(person.id)
        return names

    async def search_users(
        self, query: str, exclude_id: Optional[UUID] = None, limit: int = 20
    ) -> List[DirectoryUser]:
        """Case-insensitive name search across every directory table"""
        term = query.strip()
        if not term:
            return []
        # LIKE wildcards in the query are matched literally
        escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"

        found: List[DirectoryUser] = []
        for lookup in self._lookups:
            model = lookup.model
            stmt = (
                select(model)
                .where(model.name.ilike(pattern, escape="\\"))
                .order_by(model.name)
                .limit(limit)
            )
            if exclude_id is not None:
                stmt = stmt.where(model.id != exclude_id)
            result = await self.db.execute(stmt)
            found.extend(
                DirectoryUser(id=person.id, name=person.name, role=model.role)
                for person in result.scalars().all()
            )

        found.sort(key=lambda user: user.name.lower())
        return found[:limit]

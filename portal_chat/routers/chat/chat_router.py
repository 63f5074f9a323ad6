# portal_chat/routers/chat/chat_router.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ...core.database import get_db
from ...core.exceptions import AuthenticationError, SelfChatError
from ...core.security import Principal, get_current_principal
from ...models.chat import ChatRole
from ...schemas.chat_schemas import ChatWithMessagesResponse, serialize_chat, serialize_message
from ...services.chat.chat_service import ChatService
from ...services.identity_service import IdentityService, normalize_chat_role
from ...utils.ids import parse_uuid

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/chats", tags=["Private Chat"])

@router.get("/private/{user_id}", response_model=ChatWithMessagesResponse)
async def get_or_create_private_chat(
    user_id: str,
    userType: Optional[ChatRole] = Query(None),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Get or create the private chat with another user, with its full history"""
    my_role = normalize_chat_role(principal.role)
    if my_role is None:
        raise AuthenticationError("Unauthorized")

    other_id = parse_uuid(user_id, "userId")
    if other_id == principal.user_id:
        raise SelfChatError()

    other_role = userType or await IdentityService(db).resolve_role(other_id)

    service = ChatService(db)
    chat = await service.get_or_create_chat(my_role, principal.user_id, other_role, other_id)
    messages = await service.list_messages(chat.id)

    return {
        "ok": True,
        "chat": serialize_chat(chat),
        "messages": [serialize_message(m) for m in messages],
    }

@router.get("/{user_id}", response_model=ChatWithMessagesResponse)
async def get_chat_with_user(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Fetch the existing chat with another user and its messages, without creating one"""
    other_id = parse_uuid(user_id, "userId")
    service = ChatService(db)

    chat = await service.find_latest_chat_between(principal.user_id, other_id)
    if chat is None:
        return {"ok": True, "chat": None, "messages": []}

    messages = await service.list_messages(chat.id)
    return {
        "ok": True,
        "chat": serialize_chat(chat),
        "messages": [serialize_message(m) for m in messages],
    }

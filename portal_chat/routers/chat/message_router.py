# portal_chat/routers/chat/message_router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.config import settings
from ...core.database import get_db
from ...core.exceptions import AuthenticationError, ChatAccessDenied
from ...core.security import Principal, get_current_principal
from ...schemas.chat_schemas import MessageListResponse, serialize_history_row
from ...services.chat.chat_service import ChatService, clamp_page
from ...services.identity_service import IdentityService, normalize_chat_role
from ...utils.ids import parse_uuid

router = APIRouter(prefix="/api/messages", tags=["Chat Messages"])

@router.get("/user/all", response_model=MessageListResponse)
async def get_messages_for_user(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """All messages across the caller's chats, newest first"""
    if normalize_chat_role(principal.role) is None:
        raise AuthenticationError("Unauthorized")

    messages = await ChatService(db).list_messages_for_user(principal.user_id)
    names = await IdentityService(db).get_display_names({m.sender_id for m in messages})
    return {
        "ok": True,
        "messages": [serialize_history_row(m, names.get(m.sender_id)) for m in messages],
    }

@router.get("/{chat_id}", response_model=MessageListResponse)
async def list_messages_by_chat(
    chat_id: str,
    limit: int = Query(settings.message_page_size),
    offset: int = Query(0),
    order: str = Query("desc"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Paginated history of one chat; members only"""
    chat_uuid = parse_uuid(chat_id, "chatId")
    limit, offset = clamp_page(limit, offset)
    order = "asc" if order == "asc" else "desc"

    service = ChatService(db)
    if not await service.is_member(chat_uuid, principal.user_id):
        raise ChatAccessDenied("Forbidden")

    messages = await service.list_messages(chat_uuid, limit=limit, offset=offset, order=order)
    names = await IdentityService(db).get_display_names({m.sender_id for m in messages})
    return {
        "ok": True,
        "messages": [serialize_history_row(m, names.get(m.sender_id)) for m in messages],
    }

# portal_chat/routers/chat/last_chats_router.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.security import Principal, get_current_principal
from ...schemas.chat_schemas import LastChatEntry, UnreadCountResponse
from ...services.chat.chat_service import ChatService

router = APIRouter(prefix="/api/lastChats", tags=["Conversation List"])

@router.get("/last-messages", response_model=List[LastChatEntry])
async def get_last_messages(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Most recent message per counterpart, for the conversation list"""
    return await ChatService(db).get_last_chats(principal.user_id)

@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Messages in the caller's chats sent by someone else"""
    count = await ChatService(db).count_unseen(principal.user_id)
    return {"count": count}

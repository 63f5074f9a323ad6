# portal_chat/routers/chat/users_router.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.database import get_db
from ...core.exceptions import UserNotFound
from ...core.security import Principal, get_current_principal
from ...schemas.chat_schemas import UserProfileResponse, UserSearchResponse
from ...services.identity_service import IdentityService
from ...utils.ids import parse_uuid

router = APIRouter(prefix="/api/chat/users", tags=["Chat Users"])

def _user_out(user):
    return {"id": str(user.id), "name": user.name, "role": user.role}

@router.get("/search", response_model=UserSearchResponse)
async def search_users(
    query: Optional[str] = Query(None),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Find people to start a chat with; the caller is left out"""
    if not query:
        return {"ok": True, "users": []}

    users = await IdentityService(db).search_users(query, exclude_id=principal.user_id)
    return {"ok": True, "users": [_user_out(u) for u in users]}

@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_user_profile(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Directory profile of a chat peer"""
    user = await IdentityService(db).get_user(parse_uuid(user_id, "userId"))
    if user is None:
        raise UserNotFound()
    return {"ok": True, "user": _user_out(user)}

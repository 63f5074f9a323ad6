# portal_chat/core/security.py
"""Bearer token handling shared by the HTTP routes and the WebSocket gateway."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Mapping
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .config import settings
from .exceptions import AuthenticationError

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller: user id plus the raw role claim."""
    user_id: UUID
    role: str


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: Optional[str]) -> Principal:
    """Verify signature and expiry and extract the principal.

    Raises AuthenticationError for a missing token, a bad signature, an
    expired token, or a payload without a usable id/role.
    """
    if not token:
        raise AuthenticationError("Missing token")
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")

    raw_id = payload.get("id") or payload.get("sub")
    role = payload.get("role")
    if raw_id is None or not isinstance(role, str):
        raise AuthenticationError("Invalid token payload")
    try:
        user_id = UUID(str(raw_id))
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    return Principal(user_id=user_id, role=role.lower())


def get_token_from_headers(headers: Mapping[str, str]) -> Optional[str]:
    """Extract Bearer token from an Authorization header."""
    auth_header = headers.get("authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip()
    return None


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """FastAPI dependency that enforces authentication on protected endpoints."""
    if credentials is None:
        raise AuthenticationError("Missing Authorization header")
    return decode_access_token(credentials.credentials)

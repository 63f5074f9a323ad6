"""Shared fixtures for the portal chat test suite."""

import os
import tempfile
import uuid
from pathlib import Path

# ---------------------------------------------------------------------------
# Settings are read at import time, so the environment has to be in place
# before anything from portal_chat is imported.
# ---------------------------------------------------------------------------
_TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="portal-chat-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR / 'chat.db'}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "warning"
os.environ["AUTO_CREATE_TABLES"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.testclient import TestClient

from portal_chat.core.database import AsyncSessionLocal, create_tables, drop_tables
from portal_chat.core.security import create_access_token
from portal_chat.models import Admin, Student, Teacher


# ---------------------------------------------------------------------------
# Directory fixtures: fixed ids so tests can refer to people by name
# ---------------------------------------------------------------------------

STUDENT_1 = uuid.UUID("00000000-0000-4000-8000-000000000001")
STUDENT_2 = uuid.UUID("00000000-0000-4000-8000-000000000002")
TEACHER_1 = uuid.UUID("00000000-0000-4000-8000-000000000011")
ADMIN_1 = uuid.UUID("00000000-0000-4000-8000-000000000021")
UNKNOWN_USER = uuid.UUID("00000000-0000-4000-8000-0000000000ff")

PEOPLE = {
    STUDENT_1: ("student", "Asha Student"),
    STUDENT_2: ("student", "Ben Student"),
    TEACHER_1: ("teacher", "Carla Teacher"),
    ADMIN_1: ("admin", "Dev Admin"),
}

_MODELS = {"student": Student, "teacher": Teacher, "admin": Admin}


async def reset_database():
    """Drop and recreate the schema, then seed the directory tables."""
    await drop_tables()
    await create_tables()
    async with AsyncSessionLocal() as db:
        for user_id, (role, name) in PEOPLE.items():
            db.add(_MODELS[role](id=user_id, name=name, email=f"{role}-{user_id.hex[-4:]}@school.test"))
        await db.commit()


def token_for(user_id: uuid.UUID, role: str = None) -> str:
    """Mint a bearer token the way the portal's login would."""
    role = role or PEOPLE[user_id][0]
    return create_access_token({"id": str(user_id), "role": role})


def auth_headers(user_id: uuid.UUID, role: str = None) -> dict:
    return {"Authorization": f"Bearer {token_for(user_id, role)}"}


@pytest.fixture
async def db_session():
    """Fresh schema and a session bound to it."""
    await reset_database()
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def app():
    from portal_chat.main import app as fastapi_app
    return fastapi_app


@pytest.fixture
async def client(app, db_session):
    """Async HTTP client for testing REST endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def ws_app(app):
    """Synchronous TestClient for WebSocket flows.

    The app runs on the client's own event loop, so the schema is reset
    through the client's portal rather than the test's loop.
    """
    from portal_chat.services.chat.connection_manager import connection_manager

    with TestClient(app) as test_client:
        test_client.portal.call(reset_database)
        yield test_client

    connection_manager.active_connections.clear()
    connection_manager.user_sessions.clear()
    connection_manager.room_subscriptions.clear()

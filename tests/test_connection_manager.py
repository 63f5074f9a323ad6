"""Tests for the live session registry and presence fan-out."""

import json
import uuid
from unittest.mock import AsyncMock

import pytest

from portal_chat.models.chat import ChatRole
from portal_chat.services.chat.connection_manager import ConnectionManager, Session
from portal_chat.services.chat.fanout import PresenceFanout

from tests.conftest import STUDENT_1, STUDENT_2, TEACHER_1

CHAT_ID = uuid.UUID("00000000-0000-4000-8000-0000000000c1")


def _session(user_id, role="student"):
    return Session(user_id=user_id, role=role, chat_role=ChatRole(role))


def _frames(websocket):
    return [json.loads(call.args[0]) for call in websocket.send_text.await_args_list]


@pytest.fixture
def manager():
    return ConnectionManager()


async def _connect(manager, user_id, role="student"):
    websocket = AsyncMock()
    session = _session(user_id, role)
    await manager.connect(websocket, session)
    return websocket, session


class TestRegistry:

    @pytest.mark.asyncio
    async def test_connect_accepts_and_registers(self, manager):
        websocket, session = await _connect(manager, STUDENT_1)
        websocket.accept.assert_awaited_once()
        assert manager.sessions_for_user(STUDENT_1) == [session.sid]
        assert manager.is_user_online(STUDENT_1)
        assert not manager.is_user_online(TEACHER_1)

    @pytest.mark.asyncio
    async def test_sessions_get_distinct_ids(self, manager):
        _, first = await _connect(manager, STUDENT_1)
        _, second = await _connect(manager, STUDENT_1)
        assert first.sid != second.sid
        assert manager.sessions_for_user(STUDENT_1) == sorted([first.sid, second.sid])

    @pytest.mark.asyncio
    async def test_disconnect_cleans_user_and_rooms(self, manager):
        _, session = await _connect(manager, STUDENT_1)
        manager.join_room(session.sid, CHAT_ID)
        assert manager.get_online_users_in_room(CHAT_ID) == [str(STUDENT_1)]

        manager.disconnect(session.sid)
        assert session.sid not in manager.active_connections
        assert not manager.is_user_online(STUDENT_1)
        assert str(CHAT_ID) not in manager.room_subscriptions

    @pytest.mark.asyncio
    async def test_disconnect_keeps_other_sessions(self, manager):
        _, first = await _connect(manager, STUDENT_1)
        _, second = await _connect(manager, STUDENT_1)
        manager.disconnect(first.sid)
        assert manager.sessions_for_user(STUDENT_1) == [second.sid]

    def test_disconnect_unknown_session_is_noop(self, manager):
        manager.disconnect("missing")
        assert manager.active_connections == {}

    @pytest.mark.asyncio
    async def test_join_and_leave_room(self, manager):
        _, student = await _connect(manager, STUDENT_1)
        _, teacher = await _connect(manager, TEACHER_1, "teacher")
        manager.join_room(student.sid, CHAT_ID)
        manager.join_room(teacher.sid, CHAT_ID)
        assert manager.get_online_users_in_room(CHAT_ID) == sorted([str(STUDENT_1), str(TEACHER_1)])

        manager.leave_room(student.sid, CHAT_ID)
        assert manager.get_online_users_in_room(CHAT_ID) == [str(TEACHER_1)]

    def test_join_room_for_unknown_session_ignored(self, manager):
        manager.join_room("missing", CHAT_ID)
        assert manager.room_subscriptions == {}


class TestDelivery:

    @pytest.mark.asyncio
    async def test_emit_reaches_every_session_of_user(self, manager):
        phone, _ = await _connect(manager, STUDENT_1)
        laptop, _ = await _connect(manager, STUDENT_1)
        other, _ = await _connect(manager, STUDENT_2)

        sent = await manager.emit_to_user(STUDENT_1, "message", {"text": "hi"})

        assert sent == 2
        assert _frames(phone) == [{"event": "message", "data": {"text": "hi"}}]
        assert _frames(laptop) == [{"event": "message", "data": {"text": "hi"}}]
        other.send_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_emit_to_offline_user(self, manager):
        assert await manager.emit_to_user(TEACHER_1, "message", {}) == 0

    @pytest.mark.asyncio
    async def test_failed_send_unregisters_session(self, manager):
        broken, broken_session = await _connect(manager, STUDENT_1)
        healthy, _ = await _connect(manager, STUDENT_1)
        broken.send_text.side_effect = RuntimeError("socket closed")

        sent = await manager.emit_to_user(STUDENT_1, "message", {"n": 1})

        assert sent == 1
        assert broken_session.sid not in manager.active_connections
        assert len(_frames(healthy)) == 1

    @pytest.mark.asyncio
    async def test_room_broadcast_excludes_sender_session(self, manager):
        sender_ws, sender = await _connect(manager, STUDENT_1)
        peer_ws, peer = await _connect(manager, TEACHER_1, "teacher")
        manager.join_room(sender.sid, CHAT_ID)
        manager.join_room(peer.sid, CHAT_ID)

        sent = await manager.broadcast_to_room(CHAT_ID, "typing", {"isTyping": True}, exclude_sid=sender.sid)

        assert sent == 1
        sender_ws.send_text.assert_not_awaited()
        assert _frames(peer_ws) == [{"event": "typing", "data": {"isTyping": True}}]


class TestPresenceFanout:

    MESSAGE = {"id": "m1", "chatId": str(CHAT_ID), "senderId": str(STUDENT_1), "text": "hello"}

    @pytest.mark.asyncio
    async def test_each_side_gets_its_own_flag(self, manager):
        sender_ws, _ = await _connect(manager, STUDENT_1)
        recipient_ws, _ = await _connect(manager, TEACHER_1, "teacher")

        counts = await PresenceFanout(manager).deliver(self.MESSAGE, STUDENT_1, TEACHER_1)

        assert counts == {"sender": 1, "recipient": 1}
        [own] = _frames(sender_ws)
        [theirs] = _frames(recipient_ws)
        assert own["event"] == theirs["event"] == "message"
        assert own["data"]["fromCurrentUser"] is True
        assert theirs["data"]["fromCurrentUser"] is False
        assert own["data"]["text"] == theirs["data"]["text"] == "hello"

    @pytest.mark.asyncio
    async def test_temp_id_only_on_sender_copy(self, manager):
        sender_ws, _ = await _connect(manager, STUDENT_1)
        recipient_ws, _ = await _connect(manager, TEACHER_1, "teacher")

        await PresenceFanout(manager).deliver(self.MESSAGE, STUDENT_1, TEACHER_1, temp_id="tmp-7")

        assert _frames(sender_ws)[0]["data"]["tempId"] == "tmp-7"
        assert "tempId" not in _frames(recipient_ws)[0]["data"]

    @pytest.mark.asyncio
    async def test_delivery_does_not_need_room_membership(self, manager):
        await _connect(manager, STUDENT_1)
        recipient_ws, _ = await _connect(manager, TEACHER_1, "teacher")
        assert manager.room_subscriptions == {}

        await PresenceFanout(manager).deliver(self.MESSAGE, STUDENT_1, TEACHER_1)

        assert len(_frames(recipient_ws)) == 1

    @pytest.mark.asyncio
    async def test_offline_recipient(self, manager):
        laptop, _ = await _connect(manager, STUDENT_1)
        phone, _ = await _connect(manager, STUDENT_1)

        counts = await PresenceFanout(manager).deliver(self.MESSAGE, STUDENT_1, TEACHER_1)

        assert counts == {"sender": 2, "recipient": 0}
        assert len(_frames(laptop)) == len(_frames(phone)) == 1

# portal_chat/services/chat/fanout.py
from typing import Any, Dict, Optional
from uuid import UUID
import logging

from .connection_manager import ConnectionManager
from .events import EVT_MESSAGE

logger = logging.getLogger(__name__)


class PresenceFanout:
    """Deliver a persisted message to every live session of both participants.

    Delivery goes through the personal-delivery groups rather than the chat
    room, so a session that has not joined the room yet (chat created after
    it connected) still gets the message. Users with no live session get
    nothing here and read the message from history on their next connect.
    """

    def __init__(self, manager: ConnectionManager):
        self.manager = manager

    async def deliver(
        self,
        message: Dict[str, Any],
        sender_id: UUID,
        recipient_id: UUID,
        temp_id: Optional[str] = None,
    ) -> Dict[str, int]:
        own_copy = {**message, "fromCurrentUser": True}
        if temp_id is not None:
            own_copy["tempId"] = temp_id

        to_sender = await self.manager.emit_to_user(sender_id, EVT_MESSAGE, own_copy)
        to_recipient = await self.manager.emit_to_user(
            recipient_id, EVT_MESSAGE, {**message, "fromCurrentUser": False}
        )

        if not self.manager.is_user_online(recipient_id):
            logger.debug(f"Recipient {recipient_id} offline, message {message.get('id')} kept for history")
        return {"sender": to_sender, "recipient": to_recipient}

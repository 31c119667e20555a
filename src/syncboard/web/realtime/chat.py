"""ChatBridge - persists chat messages before fanning them out to the whole room."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from .models import Connection, EventType, board_room
from .transport import RoomTransport

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000
MESSAGE_TYPES = ("text", "system")


class MessageStore(Protocol):
    async def create_message(
        self, board_id: str, sender_id: str, content: str, message_type: str = "text"
    ) -> str: ...

    async def get_message(self, message_id: str) -> dict[str, Any] | None: ...


class ChatError(Exception):
    """A chat message that is rejected before it reaches the room."""


def validate_message(data: dict[str, Any], connection: Connection) -> tuple[str, str, str]:
    """Return (sender_id, content, type) or raise ChatError."""
    content = data.get("content")
    if not isinstance(content, str) or not content.strip():
        raise ChatError("Message content is required")
    content = content.strip()
    if len(content) > MAX_MESSAGE_LENGTH:
        raise ChatError(f"Message cannot be longer than {MAX_MESSAGE_LENGTH} characters")

    message_type = data.get("type") or "text"
    if message_type not in MESSAGE_TYPES:
        raise ChatError(f"Unknown message type: {message_type}")

    sender_id = data.get("senderId") or (connection.user.id if connection.user else None)
    if not sender_id:
        raise ChatError("Message sender is required")
    return str(sender_id), content, message_type


class ChatBridge:
    """Handles chatMessage: validate, persist, resolve the sender, echo to the full room.

    Unlike board mutations the sender is included, since the client has no
    optimistic path for chat and waits for the echo. Failures only ever reach
    the sending connection as chatError.
    """

    def __init__(self, transport: RoomTransport, store: MessageStore) -> None:
        self.transport = transport
        self.store = store

    async def chat_message(self, connection: Connection, data: Any) -> dict[str, Any] | None:
        if not isinstance(data, dict) or not data.get("boardId"):
            logger.debug("Dropping chat message from %s: no boardId", connection.id)
            return None
        board_id = str(data["boardId"])

        try:
            sender_id, content, message_type = validate_message(data, connection)
        except ChatError as e:
            await self._error(connection, str(e))
            return None

        try:
            message_id = await self.store.create_message(
                board_id, sender_id, content, message_type
            )
            message = await self.store.get_message(message_id)
            if message is None:
                raise LookupError(f"Message {message_id} missing after save")
        except Exception:
            logger.exception("Failed to save chat message for board %s", board_id)
            await self._error(connection, "Failed to send message")
            return None

        await self.transport.broadcast(board_room(board_id), EventType.NEW_CHAT_MESSAGE, message)
        return message

    async def _error(self, connection: Connection, message: str) -> None:
        await self.transport.send(connection.id, EventType.CHAT_ERROR, {"message": message})

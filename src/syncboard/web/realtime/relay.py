"""EventRelay - fans board mutation events out to the other members of a room."""

from __future__ import annotations

import logging
from typing import Any

from .models import Connection, EventType, board_room
from .transport import RoomTransport

logger = logging.getLogger(__name__)

# Events whose payload carries a full entity under this key. The relayed copy
# is the entity itself with the sender attached.
_ENTITY_KEY: dict[EventType, str] = {
    EventType.TASK_CREATED: "task",
    EventType.TASK_UPDATED: "task",
    EventType.LIST_CREATED: "list",
    EventType.LIST_UPDATED: "list",
}

# Events relayed as a fixed set of fields picked from the inbound payload.
_FIELDS: dict[EventType, tuple[str, ...]] = {
    EventType.TASK_MOVED: (
        "taskId",
        "sourceListId",
        "destinationListId",
        "sourceIndex",
        "destinationIndex",
    ),
    EventType.TASK_DELETED: ("taskId", "listId"),
    EventType.LIST_DELETED: ("listId",),
}

RELAYED_EVENTS: tuple[EventType, ...] = (
    *_ENTITY_KEY,
    *_FIELDS,
    EventType.BOARD_UPDATED,
    EventType.USER_TYPING,
    EventType.CHAT_TYPING,
)


def _target_board(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    board_id = data.get("boardId")
    return str(board_id) if board_id else None


def format_relayed(event: EventType, data: dict[str, Any], sender: dict | None) -> Any:
    """Build the payload other clients receive for an inbound event.

    Entities are passed through untouched; nothing here checks that they make
    sense, the REST call that produced them already did.
    """
    if event in _ENTITY_KEY:
        entity = data.get(_ENTITY_KEY[event])
        return {**(entity if isinstance(entity, dict) else {}), "sender": sender}
    if event in _FIELDS:
        return {**{key: data.get(key) for key in _FIELDS[event]}, "sender": sender}
    if event == EventType.BOARD_UPDATED:
        return data.get("board")
    if event in (EventType.USER_TYPING, EventType.CHAT_TYPING):
        return {"user": sender, "isTyping": bool(data.get("isTyping"))}
    raise ValueError(f"{event} is not a relayed event")


class EventRelay:
    """Rebroadcasts mutation events to every connection in the board room but the sender.

    The sender already applied the change from its own REST response.
    There is no authorization check here: room membership is enforced by the
    transport and the mutation itself was authorized by the REST layer.
    """

    def __init__(self, transport: RoomTransport) -> None:
        self.transport = transport

    async def relay(self, connection: Connection, event: EventType, data: Any) -> bool:
        """Relay one event. Returns False if it was dropped as malformed."""
        board_id = _target_board(data)
        if board_id is None:
            logger.debug("Dropping %s from %s: no boardId", event, connection.id)
            return False

        payload = format_relayed(event, data, connection.sender)
        await self.transport.broadcast(board_room(board_id), event, payload, skip=connection.id)
        return True

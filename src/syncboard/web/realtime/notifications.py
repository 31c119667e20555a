"""Out-of-band notifications delivered to user rooms."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import EventType, user_room, utc_now
from .transport import RoomTransport

logger = logging.getLogger(__name__)

BOARD_INVITE = "BOARD_INVITE"


class Notifier:
    def __init__(self, transport: RoomTransport) -> None:
        self.transport = transport

    async def notify(self, user_id: str, message: str, board_id: str, type: str) -> None:
        await self.transport.broadcast(
            user_room(user_id),
            EventType.NOTIFICATION,
            {"message": message, "boardId": board_id, "type": type, "timestamp": utc_now()},
        )

    async def board_invite(self, board: dict, added_member_ids: Iterable[str]) -> None:
        """Tell each newly added member they now have access to the board."""
        for member_id in added_member_ids:
            logger.info("Notifying user %s of access to board %s", member_id, board["id"])
            await self.notify(
                member_id,
                f"You have been added to board: {board['title']}",
                board["id"],
                BOARD_INVITE,
            )

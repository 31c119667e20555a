"""RoomRouter - binds connections to board and user rooms and keeps presence in sync."""

from __future__ import annotations

import logging

from .models import Connection, EventType, UserIdentity, board_room, user_room
from .presence import PresenceRegistry
from .transport import RoomTransport

logger = logging.getLogger(__name__)


class RoomRouter:
    """Owns room membership and the PresenceRegistry.

    Nothing else mutates presence; the relay and chat bridge only read the
    connection's bound board.
    """

    def __init__(self, transport: RoomTransport, registry: PresenceRegistry) -> None:
        self.transport = transport
        self.registry = registry

    async def join_board(
        self, connection: Connection, board_id: str, user: UserIdentity | None = None
    ) -> None:
        """Join a board room.

        The joiner gets the presence snapshot directly before anyone else is
        told about the join, so it never depends on the broadcast meant for the
        other members. Anonymous joins only receive broadcasts.
        """
        if connection.board_id and connection.board_id != board_id:
            await self.leave_board(connection, connection.board_id)

        await self.transport.join(connection.id, board_room(board_id))
        connection.board_id = board_id
        connection.user = user
        logger.info("Connection %s joined %s", connection.id, board_room(board_id))

        if user is None:
            return

        await self.join_user_room(connection, user.id)
        entry = self.registry.add_presence(board_id, connection.id, user)
        online_users = self.registry.snapshot(board_id)

        await self.transport.send(connection.id, EventType.ONLINE_USERS, online_users)
        await self.transport.broadcast(
            board_room(board_id),
            EventType.USER_JOINED,
            {"user": entry.to_dict(), "onlineUsers": online_users},
            skip=connection.id,
        )

    async def join_user_room(self, connection: Connection, user_id: str) -> None:
        await self.transport.join(connection.id, user_room(user_id))
        logger.info("Connection %s joined %s", connection.id, user_room(user_id))

    async def leave_board(self, connection: Connection, board_id: str) -> None:
        """Leave a board room. Leaving a board that was never joined does nothing."""
        await self.transport.leave(connection.id, board_room(board_id))
        if connection.board_id == board_id:
            connection.board_id = None

        entry = self.registry.remove_presence(board_id, connection.id)
        if entry is None:
            return

        logger.info("Connection %s left %s", connection.id, board_room(board_id))
        await self.transport.broadcast(
            board_room(board_id),
            EventType.USER_LEFT,
            {"user": entry.to_dict(), "onlineUsers": self.registry.snapshot(board_id)},
            skip=connection.id,
        )

    async def on_disconnect(self, connection: Connection) -> None:
        if connection.board_id is None:
            return
        await self.leave_board(connection, connection.board_id)

"""SyncServer - wires Socket.IO events to the router, relay and chat bridge."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import socketio

from .chat import ChatBridge, MessageStore
from .models import Connection, EventType, UserIdentity
from .notifications import Notifier
from .presence import PresenceRegistry
from .relay import RELAYED_EVENTS, EventRelay
from .rooms import RoomRouter
from .transport import RoomTransport, SocketIOTransport

logger = logging.getLogger(__name__)

Handler = Callable[[Connection, Any], Awaitable[Any]]


def _id_from(data: Any, key: str) -> str | None:
    """Accept either a bare id or a dict carrying it under ``key``."""
    if isinstance(data, dict):
        data = data.get(key)
    if isinstance(data, (str, int)) and str(data):
        return str(data)
    return None


class SyncServer:
    """The realtime side of the board server.

    One instance per process. It owns the connection table, the presence
    registry and the room router; the relay and chat bridge get only the
    transport, so they cannot touch presence.
    """

    def __init__(
        self,
        store: MessageStore,
        sio: socketio.AsyncServer | None = None,
        transport: RoomTransport | None = None,
        registry: PresenceRegistry | None = None,
    ) -> None:
        self.sio = sio or socketio.AsyncServer(
            async_mode="asgi", cors_allowed_origins="*", logger=False, engineio_logger=False
        )
        self.transport = transport or SocketIOTransport(self.sio)
        self.registry = registry or PresenceRegistry()
        self.router = RoomRouter(self.transport, self.registry)
        self.relay = EventRelay(self.transport)
        self.chat = ChatBridge(self.transport, store)
        self.notifier = Notifier(self.transport)
        self.connections: dict[str, Connection] = {}

        self._handlers: dict[str, Handler] = {
            EventType.JOIN_BOARD: self._join_board,
            EventType.JOIN_USER_ROOM: self._join_user_room,
            EventType.LEAVE_BOARD: self._leave_board,
            EventType.CHAT_MESSAGE: self.chat.chat_message,
        }
        for event in RELAYED_EVENTS:
            self._handlers[event] = self._relay_as(event)

        self._register()

    # --- Socket.IO binding ---

    def _register(self) -> None:
        self.sio.on("connect", handler=self.connect)
        self.sio.on("disconnect", handler=self.disconnect)
        for event in self._handlers:
            self.sio.on(str(event), handler=self._socket_handler(event))

    def _socket_handler(self, event: str) -> Callable[..., Awaitable[None]]:
        async def handler(sid: str, data: Any = None) -> None:
            await self.handle(sid, event, data)

        return handler

    async def connect(self, sid: str, environ: dict | None = None, auth: Any = None) -> None:
        self.connections[sid] = Connection(id=sid)
        logger.info("New client connected: %s", sid)
        if isinstance(auth, dict) and auth.get("token"):
            logger.debug("Client %s sent a token in its handshake", sid)

    async def disconnect(self, sid: str, *args: Any) -> None:
        connection = self.connections.pop(sid, None)
        logger.info("Client disconnected: %s", sid)
        if connection is None:
            return
        try:
            await self.router.on_disconnect(connection)
        except Exception:
            logger.exception("Error cleaning up after %s", sid)

    async def handle(self, sid: str, event: str, data: Any = None) -> None:
        """Dispatch one inbound event. Never raises."""
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug("Ignoring unknown event %s from %s", event, sid)
            return
        connection = self.connections.get(sid)
        if connection is None:
            logger.debug("Ignoring %s from unknown connection %s", event, sid)
            return
        try:
            await handler(connection, data)
        except Exception:
            logger.exception("Error handling %s from %s", event, sid)

    # --- Handlers ---

    async def _join_board(self, connection: Connection, data: Any) -> None:
        board_id = _id_from(data, "boardId")
        if board_id is None:
            logger.debug("Dropping joinBoard from %s: no boardId", connection.id)
            return
        user = UserIdentity.from_payload(data.get("user")) if isinstance(data, dict) else None
        await self.router.join_board(connection, board_id, user)

    async def _join_user_room(self, connection: Connection, data: Any) -> None:
        user_id = _id_from(data, "userId")
        if user_id is None:
            return
        await self.router.join_user_room(connection, user_id)

    async def _leave_board(self, connection: Connection, data: Any) -> None:
        board_id = _id_from(data, "boardId")
        if board_id is None:
            return
        await self.router.leave_board(connection, board_id)

    def _relay_as(self, event: EventType) -> Handler:
        async def relay(connection: Connection, data: Any) -> None:
            await self.relay.relay(connection, event, data)

        return relay

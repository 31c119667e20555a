"""Room transports: the broadcast-group seam between the core and Socket.IO."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Protocol

import socketio


class RoomTransport(Protocol):
    async def join(self, connection_id: str, room: str) -> None: ...

    async def leave(self, connection_id: str, room: str) -> None: ...

    async def broadcast(
        self, room: str, event: str, payload: Any, skip: str | None = None
    ) -> None: ...

    async def send(self, connection_id: str, event: str, payload: Any) -> None: ...


class SocketIOTransport:
    """RoomTransport backed by a python-socketio AsyncServer."""

    def __init__(self, sio: socketio.AsyncServer) -> None:
        self._sio = sio

    async def join(self, connection_id: str, room: str) -> None:
        await self._sio.enter_room(connection_id, room)

    async def leave(self, connection_id: str, room: str) -> None:
        await self._sio.leave_room(connection_id, room)

    async def broadcast(self, room: str, event: str, payload: Any, skip: str | None = None) -> None:
        await self._sio.emit(event, payload, room=room, skip_sid=skip)

    async def send(self, connection_id: str, event: str, payload: Any) -> None:
        await self._sio.emit(event, payload, to=connection_id)


class MemoryTransport:
    """In-process RoomTransport that records deliveries per connection.

    Used by tests and by single-process embedding where no network is involved.
    """

    def __init__(self) -> None:
        self.rooms: dict[str, set[str]] = defaultdict(set)
        self.inbox: dict[str, list[tuple[str, Any]]] = defaultdict(list)

    async def join(self, connection_id: str, room: str) -> None:
        self.rooms[room].add(connection_id)

    async def leave(self, connection_id: str, room: str) -> None:
        members = self.rooms.get(room)
        if members is None:
            return
        members.discard(connection_id)
        if not members:
            del self.rooms[room]

    async def broadcast(self, room: str, event: str, payload: Any, skip: str | None = None) -> None:
        for connection_id in sorted(self.rooms.get(room, ())):
            if connection_id != skip:
                self.inbox[connection_id].append((event, payload))

    async def send(self, connection_id: str, event: str, payload: Any) -> None:
        self.inbox[connection_id].append((event, payload))

    def disconnect(self, connection_id: str) -> None:
        for room in [r for r, members in self.rooms.items() if connection_id in members]:
            self.rooms[room].discard(connection_id)
            if not self.rooms[room]:
                del self.rooms[room]

    def received(self, connection_id: str, event: str | None = None) -> list[Any]:
        """Payloads delivered to a connection, optionally filtered by event name."""
        return [p for e, p in self.inbox.get(connection_id, []) if event is None or e == event]

    def events(self, connection_id: str) -> list[str]:
        return [e for e, _ in self.inbox.get(connection_id, [])]

    def members(self, room: str) -> set[str]:
        return set(self.rooms.get(room, ()))

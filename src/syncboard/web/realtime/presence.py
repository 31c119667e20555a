"""PresenceRegistry - in-memory board -> connected-user tracking."""

from __future__ import annotations

from .models import PresenceEntry, UserIdentity


class PresenceRegistry:
    """Tracks which users are connected to which boards.

    Lives for the lifetime of the server process and is never persisted.
    A board holds at most one entry per connection id; the same user on two
    tabs is two entries. Boards whose last entry is removed are dropped.
    """

    def __init__(self) -> None:
        self._boards: dict[str, dict[str, PresenceEntry]] = {}

    def add_presence(self, board_id: str, connection_id: str, user: UserIdentity) -> PresenceEntry:
        entry = PresenceEntry(connection_id=connection_id, user=user)
        self._boards.setdefault(board_id, {})[connection_id] = entry
        return entry

    def remove_presence(self, board_id: str, connection_id: str) -> PresenceEntry | None:
        entries = self._boards.get(board_id)
        if entries is None:
            return None
        entry = entries.pop(connection_id, None)
        if not entries:
            del self._boards[board_id]
        return entry

    def get(self, board_id: str, connection_id: str) -> PresenceEntry | None:
        return self._boards.get(board_id, {}).get(connection_id)

    def list_presence(self, board_id: str) -> list[PresenceEntry]:
        return list(self._boards.get(board_id, {}).values())

    def snapshot(self, board_id: str) -> list[dict[str, str]]:
        """Wire form of the board's presence, as sent in onlineUsers/userJoined."""
        return [entry.to_dict() for entry in self.list_presence(board_id)]

    @property
    def board_count(self) -> int:
        return len(self._boards)

    def __contains__(self, board_id: object) -> bool:
        return board_id in self._boards

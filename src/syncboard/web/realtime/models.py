"""Realtime models: wire event names, identities, presence and connections."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class EventType(StrEnum):
    # Presence
    JOIN_BOARD = "joinBoard"
    JOIN_USER_ROOM = "joinUserRoom"
    LEAVE_BOARD = "leaveBoard"
    ONLINE_USERS = "onlineUsers"
    USER_JOINED = "userJoined"
    USER_LEFT = "userLeft"
    # Task events
    TASK_CREATED = "taskCreated"
    TASK_UPDATED = "taskUpdated"
    TASK_MOVED = "taskMoved"
    TASK_DELETED = "taskDeleted"
    # List events
    LIST_CREATED = "listCreated"
    LIST_UPDATED = "listUpdated"
    LIST_DELETED = "listDeleted"
    # Board events
    BOARD_UPDATED = "boardUpdated"
    # Chat
    CHAT_MESSAGE = "chatMessage"
    NEW_CHAT_MESSAGE = "newChatMessage"
    CHAT_TYPING = "chatTyping"
    CHAT_ERROR = "chatError"
    # Misc
    USER_TYPING = "userTyping"
    NOTIFICATION = "notification"


def board_room(board_id: str) -> str:
    return f"board_{board_id}"


def user_room(user_id: str) -> str:
    return f"user_{user_id}"


def utc_now() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(frozen=True)
class UserIdentity:
    """Display identity of a connected user, as sent by the client on join."""

    id: str
    name: str = ""
    email: str = ""
    avatar: str = ""

    @classmethod
    def from_payload(cls, data: Any) -> UserIdentity | None:
        """Build an identity from a client payload.

        Accepts either ``_id`` or ``id`` as the user key. Returns None for
        anything that is not a dict carrying a user id.
        """
        if not isinstance(data, dict):
            return None
        user_id = data.get("_id") or data.get("id")
        if not user_id:
            return None
        return cls(
            id=str(user_id),
            name=data.get("name") or "",
            email=data.get("email") or "",
            avatar=data.get("avatar") or "",
        )

    def to_dict(self) -> dict[str, str]:
        return {"_id": self.id, "name": self.name, "email": self.email, "avatar": self.avatar}


@dataclass(frozen=True)
class PresenceEntry:
    connection_id: str
    user: UserIdentity
    joined_at: str = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, str]:
        return {**self.user.to_dict(), "joinedAt": self.joined_at}


@dataclass
class Connection:
    """A single transport session and the board/user it is bound to."""

    id: str
    board_id: str | None = None
    user: UserIdentity | None = None

    @property
    def sender(self) -> dict[str, str] | None:
        return self.user.to_dict() if self.user else None

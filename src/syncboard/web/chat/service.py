"""Chat message service - persistence and paged history."""

from __future__ import annotations

import math
import secrets
from collections.abc import Awaitable, Callable
from typing import Any

import aiosqlite

from ..realtime.models import utc_now

_SELECT_MESSAGE = """
    SELECT m.id, m.board_id, m.sender_id, m.content, m.type, m.created_at, m.updated_at,
           u.name AS sender_name, u.email AS sender_email, u.avatar AS sender_avatar
    FROM messages m
    JOIN users u ON m.sender_id = u.id
"""


def _to_wire(row: aiosqlite.Row) -> dict[str, Any]:
    """Message with its sender resolved, in the shape clients render directly."""
    return {
        "_id": row["id"],
        "boardId": row["board_id"],
        "sender": {
            "_id": row["sender_id"],
            "name": row["sender_name"],
            "email": row["sender_email"],
            "avatar": row["sender_avatar"],
        },
        "content": row["content"],
        "type": row["type"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


async def create_message(
    db: aiosqlite.Connection,
    board_id: str,
    sender_id: str,
    content: str,
    message_type: str = "text",
) -> str:
    message_id = secrets.token_hex(8)
    now = utc_now()
    await db.execute(
        """INSERT INTO messages (id, board_id, sender_id, content, type, created_at, updated_at)
           VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (message_id, board_id, sender_id, content, message_type, now, now),
    )
    await db.commit()
    return message_id


async def get_message(db: aiosqlite.Connection, message_id: str) -> dict[str, Any] | None:
    cursor = await db.execute(f"{_SELECT_MESSAGE} WHERE m.id = ?", (message_id,))
    row = await cursor.fetchone()
    return _to_wire(row) if row else None


async def list_messages(
    db: aiosqlite.Connection, board_id: str, page: int = 1, limit: int = 50
) -> dict[str, Any]:
    """One page of a board's chat, newest page first, messages oldest-first within it."""
    cursor = await db.execute("SELECT COUNT(*) FROM messages WHERE board_id = ?", (board_id,))
    total = (await cursor.fetchone())[0]

    cursor = await db.execute(
        f"""{_SELECT_MESSAGE} WHERE m.board_id = ?
            ORDER BY m.created_at DESC, m.rowid DESC
            LIMIT ? OFFSET ?""",
        (board_id, limit, (page - 1) * limit),
    )
    rows = await cursor.fetchall()
    return {
        "messages": [_to_wire(r) for r in reversed(rows)],
        "total": total,
        "page": page,
        "pages": math.ceil(total / limit),
    }


class SqliteMessageStore:
    """MessageStore for the chat bridge, backed by the shared aiosqlite connection."""

    def __init__(self, get_db: Callable[[], Awaitable[aiosqlite.Connection]]) -> None:
        self._get_db = get_db

    async def create_message(
        self, board_id: str, sender_id: str, content: str, message_type: str = "text"
    ) -> str:
        db = await self._get_db()
        return await create_message(db, board_id, sender_id, content, message_type)

    async def get_message(self, message_id: str) -> dict[str, Any] | None:
        return await get_message(await self._get_db(), message_id)

"""Board service - the board record and its membership."""

from __future__ import annotations

import aiosqlite


async def get_members(db: aiosqlite.Connection, board_id: str) -> list[dict]:
    cursor = await db.execute(
        """SELECT u.id, u.name, u.email, u.avatar
           FROM board_members bm
           JOIN users u ON bm.user_id = u.id
           WHERE bm.board_id = ?
           ORDER BY bm.added_at, u.name""",
        (board_id,),
    )
    return [dict(r) for r in await cursor.fetchall()]


async def get_board(db: aiosqlite.Connection, board_id: str) -> dict | None:
    """Get a board by ID, with its members."""
    cursor = await db.execute("SELECT * FROM boards WHERE id = ?", (board_id,))
    row = await cursor.fetchone()
    if not row:
        return None
    board = dict(row)
    board["members"] = await get_members(db, board_id)
    return board


async def update_board(
    db: aiosqlite.Connection,
    board_id: str,
    title: str | None = None,
    description: str | None = None,
    members: list[str] | None = None,
) -> tuple[dict, list[str]] | None:
    """Update a board. Returns (board, ids of members that were not members before).

    ``members`` replaces the member list; the owner always stays a member.
    """
    board = await get_board(db, board_id)
    if board is None:
        return None

    added: list[str] = []
    if members is not None:
        wanted = list(dict.fromkeys([board["owner_id"], *members]))
        placeholders = ", ".join("?" for _ in wanted)
        cursor = await db.execute(f"SELECT id FROM users WHERE id IN ({placeholders})", wanted)
        known = {r["id"] for r in await cursor.fetchall()}
        unknown = [m for m in wanted if m not in known]
        if unknown:
            raise ValueError(f"Unknown users: {', '.join(unknown)}")

        current = {m["id"] for m in board["members"]}
        added = [m for m in wanted if m not in current]
        await db.execute(
            f"DELETE FROM board_members WHERE board_id = ? AND user_id NOT IN ({placeholders})",
            (board_id, *wanted),
        )
        await db.executemany(
            "INSERT INTO board_members (board_id, user_id) VALUES (?, ?)",
            [(board_id, m) for m in added],
        )

    await db.execute(
        """UPDATE boards SET title = ?, description = ?, updated_at = CURRENT_TIMESTAMP
           WHERE id = ?""",
        (
            title or board["title"],
            description if description is not None else board["description"],
            board_id,
        ),
    )
    await db.commit()
    return await get_board(db, board_id), added

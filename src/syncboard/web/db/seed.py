"""Seed database with demo data."""

from __future__ import annotations

import secrets

import aiosqlite


def _id() -> str:
    return secrets.token_hex(8)


async def seed_db(db: aiosqlite.Connection) -> None:
    """Seed demo users and a shared board. Does nothing if users already exist."""
    cursor = await db.execute("SELECT COUNT(*) FROM users")
    row = await cursor.fetchone()
    if row[0] > 0:
        return

    alice_id = _id()
    bob_id = _id()
    charlie_id = _id()

    await db.executemany(
        "INSERT INTO users (id, name, email, avatar) VALUES (?, ?, ?, ?)",
        [
            (alice_id, "Alice Johnson", "alice@example.com", ""),
            (bob_id, "Bob Smith", "bob@example.com", ""),
            (charlie_id, "Charlie Davis", "charlie@example.com", ""),
        ],
    )

    board_id = _id()
    await db.execute(
        "INSERT INTO boards (id, title, description, owner_id) VALUES (?, ?, ?, ?)",
        (board_id, "Product Roadmap", "Shared planning board", alice_id),
    )
    await db.executemany(
        "INSERT INTO board_members (board_id, user_id) VALUES (?, ?)",
        [(board_id, alice_id), (board_id, bob_id)],
    )
    await db.commit()

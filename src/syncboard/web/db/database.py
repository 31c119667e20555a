"""Async SQLite connection manager (singleton pattern)."""

from __future__ import annotations

from pathlib import Path

import aiosqlite

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

_db: aiosqlite.Connection | None = None


async def connect(db_path: str) -> aiosqlite.Connection:
    """Open a connection with the schema applied."""
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    db = await aiosqlite.connect(db_path)
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA foreign_keys=ON")
    if db_path != ":memory:":
        await db.execute("PRAGMA journal_mode=WAL")

    await db.executescript(SCHEMA_PATH.read_text())
    await db.commit()
    return db


async def init_db(db_path: str) -> None:
    """Initialize the shared database connection."""
    global _db
    _db = await connect(db_path)


async def get_db() -> aiosqlite.Connection:
    if _db is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _db


async def close_db() -> None:
    global _db
    if _db is not None:
        await _db.close()
        _db = None

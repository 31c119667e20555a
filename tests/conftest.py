"""Shared fixtures: a schema-loaded database, an in-memory transport and a sync server."""

from __future__ import annotations

import itertools
from typing import Any

import aiosqlite
import pytest
import pytest_asyncio

from syncboard.web.db.database import SCHEMA_PATH
from syncboard.web.realtime import MemoryTransport, PresenceRegistry, SyncServer, UserIdentity


@pytest_asyncio.fixture
async def db(tmp_path):
    """Create a test database with the full schema, two users and one board."""
    conn = await aiosqlite.connect(str(tmp_path / "test.db"))
    conn.row_factory = aiosqlite.Row
    await conn.execute("PRAGMA foreign_keys=ON")
    await conn.executescript(SCHEMA_PATH.read_text())

    await conn.executemany(
        "INSERT INTO users (id, name, email, avatar) VALUES (?, ?, ?, ?)",
        [
            ("u1", "Alice", "alice@example.com", "a.png"),
            ("u2", "Bob", "bob@example.com", ""),
            ("u3", "Carol", "carol@example.com", ""),
        ],
    )
    await conn.execute(
        "INSERT INTO boards (id, title, description, owner_id) VALUES (?, ?, ?, ?)",
        ("b1", "Roadmap", "", "u1"),
    )
    await conn.execute(
        "INSERT INTO board_members (board_id, user_id) VALUES (?, ?)", ("b1", "u1")
    )
    await conn.commit()

    yield conn

    await conn.close()


class FakeMessageStore:
    """MessageStore that keeps messages in a dict and resolves senders from a table."""

    def __init__(self, users: dict[str, dict[str, str]] | None = None) -> None:
        self.users = users or {"u1": {"name": "Alice", "email": "alice@example.com", "avatar": ""}}
        self.messages: dict[str, dict[str, Any]] = {}
        self.fail_with: Exception | None = None
        self._ids = itertools.count(1)

    async def create_message(
        self, board_id: str, sender_id: str, content: str, message_type: str = "text"
    ) -> str:
        if self.fail_with is not None:
            raise self.fail_with
        message_id = f"m{next(self._ids)}"
        self.messages[message_id] = {
            "_id": message_id,
            "boardId": board_id,
            "sender": {"_id": sender_id, **self.users.get(sender_id, {})},
            "content": content,
            "type": message_type,
            "createdAt": "2026-01-01T00:00:00+00:00",
        }
        return message_id

    async def get_message(self, message_id: str) -> dict[str, Any] | None:
        return self.messages.get(message_id)


@pytest.fixture
def transport() -> MemoryTransport:
    return MemoryTransport()


@pytest.fixture
def registry() -> PresenceRegistry:
    return PresenceRegistry()


@pytest.fixture
def store() -> FakeMessageStore:
    return FakeMessageStore()


@pytest.fixture
def server(transport, registry, store) -> SyncServer:
    return SyncServer(store, transport=transport, registry=registry)


@pytest.fixture
def alice() -> UserIdentity:
    return UserIdentity(id="u1", name="Alice", email="alice@example.com", avatar="a.png")


@pytest.fixture
def bob() -> UserIdentity:
    return UserIdentity(id="u2", name="Bob", email="bob@example.com")


@pytest.fixture
def carol() -> UserIdentity:
    return UserIdentity(id="u3", name="Carol", email="carol@example.com")

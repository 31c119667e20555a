"""FastAPI dependency injection."""

from __future__ import annotations

from typing import Annotated

import aiosqlite
import jwt
from fastapi import Depends, HTTPException, Request

from .db.database import get_db
from .realtime import SyncServer


async def _get_db() -> aiosqlite.Connection:
    return await get_db()


Db = Annotated[aiosqlite.Connection, Depends(_get_db)]


async def _get_current_user(request: Request) -> dict:
    """Extract and validate JWT from Authorization header.

    Also verifies the user still exists in the DB.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")

    token = auth_header.removeprefix("Bearer ").strip()
    try:
        from .auth.service import decode_token

        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token") from None

    db = await get_db()
    cursor = await db.execute("SELECT id FROM users WHERE id = ?", (payload["sub"],))
    if not await cursor.fetchone():
        raise HTTPException(status_code=401, detail="User not found. Please log in again.")

    return payload


CurrentUser = Annotated[dict, Depends(_get_current_user)]


def _get_sync(request: Request) -> SyncServer:
    return request.app.state.sync


Sync = Annotated[SyncServer, Depends(_get_sync)]


async def verify_board_access(db: aiosqlite.Connection, board_id: str, user_id: str) -> None:
    """Raise 404 if the board is missing, 403 if the user is not a member."""
    cursor = await db.execute("SELECT 1 FROM boards WHERE id = ?", (board_id,))
    if not await cursor.fetchone():
        raise HTTPException(status_code=404, detail="Board not found")
    cursor = await db.execute(
        "SELECT 1 FROM board_members WHERE board_id = ? AND user_id = ?",
        (board_id, user_id),
    )
    if not await cursor.fetchone():
        raise HTTPException(status_code=403, detail="Not a member of this board")

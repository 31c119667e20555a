"""Board routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from ..deps import CurrentUser, Db, Sync, verify_board_access
from . import service
from .models import BoardResponse, BoardUpdate

router = APIRouter(prefix="/api", tags=["boards"])


@router.get("/boards/{board_id}", response_model=BoardResponse)
async def get_board(board_id: str, user: CurrentUser, db: Db):
    await verify_board_access(db, board_id, user["sub"])
    return await service.get_board(db, board_id)


@router.patch("/boards/{board_id}", response_model=BoardResponse)
async def update_board(board_id: str, body: BoardUpdate, user: CurrentUser, db: Db, sync: Sync):
    await verify_board_access(db, board_id, user["sub"])
    result = await service.update_board(
        db, board_id, title=body.title, description=body.description, members=body.members
    )
    if result is None:
        raise HTTPException(status_code=404, detail="Board not found")
    board, added = result
    await sync.notifier.board_invite(board, added)
    return board

"""Chat routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Request

from ..deps import CurrentUser, Db, verify_board_access
from . import service
from .models import MessageCreate, MessagePage, MessageResponse

router = APIRouter(prefix="/api", tags=["chat"])


@router.get(
    "/boards/{board_id}/messages", response_model=MessagePage, response_model_by_alias=True
)
async def get_messages(
    board_id: str,
    user: CurrentUser,
    db: Db,
    request: Request,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=200),
):
    await verify_board_access(db, board_id, user["sub"])
    limit = limit or request.app.state.config.chat_page_size
    return await service.list_messages(db, board_id, page=page, limit=limit)


@router.post(
    "/messages", response_model=MessageResponse, response_model_by_alias=True, status_code=201
)
async def send_message(body: MessageCreate, user: CurrentUser, db: Db):
    """Store a message without broadcasting it; live sends go through the socket."""
    await verify_board_access(db, body.board_id, user["sub"])
    content = body.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Message content is required")
    message_id = await service.create_message(db, body.board_id, user["sub"], content, body.type)
    return await service.get_message(db, message_id)

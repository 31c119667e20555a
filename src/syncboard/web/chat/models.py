"""Chat Pydantic models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    board_id: str = Field(alias="boardId")
    content: str = Field(min_length=1, max_length=2000)
    type: Literal["text", "system"] = "text"


class MessageSender(BaseModel):
    id: str = Field(alias="_id")
    name: str
    email: str
    avatar: str


class MessageResponse(BaseModel):
    id: str = Field(alias="_id")
    board_id: str = Field(alias="boardId")
    sender: MessageSender
    content: str
    type: str
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")


class MessagePage(BaseModel):
    messages: list[MessageResponse]
    total: int
    page: int
    pages: int

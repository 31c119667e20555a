"""Board Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BoardUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    members: list[str] | None = None


class MemberResponse(BaseModel):
    id: str
    name: str
    email: str
    avatar: str


class BoardResponse(BaseModel):
    id: str
    title: str
    description: str
    owner_id: str
    members: list[MemberResponse]
    created_at: str
    updated_at: str

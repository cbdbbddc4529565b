# backend/synergies/schemas/note.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class NoteCreate(BaseModel):
    body: str = Field(min_length=1, max_length=10000)

    @field_validator("body")
    @classmethod
    def validate_body(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("body is required")
        return v


class NoteOut(BaseModel):
    id: UUID
    reco_id: UUID
    body: str
    created_at: datetime
    author_id: Optional[UUID] = None
    author_name: Optional[str] = None

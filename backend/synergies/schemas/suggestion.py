# backend/synergies/schemas/suggestion.py
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SuggestionCreate(BaseModel):
    suggestion: str = Field(min_length=1, max_length=5000)

    @field_validator("suggestion")
    @classmethod
    def validate_suggestion(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Merci de décrire ta proposition.")
        return v


class SuggestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    suggestion: str
    created_at: datetime

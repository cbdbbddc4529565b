# backend/synergies/schemas/employee.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class EmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str
    role: str
    manager_id: Optional[UUID] = None
    is_active: bool


class DirectoryEntry(BaseModel):
    """Who can receive a referral."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str

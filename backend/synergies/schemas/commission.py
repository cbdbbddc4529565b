# backend/synergies/schemas/commission.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CommissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    reco_id: UUID
    amount: Decimal
    due_date: Optional[date] = None
    paid_at: Optional[datetime] = None
    status: str
    validated_by_manager: bool
    can_mark_paid: bool = True


class CommissionRow(BaseModel):
    """One closed-won referral in the ledger; commission_id is None until the row exists."""

    reco_id: UUID
    created_at: datetime
    client_name: str
    project_title: Optional[str] = None
    prescriber_name: Optional[str] = None
    prescriber_email: Optional[str] = None

    commission_id: Optional[UUID] = None
    amount: Optional[Decimal] = None
    suggested_amount: Decimal
    status: str
    due_date: Optional[date] = None
    paid_at: Optional[datetime] = None
    validated_by_manager: bool
    can_mark_paid: bool


class CommissionLedgerOut(BaseModel):
    items: List[CommissionRow]
    total: int


class CommissionUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    due_date: Optional[date] = None


class ValidationToggle(BaseModel):
    """The actor is the authenticated employee; only the comment is free text."""

    validated: bool
    comment: Optional[str] = Field(default=None, max_length=1000)

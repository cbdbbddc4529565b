# backend/synergies/schemas/recommendation.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from synergies.core.lifecycle import DealStage, IntakeStatus, ProjectCategory


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    v = value.strip()
    return v or None


class RecommendationCreate(BaseModel):
    """
    Receiver is identified by id or, as a fallback, by email.
    """

    model_config = ConfigDict(extra="forbid")

    receiver_id: Optional[UUID] = None
    receiver_email: Optional[EmailStr] = None

    client_name: str = Field(min_length=1, max_length=240)
    client_email: Optional[EmailStr] = None
    client_phone: Optional[str] = Field(default=None, max_length=40)
    project_address: Optional[str] = Field(default=None, max_length=2000)
    project_details: Optional[str] = Field(default=None, max_length=5000)

    project_title: ProjectCategory

    @field_validator("client_name")
    @classmethod
    def validate_client_name(cls, v: str) -> str:
        v = " ".join(v.strip().split())
        if not v:
            raise ValueError("client_name is required")
        return v

    @field_validator("client_phone", "project_address", "project_details")
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        return _strip_or_none(v)

    @model_validator(mode="after")
    def validate_receiver(self) -> "RecommendationCreate":
        if self.receiver_id is None and self.receiver_email is None:
            raise ValueError("Provide receiver_id or receiver_email.")
        return self


class RecommendationUpdate(BaseModel):
    """
    Write boundary for the two lifecycle axes: only listed values are accepted,
    any listed value may follow any other.
    """

    model_config = ConfigDict(extra="forbid")

    intake_status: Optional[IntakeStatus] = None
    deal_stage: Optional[DealStage] = None
    amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    annual_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    notes: Optional[str] = Field(default=None, max_length=10000)

    @field_validator("intake_status", "deal_stage")
    @classmethod
    def reject_null_axis(cls, v):
        # may be omitted, but both columns are NOT NULL
        if v is None:
            raise ValueError("cannot be null")
        return v


class RecommendationMove(BaseModel):
    deal_stage: DealStage


class RecommendationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime

    prescriber_id: Optional[UUID] = None
    prescriber_name: Optional[str] = None
    prescriber_email: Optional[str] = None
    receiver_id: Optional[UUID] = None
    receiver_email: Optional[str] = None

    client_name: str
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    project_address: Optional[str] = None
    project_details: Optional[str] = None
    project_title: Optional[str] = None

    intake_status: str
    deal_stage: str
    amount: Optional[Decimal] = None
    annual_amount: Optional[Decimal] = None
    notes: Optional[str] = None

    last_reminder_at: Optional[datetime] = None
    manager_reminder_at: Optional[datetime] = None
    manager_notified_at: Optional[datetime] = None


class RecommendationListOut(BaseModel):
    items: List[RecommendationOut]
    total: int


class KanbanCard(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_name: str
    project_title: Optional[str] = None
    deal_stage: str
    created_at: datetime


class KanbanColumn(BaseModel):
    stage: str
    label: str
    cards: List[KanbanCard]


class KanbanOut(BaseModel):
    columns: List[KanbanColumn]


class DirectionListOut(BaseModel):
    items: List[RecommendationOut]
    count: int
    total_amount: Decimal
    receiver_options: List[str]
    prescriber_options: List[str]


class TeamRow(BaseModel):
    id: UUID
    created_at: datetime
    client_name: str
    project_title: Optional[str] = None
    intake_status: str
    deal_stage: str
    amount: Optional[Decimal] = None
    annual_amount: Optional[Decimal] = None
    receiver_id: Optional[UUID] = None
    receiver_name: Optional[str] = None
    receiver_email: Optional[str] = None
    at_risk: bool


class TeamListOut(BaseModel):
    items: List[TeamRow]
    total: int
    receiver_options: List[str]

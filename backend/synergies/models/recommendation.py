# backend/synergies/models/recommendation.py
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, validates
from sqlalchemy.sql import func

from synergies.core.clock import utcnow
from synergies.core.lifecycle import DealStage, IntakeStatus
from synergies.db.base import Base
from synergies.models.user import User


class Recommendation(Base):
    """
    One client introduction from a prescriber to a receiver.

    Lifecycle columns:
      - intake_status: has the receiver picked the lead up (non_traitee, contacte, ...)
      - deal_stage: commercial progress (nouveau ... acte_recrute / sans_suite)

    Reminder bookkeeping (written only after a successful send):
      - last_reminder_at: 48h intake reminder to the receiver
      - manager_reminder_at: 72h escalation to the receiver's manager
      - manager_notified_at: one-shot notice once the deal is closed-won
    """

    __tablename__ = "recommendations"
    __table_args__ = (
        Index("ix_recommendations_intake_created", "intake_status", "created_at"),
        Index("ix_recommendations_deal_stage", "deal_stage"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    # Parties (name/email denormalized at creation time)
    prescriber_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, index=True
    )
    prescriber_name: Mapped[Optional[str]] = mapped_column(String(240), nullable=True)
    prescriber_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)

    receiver_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, index=True
    )
    receiver_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True, index=True)

    # Client
    client_name: Mapped[str] = mapped_column(String(240), nullable=False)
    client_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    client_phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    project_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    project_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Project category (Vente, Achat, Location, Gestion, ...)
    project_title: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)

    intake_status: Mapped[str] = mapped_column(
        String(30), nullable=False, default=IntakeStatus.UNTREATED.value, server_default=IntakeStatus.UNTREATED.value
    )
    deal_stage: Mapped[str] = mapped_column(
        String(30), nullable=False, default=DealStage.NEW.value, server_default=DealStage.NEW.value
    )

    # Revenue
    amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    annual_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    # Receiver's scratch field from the inbox
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    last_reminder_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    manager_reminder_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    manager_notified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    @validates("prescriber_email", "receiver_email")
    def _normalize_party_email(self, key: str, value: Optional[str]) -> Optional[str]:
        # compared against Employee.email, which is stored lowercased
        if value is None:
            return None
        return User.normalize_email(value) or None

# backend/synergies/models/commission.py
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from synergies.core.clock import utcnow
from synergies.core.lifecycle import CommissionStatus
from synergies.db.base import Base


class Commission(Base):
    """
    Prescriber bonus for a closed-won referral.

    At most one row per referral (unique reco_id). Status moves
    pending -> (ready) -> paid; paid_at is written together with status=paid.
    """

    __tablename__ = "commissions"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_commissions_amount_non_negative"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    reco_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("recommendations.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # pending | ready | paid
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CommissionStatus.PENDING.value, server_default=CommissionStatus.PENDING.value
    )
    validated_by_manager: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    @property
    def is_paid(self) -> bool:
        return self.status == CommissionStatus.PAID.value

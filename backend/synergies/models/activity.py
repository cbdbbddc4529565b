# backend/synergies/models/activity.py
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from synergies.core.clock import utcnow
from synergies.db.base import Base


class Activity(Base):
    """
    Append-only audit trail: reminder sends and commission validation toggles.
    Rows are never updated.
    """

    __tablename__ = "activities"
    __table_args__ = (Index("ix_activities_reco_created", "reco_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    reco_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("recommendations.id", ondelete="CASCADE"), nullable=True
    )
    commission_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("commissions.id", ondelete="CASCADE"), nullable=True, index=True
    )

    # reminder_sent | manager_reminder_72h | manager_notified | commission_validated | commission_unvalidated
    action_type: Mapped[str] = mapped_column(String(40), nullable=False, index=True)

    actor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True
    )
    actor_name: Mapped[Optional[str]] = mapped_column(String(240), nullable=True)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

# synergies/services/commissions.py
from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from synergies.core.clock import utcnow
from synergies.core.commission_policy import compute_commission_amount
from synergies.core.config import settings
from synergies.core.lifecycle import ActivityType, CommissionStatus, requires_commission
from synergies.models.activity import Activity
from synergies.models.commission import Commission
from synergies.models.employee import Employee
from synergies.models.recommendation import Recommendation

logger = logging.getLogger(__name__)


class CommissionAlreadyPaidError(Exception):
    pass


class CommissionNotEligibleError(Exception):
    pass


def amount_for(reco: Recommendation) -> Decimal:
    return compute_commission_amount(
        reco.project_title,
        standard_amount=settings.COMMISSION_STANDARD_AMOUNT,
        recruitment_amount=settings.COMMISSION_RECRUITMENT_AMOUNT,
    )


async def get_commission_for_reco(db: AsyncSession, reco_id) -> Commission | None:
    stmt = select(Commission).where(Commission.reco_id == reco_id)
    return (await db.execute(stmt)).scalar_one_or_none()


async def ensure_commission(db: AsyncSession, reco: Recommendation) -> Commission:
    """
    Return the referral's commission, creating a pending one if missing.

    Only closed-won referrals get a commission. The unique reco_id constraint
    backs the at-most-one rule if two writers race.
    """
    if not requires_commission(reco.deal_stage):
        raise CommissionNotEligibleError(f"Recommendation {reco.id} is not closed-won")

    existing = await get_commission_for_reco(db, reco.id)
    if existing is not None:
        return existing

    commission = Commission(
        reco_id=reco.id,
        amount=amount_for(reco),
        status=CommissionStatus.PENDING.value,
        validated_by_manager=False,
    )
    db.add(commission)
    await db.flush()
    logger.info("Created commission %s (%s) for reco %s", commission.id, commission.amount, reco.id)
    return commission


def update_commission(
    commission: Commission,
    *,
    amount: Optional[Decimal] = None,
    due_date: Optional[date] = None,
    fields: set[str] | None = None,
) -> Commission:
    """Apply the editable fields; `fields` lists which ones were sent (None clears due_date)."""
    fields = fields if fields is not None else {"amount", "due_date"}
    if "amount" in fields and amount is not None:
        commission.amount = amount
    if "due_date" in fields:
        commission.due_date = due_date
    return commission


def mark_paid(commission: Commission, *, now: datetime | None = None) -> Commission:
    if commission.is_paid:
        raise CommissionAlreadyPaidError(f"Commission {commission.id} is already paid")
    # status and paid_at travel in the same UPDATE
    commission.status = CommissionStatus.PAID.value
    commission.paid_at = now or utcnow()
    return commission


def set_validation(
    db: AsyncSession,
    commission: Commission,
    *,
    validated: bool,
    actor: Employee,
    comment: str | None = None,
) -> Activity:
    commission.validated_by_manager = validated
    entry = Activity(
        reco_id=commission.reco_id,
        commission_id=commission.id,
        action_type=(
            ActivityType.COMMISSION_VALIDATED.value if validated else ActivityType.COMMISSION_UNVALIDATED.value
        ),
        actor_id=actor.id,
        actor_name=actor.display_name,
        note=(comment or "").strip() or None,
    )
    db.add(entry)
    return entry

# synergies/services/reminders.py
"""
Time-threshold scans run by the external cron.

Contract shared by every job:
  - bookkeeping (timestamp + activity row) is written only after the email
    went out, so a failed send is retried on the next run;
  - one failed send never aborts the batch;
  - rows whose receiver/manager cannot be resolved are skipped with a warning
    and left untouched.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from synergies.core.clock import utcnow
from synergies.core.config import settings
from synergies.core.lifecycle import ActivityType, DealStage, IntakeStatus
from synergies.crud.employee import resolve_manager, resolve_receiver
from synergies.models.activity import Activity
from synergies.models.employee import Employee
from synergies.models.recommendation import Recommendation
from synergies.services import email_templates
from synergies.services.email_templates import EmailContent
from synergies.services.mailer import EmailDeliveryError, Mailer

logger = logging.getLogger(__name__)

INTAKE_REMINDER_AFTER = timedelta(hours=48)
MANAGER_ESCALATION_AFTER = timedelta(hours=72)
REMINDER_COOLDOWN = timedelta(hours=24)


@dataclass
class ReminderRun:
    checked: int = 0
    sent: int = 0
    skipped: int = 0


async def _send(
    mailer: Mailer,
    *,
    to: str,
    cc: Optional[str],
    content: EmailContent,
    reco: Recommendation,
    delay: float,
) -> bool:
    try:
        await mailer.send(to=to, cc=cc, subject=content.subject, html=content.html)
        return True
    except EmailDeliveryError as exc:
        logger.error("Email for reco %s to %s failed (%s): %s", reco.id, to, exc.status_code, exc.message)
        return False
    finally:
        # stay under the provider's rate limit
        if delay > 0:
            await asyncio.sleep(delay)


async def _record(db: AsyncSession, reco: Recommendation, action: ActivityType, note: str) -> None:
    db.add(Activity(reco_id=reco.id, action_type=action.value, note=note))
    await db.commit()


async def _resolve_manager_chain(
    db: AsyncSession, reco: Recommendation
) -> tuple[Employee, Employee] | None:
    receiver = await resolve_receiver(db, reco)
    if receiver is None:
        logger.warning("Receiver not found for reco %s, skipping", reco.id)
        return None

    if receiver.manager_id is None:
        logger.warning("Receiver %s has no manager_id, skipping reco %s", receiver.id, reco.id)
        return None

    manager = await resolve_manager(db, receiver)
    if manager is None or not manager.email:
        logger.warning("Manager of receiver %s missing or without email, skipping reco %s", receiver.id, reco.id)
        return None

    return receiver, manager


async def run_intake_reminders(
    db: AsyncSession,
    mailer: Mailer,
    *,
    now: datetime | None = None,
    limit: int | None = None,
    delay: float | None = None,
) -> ReminderRun:
    """48h: untreated referrals get a reminder to the receiver, cc the prescriber."""
    now = now or utcnow()
    limit = settings.REMINDER_BATCH_LIMIT if limit is None else limit
    delay = settings.EMAIL_SEND_DELAY_SECONDS if delay is None else delay

    stmt = (
        select(Recommendation)
        .where(Recommendation.intake_status == IntakeStatus.UNTREATED.value)
        .where(Recommendation.created_at <= now - INTAKE_REMINDER_AFTER)
        .where(
            or_(
                Recommendation.last_reminder_at.is_(None),
                Recommendation.last_reminder_at <= now - REMINDER_COOLDOWN,
            )
        )
        .order_by(Recommendation.created_at.asc())
        .limit(limit)
    )
    recos = list((await db.execute(stmt)).scalars().all())
    run = ReminderRun(checked=len(recos))

    for reco in recos:
        to = reco.receiver_email
        if not to:
            receiver = await resolve_receiver(db, reco)
            to = receiver.email if receiver is not None else None
        if not to:
            logger.warning("Reco %s has no receiver email, skipping", reco.id)
            run.skipped += 1
            continue

        content = email_templates.intake_reminder_48h(reco)
        if not await _send(mailer, to=to, cc=reco.prescriber_email, content=content, reco=reco, delay=delay):
            continue

        reco.last_reminder_at = now
        await _record(db, reco, ActivityType.REMINDER_SENT, "Relance automatique 48h (intake non_traitee)")
        run.sent += 1

    logger.info("48h reminders: checked=%s sent=%s skipped=%s", run.checked, run.sent, run.skipped)
    return run


async def run_manager_escalations(
    db: AsyncSession,
    mailer: Mailer,
    *,
    now: datetime | None = None,
    limit: int | None = None,
    delay: float | None = None,
) -> ReminderRun:
    """72h: still untreated, so the receiver's manager is told."""
    now = now or utcnow()
    limit = settings.REMINDER_BATCH_LIMIT if limit is None else limit
    delay = settings.EMAIL_SEND_DELAY_SECONDS if delay is None else delay

    stmt = (
        select(Recommendation)
        .where(Recommendation.intake_status == IntakeStatus.UNTREATED.value)
        .where(Recommendation.created_at <= now - MANAGER_ESCALATION_AFTER)
        .where(
            or_(
                Recommendation.manager_reminder_at.is_(None),
                Recommendation.manager_reminder_at <= now - REMINDER_COOLDOWN,
            )
        )
        .order_by(Recommendation.created_at.asc())
        .limit(limit)
    )
    recos = list((await db.execute(stmt)).scalars().all())
    run = ReminderRun(checked=len(recos))

    for reco in recos:
        chain = await _resolve_manager_chain(db, reco)
        if chain is None:
            run.skipped += 1
            continue
        receiver, manager = chain

        content = email_templates.manager_escalation_72h(reco, receiver, manager)
        if not await _send(mailer, to=manager.email, cc=None, content=content, reco=reco, delay=delay):
            continue

        reco.manager_reminder_at = now
        await _record(
            db, reco, ActivityType.MANAGER_REMINDER_72H, "Relance 72h au manager (reco toujours non_traitee)"
        )
        run.sent += 1

    logger.info("72h escalations: checked=%s sent=%s skipped=%s", run.checked, run.sent, run.skipped)
    return run


async def run_closed_deal_notifications(
    db: AsyncSession,
    mailer: Mailer,
    *,
    now: datetime | None = None,
    limit: int | None = None,
    delay: float | None = None,
) -> ReminderRun:
    """One-shot notice to the receiver's manager once a referral is closed-won."""
    now = now or utcnow()
    limit = settings.REMINDER_BATCH_LIMIT if limit is None else limit
    delay = settings.EMAIL_SEND_DELAY_SECONDS if delay is None else delay

    stmt = (
        select(Recommendation)
        .where(Recommendation.deal_stage == DealStage.CLOSED_WON.value)
        .where(Recommendation.manager_notified_at.is_(None))
        .order_by(Recommendation.created_at.asc())
        .limit(limit)
    )
    recos = list((await db.execute(stmt)).scalars().all())
    run = ReminderRun(checked=len(recos))

    for reco in recos:
        chain = await _resolve_manager_chain(db, reco)
        if chain is None:
            run.skipped += 1
            continue
        receiver, manager = chain

        content = email_templates.manager_closed_deal(reco, receiver, manager)
        if not await _send(mailer, to=manager.email, cc=None, content=content, reco=reco, delay=delay):
            continue

        reco.manager_notified_at = now
        await _record(db, reco, ActivityType.MANAGER_NOTIFIED, "Manager notifié (acte recruté)")
        run.sent += 1

    logger.info("Closed-deal notifications: checked=%s sent=%s skipped=%s", run.checked, run.sent, run.skipped)
    return run

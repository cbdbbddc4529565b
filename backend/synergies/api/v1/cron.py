# backend/synergies/api/v1/cron.py
"""
Endpoints hit by the external scheduler. Each returns a JSON summary;
an unexpected failure is reported as {"ok": false, "error": ...} with a 500.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from synergies.api.deps.cron import require_cron_secret
from synergies.db.session import get_db
from synergies.schemas.cron import ReminderSummary
from synergies.services.mailer import Mailer, get_mailer
from synergies.services.reminders import (
    ReminderRun,
    run_closed_deal_notifications,
    run_intake_reminders,
    run_manager_escalations,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"], dependencies=[Depends(require_cron_secret)])

Job = Callable[[AsyncSession, Mailer], Awaitable[ReminderRun]]


async def _run(job: Job, db: AsyncSession, mailer: Mailer):
    try:
        run = await job(db, mailer)
    except Exception as exc:
        logger.exception("Cron job %s failed", job.__name__)
        await db.rollback()
        return JSONResponse(status_code=500, content={"ok": False, "error": str(exc)})
    return ReminderSummary(checked=run.checked, sent=run.sent)


@router.get("/reminder-48h", response_model=ReminderSummary)
async def reminder_48h(db: AsyncSession = Depends(get_db), mailer: Mailer = Depends(get_mailer)):
    return await _run(run_intake_reminders, db, mailer)


@router.get("/reminder-72h-manager", response_model=ReminderSummary)
async def reminder_72h_manager(db: AsyncSession = Depends(get_db), mailer: Mailer = Depends(get_mailer)):
    return await _run(run_manager_escalations, db, mailer)


@router.get("/reminder-72h", response_model=ReminderSummary, include_in_schema=False)
async def reminder_72h(db: AsyncSession = Depends(get_db), mailer: Mailer = Depends(get_mailer)):
    """Older scheduler entries still call this path."""
    return await _run(run_manager_escalations, db, mailer)


@router.get("/notify-manager-closed-deal", response_model=ReminderSummary)
async def notify_manager_closed_deal(db: AsyncSession = Depends(get_db), mailer: Mailer = Depends(get_mailer)):
    return await _run(run_closed_deal_notifications, db, mailer)

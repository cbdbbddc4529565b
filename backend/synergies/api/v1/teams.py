# backend/synergies/api/v1/teams.py
"""Managers follow the open referrals received by the people reporting to them."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from synergies.api.deps.permissions import require_admin
from synergies.core.lifecycle import DealStage, IntakeStatus
from synergies.crud.employee import list_team_members
from synergies.db.session import get_db
from synergies.models.employee import Employee
from synergies.models.recommendation import Recommendation
from synergies.schemas.recommendation import TeamListOut, TeamRow
from synergies.services.filters import distinct_sorted, in_date_range, in_selection, matches_search

router = APIRouter(prefix="/teams", tags=["teams"])


def _at_risk(reco: Recommendation) -> bool:
    return reco.intake_status == IntakeStatus.UNTREATED.value or reco.deal_stage == DealStage.NEW.value


@router.get("/recommendations", response_model=TeamListOut)
async def team_recommendations(
    q: Optional[str] = Query(default=None),
    project: Optional[List[str]] = Query(default=None),
    intake_status: Optional[List[str]] = Query(default=None),
    deal_stage: Optional[List[str]] = Query(default=None),
    receiver: Optional[List[str]] = Query(default=None, description="receiver display name"),
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    db: AsyncSession = Depends(get_db),
    me: Employee = Depends(require_admin),
):
    members = await list_team_members(db, me.id)
    if not members:
        return TeamListOut(items=[], total=0, receiver_options=[])

    by_id = {m.id: m for m in members}
    by_email = {m.email: m for m in members}

    stmt = (
        select(Recommendation)
        .where(
            or_(
                Recommendation.receiver_id.in_(list(by_id)),
                Recommendation.receiver_email.in_(list(by_email)),
            ),
            Recommendation.deal_stage != DealStage.CLOSED_WON.value,
        )
        .order_by(Recommendation.created_at.desc())
    )
    recos = (await db.execute(stmt)).scalars().all()

    rows: list[TeamRow] = []
    for r in recos:
        member = by_id.get(r.receiver_id) or by_email.get(r.receiver_email)
        rows.append(
            TeamRow(
                id=r.id,
                created_at=r.created_at,
                client_name=r.client_name,
                project_title=r.project_title,
                intake_status=r.intake_status,
                deal_stage=r.deal_stage,
                amount=r.amount,
                annual_amount=r.annual_amount,
                receiver_id=member.id if member else r.receiver_id,
                receiver_name=member.display_name if member else None,
                receiver_email=r.receiver_email,
                at_risk=_at_risk(r),
            )
        )

    items = [
        row
        for row in rows
        if matches_search(q, (row.client_name, row.project_title, row.receiver_name, row.receiver_email))
        and in_selection(row.project_title, project)
        and in_selection(row.intake_status, intake_status)
        and in_selection(row.deal_stage, deal_stage)
        and in_selection(row.receiver_name, receiver)
        and in_date_range(row.created_at, date_from, date_to)
    ]
    return TeamListOut(
        items=items,
        total=len(items),
        receiver_options=distinct_sorted(row.receiver_name for row in rows),
    )

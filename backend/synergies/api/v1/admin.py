# backend/synergies/api/v1/admin.py
"""Direction dashboard: every referral, filterable, with revenue total and CSV export."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from synergies.api.deps.permissions import require_admin
from synergies.core.csv_export import MEDIA_TYPE, build_csv, content_disposition, export_filename
from synergies.core.formatting import fmt_date, fmt_money
from synergies.core.lifecycle import DealStage, IntakeStatus
from synergies.db.session import get_db
from synergies.models.employee import Employee
from synergies.models.recommendation import Recommendation
from synergies.schemas.recommendation import DirectionListOut
from synergies.services.filters import distinct_sorted, in_date_range, matches_search

router = APIRouter(prefix="/admin/recommendations", tags=["admin"])

CSV_HEADER = [
    "id",
    "date",
    "client",
    "projet",
    "prescripteur",
    "email_prescripteur",
    "email_receveur",
    "intake_status",
    "deal_stage",
    "montant_euros",
]


@dataclass
class DirectionFilters:
    q: Optional[str] = None
    deal_stage: Optional[DealStage] = None
    intake_status: Optional[IntakeStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    receiver: Optional[str] = None
    prescriber: Optional[str] = None


def direction_filters(
    q: Optional[str] = Query(default=None),
    deal_stage: Optional[DealStage] = Query(default=None),
    intake_status: Optional[IntakeStatus] = Query(default=None),
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    receiver: Optional[str] = Query(default=None, description="receiver email"),
    prescriber: Optional[str] = Query(default=None, description="prescriber email"),
) -> DirectionFilters:
    return DirectionFilters(q, deal_stage, intake_status, date_from, date_to, receiver, prescriber)


async def _load(db: AsyncSession, f: DirectionFilters) -> tuple[list[Recommendation], list[Recommendation]]:
    """Returns (loaded rows, filtered rows); dropdown options come from the loaded set."""
    stmt = select(Recommendation).order_by(Recommendation.created_at.desc())
    if f.deal_stage is not None:
        stmt = stmt.where(Recommendation.deal_stage == f.deal_stage.value)
    if f.intake_status is not None:
        stmt = stmt.where(Recommendation.intake_status == f.intake_status.value)
    loaded = list((await db.execute(stmt)).scalars().all())

    rows = []
    for r in loaded:
        if not matches_search(
            f.q,
            (r.client_name, r.receiver_email, r.prescriber_email, r.prescriber_name, r.project_title),
        ):
            continue
        if not in_date_range(r.created_at, f.date_from, f.date_to):
            continue
        if f.receiver and r.receiver_email != f.receiver:
            continue
        if f.prescriber and (r.prescriber_email or "") != f.prescriber:
            continue
        rows.append(r)
    return loaded, rows


@router.get("", response_model=DirectionListOut)
async def list_all_recommendations(
    filters: DirectionFilters = Depends(direction_filters),
    db: AsyncSession = Depends(get_db),
    _admin: Employee = Depends(require_admin),
):
    loaded, rows = await _load(db, filters)
    total = sum((r.amount for r in rows if r.amount is not None), Decimal("0.00"))
    return DirectionListOut(
        items=rows,
        count=len(rows),
        total_amount=total,
        receiver_options=distinct_sorted(r.receiver_email for r in loaded),
        prescriber_options=distinct_sorted(r.prescriber_email for r in loaded),
    )


@router.get("/export")
async def export_recommendations(
    filters: DirectionFilters = Depends(direction_filters),
    db: AsyncSession = Depends(get_db),
    _admin: Employee = Depends(require_admin),
):
    _, rows = await _load(db, filters)
    csv_text = build_csv(
        CSV_HEADER,
        (
            [
                r.id,
                fmt_date(r.created_at),
                r.client_name,
                r.project_title,
                r.prescriber_name,
                r.prescriber_email,
                r.receiver_email,
                r.intake_status,
                r.deal_stage,
                fmt_money(r.amount) if r.amount is not None else "",
            ]
            for r in rows
        ),
    )
    filename = export_filename("recommandations")
    return Response(
        content=csv_text.encode("utf-8"),
        media_type=MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(filename)},
    )

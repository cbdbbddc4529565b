# backend/synergies/api/v1/commissions.py
"""Commission ledger for the direction: closed-won referrals and their payout state."""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from synergies.api.deps.permissions import get_recommendation_or_404, require_admin
from synergies.core.csv_export import MEDIA_TYPE, build_csv, content_disposition, export_filename
from synergies.core.formatting import fmt_date, fmt_money
from synergies.core.lifecycle import CommissionStatus, DealStage
from synergies.db.session import get_db
from synergies.models.commission import Commission
from synergies.models.employee import Employee
from synergies.models.recommendation import Recommendation
from synergies.schemas.commission import (
    CommissionLedgerOut,
    CommissionOut,
    CommissionRow,
    CommissionUpdate,
    ValidationToggle,
)
from synergies.services.commissions import (
    CommissionAlreadyPaidError,
    CommissionNotEligibleError,
    amount_for,
    ensure_commission,
    mark_paid,
    set_validation,
    update_commission,
)
from synergies.services.filters import in_selection, matches_search

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/commissions", tags=["commissions"])

CSV_HEADER = [
    "Date reco",
    "Client",
    "Projet",
    "Prescripteur",
    "Email prescripteur",
    "Commission €",
    "Échéance",
    "Statut",
    "Payé le",
]


def _row(reco: Recommendation, commission: Commission | None) -> CommissionRow:
    status_value = commission.status if commission else CommissionStatus.PENDING.value
    return CommissionRow(
        reco_id=reco.id,
        created_at=reco.created_at,
        client_name=reco.client_name,
        project_title=reco.project_title,
        prescriber_name=reco.prescriber_name,
        prescriber_email=reco.prescriber_email,
        commission_id=commission.id if commission else None,
        amount=commission.amount if commission else None,
        suggested_amount=amount_for(reco),
        status=status_value,
        due_date=commission.due_date if commission else None,
        paid_at=commission.paid_at if commission else None,
        validated_by_manager=commission.validated_by_manager if commission else False,
        # no row yet, or already paid: nothing to mark
        can_mark_paid=commission is not None and status_value != CommissionStatus.PAID.value,
    )


def _to_out(commission: Commission) -> CommissionOut:
    out = CommissionOut.model_validate(commission)
    out.can_mark_paid = not commission.is_paid
    return out


async def _ledger(
    db: AsyncSession,
    *,
    q: Optional[str],
    paid: Optional[List[str]],
    validation: Optional[List[str]],
    project: Optional[List[str]],
) -> list[CommissionRow]:
    stmt = (
        select(Recommendation, Commission)
        .outerjoin(Commission, Commission.reco_id == Recommendation.id)
        .where(Recommendation.deal_stage == DealStage.CLOSED_WON.value)
        .order_by(Recommendation.created_at.desc())
    )
    rows = [_row(reco, commission) for reco, commission in (await db.execute(stmt)).all()]

    return [
        r
        for r in rows
        if matches_search(q, (r.client_name, r.project_title, r.prescriber_name, r.prescriber_email))
        and in_selection("paid" if r.status == CommissionStatus.PAID.value else "not_paid", paid)
        and in_selection("validated" if r.validated_by_manager else "not_validated", validation)
        and in_selection(r.project_title, project)
    ]


async def _get_commission_or_404(db: AsyncSession, commission_id: uuid.UUID) -> Commission:
    commission = await db.get(Commission, commission_id)
    if commission is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Commission absente")
    return commission


@router.get("", response_model=CommissionLedgerOut)
async def list_commissions(
    q: Optional[str] = Query(default=None),
    paid: Optional[List[str]] = Query(default=None, description="paid | not_paid"),
    validation: Optional[List[str]] = Query(default=None, description="validated | not_validated"),
    project: Optional[List[str]] = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _admin: Employee = Depends(require_admin),
):
    items = await _ledger(db, q=q, paid=paid, validation=validation, project=project)
    return CommissionLedgerOut(items=items, total=len(items))


@router.get("/export")
async def export_commissions(
    q: Optional[str] = Query(default=None),
    paid: Optional[List[str]] = Query(default=None),
    validation: Optional[List[str]] = Query(default=None),
    project: Optional[List[str]] = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _admin: Employee = Depends(require_admin),
):
    items = await _ledger(db, q=q, paid=paid, validation=validation, project=project)
    csv_text = build_csv(
        CSV_HEADER,
        (
            [
                fmt_date(r.created_at),
                r.client_name,
                r.project_title,
                r.prescriber_name,
                r.prescriber_email,
                fmt_money(r.amount),
                fmt_date(r.due_date),
                r.status,
                fmt_date(r.paid_at),
            ]
            for r in items
        ),
    )
    filename = export_filename("commissions")
    return Response(
        content=csv_text.encode("utf-8"),
        media_type=MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(filename)},
    )


@router.post("/ensure/{reco_id}", response_model=CommissionOut)
async def ensure_commission_for_reco(
    reco_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _admin: Employee = Depends(require_admin),
):
    """Open the commission of a closed-won referral that predates automatic creation."""
    reco = await get_recommendation_or_404(db, reco_id)
    try:
        commission = await ensure_commission(db, reco)
        await db.commit()
    except CommissionNotEligibleError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Recommendation is not in acte_recrute",
        )
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Commission already exists")
    return _to_out(commission)


@router.patch("/{commission_id}", response_model=CommissionOut)
async def edit_commission(
    commission_id: uuid.UUID,
    payload: CommissionUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: Employee = Depends(require_admin),
):
    commission = await _get_commission_or_404(db, commission_id)

    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields provided to update.")

    update_commission(commission, amount=data.get("amount"), due_date=data.get("due_date"), fields=set(data))
    await db.commit()
    return _to_out(commission)


@router.post("/{commission_id}/mark-paid", response_model=CommissionOut)
async def mark_commission_paid(
    commission_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: Employee = Depends(require_admin),
):
    commission = await _get_commission_or_404(db, commission_id)
    try:
        mark_paid(commission)
    except CommissionAlreadyPaidError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Commission already paid")

    await db.commit()
    logger.info("Commission %s marked paid by %s", commission.id, admin.id)
    return _to_out(commission)


@router.post("/{commission_id}/validation", response_model=CommissionOut)
async def toggle_validation(
    commission_id: uuid.UUID,
    payload: ValidationToggle,
    db: AsyncSession = Depends(get_db),
    admin: Employee = Depends(require_admin),
):
    commission = await _get_commission_or_404(db, commission_id)
    set_validation(db, commission, validated=payload.validated, actor=admin, comment=payload.comment)
    await db.commit()
    return _to_out(commission)

# backend/synergies/api/v1/recommendations.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from synergies.api.deps.permissions import (
    get_current_employee,
    get_recommendation_or_404,
    require_party,
    require_receiver,
)
from synergies.core.lifecycle import DEAL_STAGE_LABELS, DealStage, IntakeStatus, requires_commission
from synergies.crud.employee import get_employee_by_email
from synergies.db.session import get_db
from synergies.models.employee import Employee
from synergies.models.recommendation import Recommendation
from synergies.schemas.recommendation import (
    KanbanCard,
    KanbanColumn,
    KanbanOut,
    RecommendationCreate,
    RecommendationListOut,
    RecommendationMove,
    RecommendationOut,
    RecommendationUpdate,
)
from synergies.services import email_templates
from synergies.services.commissions import ensure_commission
from synergies.services.filters import matches_search
from synergies.services.mailer import EmailDeliveryError, Mailer, get_mailer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


def _received_by(employee: Employee):
    # receiver_id is canonical; older rows may only carry the email
    return or_(
        Recommendation.receiver_id == employee.id,
        and_(Recommendation.receiver_id.is_(None), Recommendation.receiver_email == employee.email),
    )


async def _resolve_new_receiver(db: AsyncSession, payload: RecommendationCreate) -> Employee:
    receiver: Employee | None = None
    if payload.receiver_id is not None:
        receiver = await db.get(Employee, payload.receiver_id)
    if receiver is None and payload.receiver_email is not None:
        receiver = await get_employee_by_email(db, str(payload.receiver_email))

    if receiver is None or not receiver.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Receveur introuvable.")
    return receiver


async def _apply_update(db: AsyncSession, reco: Recommendation, data: dict[str, Any]) -> Recommendation:
    """
    Write the changed fields; entering acte_recrute opens the commission.
    """
    for field in ("intake_status", "deal_stage"):
        if field in data:
            data[field] = data[field].value if hasattr(data[field], "value") else data[field]

    for k, v in data.items():
        setattr(reco, k, v)

    if "deal_stage" in data and requires_commission(reco.deal_stage):
        await ensure_commission(db, reco)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Conflict updating recommendation")

    return reco


@router.post("", response_model=RecommendationOut, status_code=status.HTTP_201_CREATED)
async def create_recommendation(
    payload: RecommendationCreate,
    db: AsyncSession = Depends(get_db),
    me: Employee = Depends(get_current_employee),
    mailer: Mailer = Depends(get_mailer),
):
    receiver = await _resolve_new_receiver(db, payload)

    reco = Recommendation(
        prescriber_id=me.id,
        prescriber_name=me.display_name,
        prescriber_email=me.email,
        receiver_id=receiver.id,
        receiver_email=receiver.email,
        client_name=payload.client_name,
        client_email=str(payload.client_email) if payload.client_email else None,
        client_phone=payload.client_phone,
        project_address=payload.project_address,
        project_details=payload.project_details,
        project_title=payload.project_title.value,
        intake_status=IntakeStatus.UNTREATED.value,
        deal_stage=DealStage.NEW.value,
    )
    db.add(reco)
    await db.commit()

    # The referral exists either way; a failed notification is only logged.
    content = email_templates.new_recommendation(reco)
    try:
        await mailer.send(to=receiver.email, cc=me.email, subject=content.subject, html=content.html)
    except EmailDeliveryError as exc:
        logger.error("New-referral email for reco %s failed: %s", reco.id, exc.message)

    return reco


@router.get("/inbox", response_model=RecommendationListOut)
async def inbox(
    q: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
    me: Employee = Depends(get_current_employee),
):
    """Referrals I received."""
    stmt = select(Recommendation).where(_received_by(me)).order_by(Recommendation.created_at.desc())
    rows = (await db.execute(stmt)).scalars().all()

    items = [
        r
        for r in rows
        if matches_search(q, (r.client_name, r.project_title, r.intake_status, r.deal_stage))
    ]
    return RecommendationListOut(items=items, total=len(items))


@router.get("/outbox", response_model=RecommendationListOut)
async def outbox(
    q: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
    me: Employee = Depends(get_current_employee),
):
    """Referrals I sent."""
    stmt = (
        select(Recommendation)
        .where(Recommendation.prescriber_id == me.id)
        .order_by(Recommendation.created_at.desc())
    )
    rows = (await db.execute(stmt)).scalars().all()

    items = [
        r
        for r in rows
        if matches_search(
            q, (r.client_name, r.project_title, r.receiver_email, r.intake_status, r.deal_stage)
        )
    ]
    return RecommendationListOut(items=items, total=len(items))


@router.get("/kanban", response_model=KanbanOut)
async def kanban(
    q: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
    me: Employee = Depends(get_current_employee),
):
    stmt = select(Recommendation).where(_received_by(me)).order_by(Recommendation.created_at.desc())
    rows = (await db.execute(stmt)).scalars().all()

    by_stage: dict[str, list[KanbanCard]] = {s.value: [] for s in DealStage}
    for r in rows:
        if not matches_search(q, (r.client_name, r.project_title)):
            continue
        by_stage.setdefault(r.deal_stage, []).append(KanbanCard.model_validate(r))

    # legacy stage values outside the vocabulary get their own column, labelled as-is
    labels = {s.value: label for s, label in DEAL_STAGE_LABELS.items()}
    columns = [
        KanbanColumn(stage=stage, label=labels.get(stage, stage), cards=cards)
        for stage, cards in by_stage.items()
    ]
    return KanbanOut(columns=columns)


@router.get("/{reco_id}", response_model=RecommendationOut)
async def get_recommendation(
    reco_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    me: Employee = Depends(get_current_employee),
):
    reco = await get_recommendation_or_404(db, reco_id)
    require_party(me, reco)
    return reco


@router.patch("/{reco_id}", response_model=RecommendationOut)
async def update_recommendation(
    reco_id: uuid.UUID,
    payload: RecommendationUpdate,
    db: AsyncSession = Depends(get_db),
    me: Employee = Depends(get_current_employee),
):
    reco = await get_recommendation_or_404(db, reco_id)
    require_receiver(me, reco)

    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields provided to update.")

    return await _apply_update(db, reco, data)


@router.post("/{reco_id}/move", response_model=RecommendationOut)
async def move_recommendation(
    reco_id: uuid.UUID,
    payload: RecommendationMove,
    db: AsyncSession = Depends(get_db),
    me: Employee = Depends(get_current_employee),
):
    """Kanban drop: change the deal stage only."""
    reco = await get_recommendation_or_404(db, reco_id)
    require_receiver(me, reco)
    return await _apply_update(db, reco, {"deal_stage": payload.deal_stage})


@router.post("/{reco_id}/nudge")
async def nudge_receiver(
    reco_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    me: Employee = Depends(get_current_employee),
    mailer: Mailer = Depends(get_mailer),
):
    """Prescriber asks the receiver for an update (receiver in To, prescriber in Cc)."""
    reco = await get_recommendation_or_404(db, reco_id)
    if reco.prescriber_id != me.id and not me.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the prescriber can send a reminder")
    if not reco.receiver_email:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Recommendation has no receiver email")

    content = email_templates.prescriber_nudge(reco)
    try:
        await mailer.send(to=reco.receiver_email, cc=me.email, subject=content.subject, html=content.html)
    except EmailDeliveryError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail={"ok": False, "error": exc.message})

    return {"ok": True}

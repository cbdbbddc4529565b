# backend/synergies/api/v1/suggestions.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from synergies.api.v1.auth import get_current_user
from synergies.crud.employee import get_employee_by_user_id
from synergies.db.session import get_db
from synergies.models.feature_suggestion import FeatureSuggestion
from synergies.models.user import User
from synergies.schemas.suggestion import SuggestionCreate, SuggestionOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/suggestions", tags=["suggestions"])


@router.post("", response_model=SuggestionOut, status_code=status.HTTP_201_CREATED)
async def submit_suggestion(
    payload: SuggestionCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    name = (user.full_name or "").strip()
    if not name:
        employee = await get_employee_by_user_id(db, user.id)
        name = employee.display_name if employee else user.email

    suggestion = FeatureSuggestion(user_id=user.id, name=name, suggestion=payload.suggestion)
    db.add(suggestion)
    await db.commit()

    logger.info("Feature suggestion %s from user %s", suggestion.id, user.id)
    return suggestion

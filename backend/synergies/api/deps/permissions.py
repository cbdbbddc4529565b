from __future__ import annotations

import uuid

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from synergies.api.v1.auth import get_current_user
from synergies.crud.employee import get_employee_by_user_id
from synergies.db.session import get_db
from synergies.models.employee import Employee
from synergies.models.recommendation import Recommendation
from synergies.models.user import User


async def get_current_employee(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> Employee:
    """
    Resolve the employee record behind the authenticated user.
    """
    employee = await get_employee_by_user_id(db, user.id)
    if employee is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "employee_missing", "message": "Pas de fiche employé."},
        )
    if not employee.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "employee_inactive", "message": "Fiche employé désactivée."},
        )
    return employee


async def require_admin(employee: Employee = Depends(get_current_employee)) -> Employee:
    """
    Direction / managers only. Non-admins get the error detail and nothing else.
    """
    if not employee.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "admin_required", "message": "Accès réservé à la Direction."},
        )
    return employee


def is_party(employee: Employee, reco: Recommendation) -> bool:
    return employee.id in {reco.prescriber_id, reco.receiver_id} or (
        reco.receiver_email is not None and reco.receiver_email == employee.email
    )


def is_receiver(employee: Employee, reco: Recommendation) -> bool:
    if reco.receiver_id is not None:
        return reco.receiver_id == employee.id
    return reco.receiver_email is not None and reco.receiver_email == employee.email


def require_party(employee: Employee, reco: Recommendation) -> None:
    if not (employee.is_admin or is_party(employee, reco)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a party to this recommendation")


def require_receiver(employee: Employee, reco: Recommendation) -> None:
    if not (employee.is_admin or is_receiver(employee, reco)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the receiver can update this recommendation",
        )


async def get_recommendation_or_404(db: AsyncSession, reco_id: uuid.UUID) -> Recommendation:
    reco = await db.get(Recommendation, reco_id)
    if reco is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recommandation introuvable.")
    return reco

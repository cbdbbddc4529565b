# synergies/crud/employee.py
from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from synergies.models.employee import Employee
from synergies.models.recommendation import Recommendation
from synergies.models.user import User

logger = logging.getLogger(__name__)


async def get_employee_by_user_id(db: AsyncSession, user_id: uuid.UUID) -> Employee | None:
    stmt = select(Employee).where(Employee.user_id == user_id)
    return (await db.execute(stmt)).scalar_one_or_none()


async def get_employee_by_email(db: AsyncSession, email: str | None) -> Employee | None:
    if not email:
        return None
    stmt = select(Employee).where(Employee.email == User.normalize_email(email))
    return (await db.execute(stmt)).scalar_one_or_none()


async def link_employee_to_user(db: AsyncSession, user: User) -> Employee | None:
    """
    Attach the login identity to the active employee with the same email,
    the first time that employee signs in. Does not commit.
    """
    employee = await get_employee_by_user_id(db, user.id)
    if employee is not None:
        return employee

    employee = await get_employee_by_email(db, user.email)
    if employee is None or not employee.is_active:
        return None
    if employee.user_id is not None:
        logger.warning("Employee %s already linked to another user; not relinking to %s", employee.id, user.id)
        return None

    employee.user_id = user.id
    logger.info("Linked user %s to employee %s", user.id, employee.id)
    return employee


async def list_active_employees(db: AsyncSession) -> list[Employee]:
    stmt = (
        select(Employee)
        .where(Employee.is_active.is_(True))
        .order_by(Employee.first_name.asc(), Employee.last_name.asc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def list_team_members(db: AsyncSession, manager_id: uuid.UUID) -> list[Employee]:
    stmt = select(Employee).where(Employee.manager_id == manager_id)
    return list((await db.execute(stmt)).scalars().all())


async def resolve_receiver(db: AsyncSession, reco: Recommendation) -> Employee | None:
    """
    Receiver of a referral: by receiver_id first, then by receiver_email.
    """
    if reco.receiver_id is not None:
        receiver = await db.get(Employee, reco.receiver_id)
        if receiver is not None:
            return receiver
        logger.warning("Receiver %s not found for reco %s; trying email", reco.receiver_id, reco.id)

    return await get_employee_by_email(db, reco.receiver_email)


async def resolve_manager(db: AsyncSession, employee: Employee) -> Employee | None:
    if employee.manager_id is None:
        return None
    return await db.get(Employee, employee.manager_id)

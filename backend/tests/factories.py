# tests/factories.py
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from synergies.core.lifecycle import DealStage, EmployeeRole, IntakeStatus
from synergies.core.security import create_access_token
from synergies.models.commission import Commission
from synergies.models.employee import Employee
from synergies.models.recommendation import Recommendation
from synergies.models.user import User


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def hours_ago(hours: float) -> datetime:
    return utcnow() - timedelta(hours=hours)


async def create_user(db, email: str, full_name: str | None = None) -> User:
    user = User(email=email.lower().strip(), full_name=full_name, is_active=True)
    db.add(user)
    await db.flush()
    return user


async def create_employee(
    db,
    email: str,
    *,
    first_name: str = "Camille",
    last_name: str | None = None,
    role: str = EmployeeRole.EMPLOYEE.value,
    manager: Employee | None = None,
    with_login: bool = True,
    is_active: bool = True,
) -> Employee:
    user = await create_user(db, email) if with_login else None
    employee = Employee(
        user_id=user.id if user else None,
        first_name=first_name,
        last_name=last_name or email.split("@")[0].title(),
        email=email.lower().strip(),
        role=role,
        manager_id=manager.id if manager else None,
        is_active=is_active,
    )
    db.add(employee)
    await db.flush()
    return employee


async def create_reco(
    db,
    prescriber: Employee,
    receiver: Employee | None,
    *,
    client_name: str = "Client Test",
    project_title: str | None = "Vente",
    intake_status: str = IntakeStatus.UNTREATED.value,
    deal_stage: str = DealStage.NEW.value,
    created_at: datetime | None = None,
    receiver_email: str | None = None,
    **extra,
) -> Recommendation:
    reco = Recommendation(
        prescriber_id=prescriber.id,
        prescriber_name=prescriber.display_name,
        prescriber_email=prescriber.email,
        receiver_id=receiver.id if receiver else None,
        receiver_email=receiver_email if receiver_email is not None else (receiver.email if receiver else None),
        client_name=client_name,
        project_title=project_title,
        intake_status=intake_status,
        deal_stage=deal_stage,
        created_at=created_at or utcnow(),
        **extra,
    )
    db.add(reco)
    await db.flush()
    return reco


async def create_commission(db, reco: Recommendation, **fields) -> Commission:
    fields.setdefault("amount", 100)
    commission = Commission(reco_id=reco.id, **fields)
    db.add(commission)
    await db.flush()
    return commission


def auth_headers(employee_or_user) -> dict[str, str]:
    user_id = getattr(employee_or_user, "user_id", None) or employee_or_user.id
    return {"Authorization": f"Bearer {create_access_token(subject=str(user_id))}"}


def random_email(prefix: str = "user") -> str:
    return f"{prefix}.{uuid.uuid4().hex[:8]}@example.com"

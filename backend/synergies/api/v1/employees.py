# backend/synergies/api/v1/employees.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from synergies.api.deps.permissions import get_current_employee
from synergies.crud.employee import list_active_employees
from synergies.db.session import get_db
from synergies.models.employee import Employee
from synergies.schemas.employee import DirectoryEntry, EmployeeOut

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("/directory", response_model=list[DirectoryEntry])
async def directory(
    db: AsyncSession = Depends(get_db),
    me: Employee = Depends(get_current_employee),
):
    """Active colleagues a referral can be sent to (yourself excluded)."""
    return [e for e in await list_active_employees(db) if e.id != me.id]


@router.get("/me", response_model=EmployeeOut)
async def my_employee_record(me: Employee = Depends(get_current_employee)):
    return me

# backend/synergies/models/employee.py
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, validates
from sqlalchemy.sql import func

from synergies.core.clock import utcnow
from synergies.core.lifecycle import EmployeeRole
from synergies.db.base import Base
from synergies.models.user import User


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Link to the login identity; nullable for directory entries that never signed in
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
        index=True,
    )

    first_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)

    # employee | admin
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=EmployeeRole.EMPLOYEE.value)

    # One level of hierarchy: the manager escalations go to
    manager_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("employees.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

    @property
    def is_admin(self) -> bool:
        return (self.role or "").strip().lower() == EmployeeRole.ADMIN.value

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        return User.normalize_email(value)

"""
Employee model: staff accounts of the business, with per-account permissions.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Float, String
from sqlalchemy.orm import validates

from bizdesk.core.permissions import EMPLOYEE_PERMISSIONS, EMPLOYEE_ROLES, validate_choices
from bizdesk.db.base import Base
from bizdesk.models.account import AccountMixin


class Employee(AccountMixin, Base):
    __tablename__ = "employees"

    employee_id: str = Column(String(20), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    first_name: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    last_name: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    phone_number: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]
    avatar: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    department: str = Column(String(100), nullable=False, index=True)  # type: ignore[assignment]
    position: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    hire_date: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    salary: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    role: str = Column(String(20), nullable=False, default="employee", index=True)  # type: ignore[assignment]
    # employee | supervisor | manager | admin
    permissions: list[str] = Column(JSON, nullable=False, default=list)  # type: ignore[assignment]

    @validates("role")
    def _validate_role(self, _key: str, value: str) -> str:
        if value not in EMPLOYEE_ROLES:
            raise ValueError(f"Role must be one of: {', '.join(EMPLOYEE_ROLES)}")
        return value

    @validates("permissions")
    def _validate_permissions(self, _key: str, value: list[str]) -> list[str]:
        return validate_choices(value or [], EMPLOYEE_PERMISSIONS, "permission")

    @validates("salary")
    def _validate_salary(self, _key: str, value: float | None) -> float | None:
        if value is not None and value < 0:
            raise ValueError("Salary cannot be negative")
        return value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def has_permission(self, permission: str) -> bool:
        return permission in (self.permissions or [])

    def add_permission(self, permission: str) -> None:
        if not self.has_permission(permission):
            # reassign so the JSON column is flagged dirty
            self.permissions = [*(self.permissions or []), permission]

    def remove_permission(self, permission: str) -> None:
        self.permissions = [p for p in (self.permissions or []) if p != permission]

"""
Admin model: platform administrators with two tiering axes: admin level
(capability breadth, drives default permissions) and access level (module
reach, drives allowed modules).
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String
from sqlalchemy.orm import validates

from bizdesk.core.lockout import as_utc
from bizdesk.core.permissions import (
    ACCESS_LEVELS,
    ADMIN_LEVELS,
    ADMIN_PERMISSIONS,
    MODULES,
    validate_choices,
)
from bizdesk.db.base import Base
from bizdesk.models.account import AccountMixin

SESSION_TIMEOUT_RANGE = (5, 480)
PASSWORD_EXPIRY_RANGE = (30, 365)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Admin(AccountMixin, Base):
    __tablename__ = "admins"

    admin_id: str = Column(String(20), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    first_name: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    last_name: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    phone_number: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]
    avatar: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    department: str = Column(String(100), nullable=False, index=True)  # type: ignore[assignment]
    position: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    hire_date: datetime = Column(DateTime(timezone=True), nullable=False, default=_utcnow)  # type: ignore[assignment]
    salary: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    admin_level: str = Column(String(20), nullable=False, default="admin", index=True)  # type: ignore[assignment]
    access_level: str = Column(String(20), nullable=False, default="limited_access")  # type: ignore[assignment]
    permissions: list[str] = Column(JSON, nullable=False, default=list)  # type: ignore[assignment]
    allowed_modules: list[str] = Column(JSON, nullable=False, default=list)  # type: ignore[assignment]
    ip_whitelist: list[str] = Column(JSON, nullable=False, default=list)  # type: ignore[assignment]
    session_timeout: int = Column(Integer, nullable=False, default=30)  # type: ignore[assignment]
    # minutes
    two_factor_enabled: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    two_factor_secret: str | None = Column(String(128), nullable=True)  # type: ignore[assignment]
    last_password_change: datetime = Column(DateTime(timezone=True), nullable=False, default=_utcnow)  # type: ignore[assignment]
    password_expiry_days: int = Column(Integer, nullable=False, default=90)  # type: ignore[assignment]

    @validates("admin_level")
    def _validate_admin_level(self, _key: str, value: str) -> str:
        if value not in ADMIN_LEVELS:
            raise ValueError(f"Admin level must be one of: {', '.join(ADMIN_LEVELS)}")
        return value

    @validates("access_level")
    def _validate_access_level(self, _key: str, value: str) -> str:
        if value not in ACCESS_LEVELS:
            raise ValueError(f"Access level must be one of: {', '.join(ACCESS_LEVELS)}")
        return value

    @validates("permissions")
    def _validate_permissions(self, _key: str, value: list[str]) -> list[str]:
        return validate_choices(value or [], ADMIN_PERMISSIONS, "permission")

    @validates("allowed_modules")
    def _validate_modules(self, _key: str, value: list[str]) -> list[str]:
        return validate_choices(value or [], MODULES, "module")

    @validates("session_timeout")
    def _validate_session_timeout(self, _key: str, value: int) -> int:
        low, high = SESSION_TIMEOUT_RANGE
        if not low <= value <= high:
            raise ValueError("Session timeout must be between 5 and 480 minutes")
        return value

    @validates("password_expiry_days")
    def _validate_password_expiry(self, _key: str, value: int) -> int:
        low, high = PASSWORD_EXPIRY_RANGE
        if not low <= value <= high:
            raise ValueError("Password expiry must be between 30 and 365 days")
        return value

    @validates("salary")
    def _validate_salary(self, _key: str, value: float | None) -> float | None:
        if value is not None and value < 0:
            raise ValueError("Salary cannot be negative")
        return value

    def _password_changed(self) -> None:
        self.last_password_change = _utcnow()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def password_expires_at(self) -> datetime:
        changed = as_utc(self.last_password_change) or _utcnow()
        return changed + timedelta(days=self.password_expiry_days or 90)

    def password_expired_at(self, now: datetime) -> bool:
        return now > self.password_expires_at

    @property
    def is_password_expired(self) -> bool:
        return self.password_expired_at(_utcnow())

    @property
    def days_until_password_expiry(self) -> int:
        remaining = (self.password_expires_at - _utcnow()).total_seconds() / 86400
        return max(0, math.ceil(remaining))

    @property
    def is_super_admin(self) -> bool:
        return self.admin_level == "super_admin"

    @property
    def has_full_access(self) -> bool:
        return self.access_level == "full_access"

    def has_permission(self, permission: str) -> bool:
        return permission in (self.permissions or [])

    def add_permission(self, permission: str) -> None:
        if not self.has_permission(permission):
            self.permissions = [*(self.permissions or []), permission]

    def remove_permission(self, permission: str) -> None:
        self.permissions = [p for p in (self.permissions or []) if p != permission]

    def can_access_module(self, module: str) -> bool:
        return module in (self.allowed_modules or [])

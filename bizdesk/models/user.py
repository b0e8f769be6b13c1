"""
User model: end users and vendors.
"""

from __future__ import annotations

from sqlalchemy import Column, String
from sqlalchemy.orm import validates

from bizdesk.core.permissions import USER_ROLES
from bizdesk.db.base import Base
from bizdesk.models.account import AccountMixin


class User(AccountMixin, Base):
    __tablename__ = "users"

    first_name: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    last_name: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    phone_number: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]
    avatar: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    role: str = Column(String(20), nullable=False, default="user", index=True)  # type: ignore[assignment]
    # user | vendor

    @validates("role")
    def _validate_role(self, _key: str, value: str) -> str:
        if value not in USER_ROLES:
            raise ValueError(f"Role must be one of: {', '.join(USER_ROLES)}")
        return value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def permissions(self) -> list[str]:
        return []

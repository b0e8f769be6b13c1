"""
Client model: tenant accounts that own customers, products and sales.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.orm import validates

from bizdesk.core.lockout import as_utc
from bizdesk.core.permissions import SUBSCRIPTION_FEATURES, validate_choices
from bizdesk.db.base import Base
from bizdesk.models.account import AccountMixin

SUBSCRIPTION_PLANS = ("basic", "premium", "enterprise")
SUBSCRIPTION_STATUSES = ("active", "inactive", "suspended", "cancelled")
API_KEY_LIFETIME = timedelta(days=365)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_api_key() -> str:
    return secrets.token_hex(32)


def _default_settings() -> dict[str, Any]:
    return {
        "timezone": "UTC",
        "currency": "INR",
        "language": "en",
        "notifications": {"email": True, "push": True, "sms": False},
    }


class Client(AccountMixin, Base):
    __tablename__ = "clients"

    company_name: str = Column(String(100), nullable=False, index=True)  # type: ignore[assignment]

    contact_first_name: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    contact_last_name: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    contact_phone_number: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]
    contact_position: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]

    address: dict | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    business_info: dict | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    settings: dict = Column(JSON, nullable=False, default=_default_settings)  # type: ignore[assignment]

    subscription_plan: str = Column(String(20), nullable=False, default="basic")  # type: ignore[assignment]
    subscription_status: str = Column(String(20), nullable=False, default="active", index=True)  # type: ignore[assignment]
    subscription_start_date: datetime = Column(DateTime(timezone=True), default=_utcnow)  # type: ignore[assignment]
    subscription_end_date: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    subscription_features: list[str] = Column(JSON, nullable=False, default=list)  # type: ignore[assignment]

    api_key: str | None = Column(String(64), unique=True, nullable=True, default=generate_api_key)  # type: ignore[assignment]
    api_key_expires: datetime | None = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        nullable=True,
        default=lambda: _utcnow() + API_KEY_LIFETIME,
    )

    @validates("subscription_plan")
    def _validate_plan(self, _key: str, value: str) -> str:
        if value not in SUBSCRIPTION_PLANS:
            raise ValueError(f"Plan must be one of: {', '.join(SUBSCRIPTION_PLANS)}")
        return value

    @validates("subscription_status")
    def _validate_status(self, _key: str, value: str) -> str:
        if value not in SUBSCRIPTION_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(SUBSCRIPTION_STATUSES)}")
        return value

    @validates("subscription_features")
    def _validate_features(self, _key: str, value: list[str]) -> list[str]:
        return validate_choices(value or [], SUBSCRIPTION_FEATURES, "subscription feature")

    def subscription_active_at(self, now: datetime) -> bool:
        if self.subscription_status != "active":
            return False
        end = as_utc(self.subscription_end_date)
        return end is None or end > now

    @property
    def is_subscription_active(self) -> bool:
        return self.subscription_active_at(_utcnow())

    @property
    def contact_person(self) -> dict[str, Any]:
        return {
            "first_name": self.contact_first_name,
            "last_name": self.contact_last_name,
            "phone_number": self.contact_phone_number,
            "position": self.contact_position,
            "full_name": f"{self.contact_first_name} {self.contact_last_name}",
        }

    @property
    def subscription(self) -> dict[str, Any]:
        return {
            "plan": self.subscription_plan,
            "status": self.subscription_status,
            "start_date": self.subscription_start_date,
            "end_date": self.subscription_end_date,
            "features": list(self.subscription_features or []),
            "is_active": self.is_subscription_active,
        }

    @property
    def permissions(self) -> list[str]:
        return []

    def regenerate_api_key(self) -> str:
        self.api_key = generate_api_key()
        self.api_key_expires = _utcnow() + API_KEY_LIFETIME
        return self.api_key

    @property
    def is_api_key_expired(self) -> bool:
        expires = as_utc(self.api_key_expires)
        return expires is not None and expires < _utcnow()

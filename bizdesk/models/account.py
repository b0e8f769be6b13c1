"""
Columns and behaviour shared by every principal table.

Each principal kind (user, client, employee, admin) lives in its own table,
so an email is unique per kind, not across kinds.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import validates

from bizdesk.core.lockout import LockState, as_utc
from bizdesk.core.security import password_hasher
from bizdesk.core.validators import normalise_email


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class AccountMixin:
    # left unannotated: declarative copies mixin columns as Mapped attributes
    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(320), unique=True, nullable=False, index=True)
    hashed_password = Column(String(128), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    login_attempts = Column(Integer, nullable=False, default=0)
    lock_until = Column(DateTime(timezone=True), nullable=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
    )

    @validates("email")
    def _validate_email(self, _key: str, value: str) -> str:
        return normalise_email(value)

    @validates("hashed_password")
    def _validate_hashed_password(self, _key: str, value: str) -> str:
        # only digests reach this column; plaintext is hashed in set_password
        if not password_hasher.is_hash(value):
            raise ValueError("hashed_password must be a password digest")
        return value

    async def set_password(self, plain: str) -> None:
        """Hash *plain* once and store the digest."""
        self.hashed_password = await password_hasher.hash_async(plain)
        self._password_changed()

    def _password_changed(self) -> None:
        """Hook for kinds that track password age."""

    async def check_password(self, plain: str) -> bool:
        return await password_hasher.verify_async(plain, self.hashed_password)

    @property
    def lock_state(self) -> LockState:
        return LockState(self.login_attempts or 0, self.lock_until)

    @property
    def is_locked(self) -> bool:
        return self.lock_state.is_locked(_utcnow())

    @property
    def locked_until(self) -> datetime | None:
        return as_utc(self.lock_until) if self.is_locked else None

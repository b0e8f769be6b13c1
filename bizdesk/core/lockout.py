"""
Account lockout policy shared by every principal kind.

A principal is either unlocked with ``attempts`` consecutive failures, or
locked until ``lock_until``. The transitions are pure functions over
:class:`LockState`; :class:`LockoutPolicy` applies them through a
:class:`CredentialStore`, retrying when a concurrent login changed the row
between the read and the conditional write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

from bizdesk.core.exceptions import InternalError

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
LOCK_DURATION = timedelta(hours=2)
_CAS_RETRIES = 8


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything here is UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class LockState:
    attempts: int = 0
    lock_until: datetime | None = None

    def is_locked(self, now: datetime) -> bool:
        return self.lock_until is not None and as_utc(self.lock_until) > now

    def lock_expired(self, now: datetime) -> bool:
        return self.lock_until is not None and as_utc(self.lock_until) <= now


def register_failure(
    state: LockState,
    now: datetime,
    max_attempts: int = MAX_ATTEMPTS,
    lock_duration: timedelta = LOCK_DURATION,
) -> LockState:
    """State after one more failed password check."""
    if state.lock_expired(now):
        return LockState(attempts=1, lock_until=None)
    attempts = state.attempts + 1
    lock_until = state.lock_until
    if attempts >= max_attempts and not state.is_locked(now):
        lock_until = now + lock_duration
    return LockState(attempts=attempts, lock_until=lock_until)


def register_success() -> LockState:
    return LockState()


class CredentialStore(Protocol):
    """Persistence seam for lockout state of one principal table."""

    async def load(self, principal_id: str) -> LockState | None:
        ...

    async def update_attempts(
        self, principal_id: str, expected: LockState, new: LockState
    ) -> bool:
        """Write *new* only if the stored state still equals *expected*."""
        ...

    async def clear_attempts(self, principal_id: str) -> None:
        ...


class LockoutPolicy:
    def __init__(
        self,
        max_attempts: int = MAX_ATTEMPTS,
        lock_duration: timedelta = LOCK_DURATION,
    ) -> None:
        self.max_attempts = max_attempts
        self.lock_duration = lock_duration

    async def record_failure(
        self,
        store: CredentialStore,
        principal_id: str,
        now: datetime | None = None,
    ) -> LockState:
        now = now or utcnow()
        for _ in range(_CAS_RETRIES):
            current = await store.load(principal_id)
            if current is None:
                raise InternalError("Account disappeared during login")
            new = register_failure(current, now, self.max_attempts, self.lock_duration)
            if await store.update_attempts(principal_id, current, new):
                if new.is_locked(now) and not current.is_locked(now):
                    logger.warning(
                        "Account %s locked until %s after %d failed attempts",
                        principal_id,
                        new.lock_until.isoformat(),
                        new.attempts,
                    )
                return new
        raise InternalError("Could not record failed login attempt")

    async def record_success(self, store: CredentialStore, principal_id: str) -> LockState:
        await store.clear_attempts(principal_id)
        return register_success()

"""Tests for the account lockout state machine and its SQL store."""

from datetime import timedelta

import pytest

from bizdesk.core.exceptions import InternalError
from bizdesk.core.lockout import (
    LOCK_DURATION,
    LockoutPolicy,
    LockState,
    register_failure,
    register_success,
    utcnow,
)
from bizdesk.models.employee import Employee
from bizdesk.services.credential_store import SqlCredentialStore

NOW = utcnow()


# ── Pure transitions ────────────────────────────────────────────────
def test_failures_below_threshold_only_count():
    state = LockState()
    for expected in range(1, 5):
        state = register_failure(state, NOW)
        assert state.attempts == expected
        assert state.lock_until is None
        assert not state.is_locked(NOW)


def test_fifth_failure_locks_for_two_hours():
    state = LockState(attempts=4)
    state = register_failure(state, NOW)
    assert state.attempts == 5
    assert state.lock_until == NOW + LOCK_DURATION
    assert state.is_locked(NOW)
    assert state.is_locked(NOW + timedelta(hours=1, minutes=59))
    assert not state.is_locked(NOW + LOCK_DURATION)


def test_failure_while_locked_keeps_lock_end():
    locked = LockState(attempts=5, lock_until=NOW + timedelta(hours=1))
    state = register_failure(locked, NOW)
    assert state.attempts == 6
    assert state.lock_until == locked.lock_until


def test_failure_after_lock_expired_restarts_count():
    expired = LockState(attempts=7, lock_until=NOW - timedelta(seconds=1))
    assert register_failure(expired, NOW) == LockState(attempts=1, lock_until=None)


def test_success_resets():
    assert register_success() == LockState(attempts=0, lock_until=None)


def test_custom_threshold():
    state = register_failure(LockState(attempts=2), NOW, max_attempts=3, lock_duration=timedelta(minutes=5))
    assert state.lock_until == NOW + timedelta(minutes=5)


# ── Policy over a store ─────────────────────────────────────────────
class MemoryStore:
    """In-memory store that can simulate a concurrent writer."""

    def __init__(self, state: LockState | None, interfere: int = 0) -> None:
        self.state = state
        self.interfere = interfere

    async def load(self, principal_id):
        return self.state

    async def update_attempts(self, principal_id, expected, new):
        if self.interfere:
            # another login bumped the counter between our read and write
            self.interfere -= 1
            self.state = LockState(self.state.attempts + 1, self.state.lock_until)
            return False
        if self.state != expected:
            return False
        self.state = new
        return True

    async def clear_attempts(self, principal_id):
        self.state = LockState()


@pytest.mark.asyncio
async def test_policy_retries_lost_race_without_losing_increment():
    store = MemoryStore(LockState(attempts=1), interfere=2)
    state = await LockoutPolicy().record_failure(store, "p1", NOW)
    # 1 stored + 2 concurrent + ours
    assert state.attempts == 4
    assert store.state.attempts == 4


@pytest.mark.asyncio
async def test_policy_missing_principal_is_internal_error():
    with pytest.raises(InternalError):
        await LockoutPolicy().record_failure(MemoryStore(None), "gone", NOW)


@pytest.mark.asyncio
async def test_policy_gives_up_after_retries():
    store = MemoryStore(LockState(), interfere=100)
    with pytest.raises(InternalError):
        await LockoutPolicy().record_failure(store, "p1", NOW)


@pytest.mark.asyncio
async def test_policy_success_clears():
    store = MemoryStore(LockState(attempts=3))
    assert await LockoutPolicy().record_success(store, "p1") == LockState()
    assert store.state == LockState()


# ── SQL store ───────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_sql_store_compare_and_swap(create_employee, db_session):
    employee = await create_employee()
    store = SqlCredentialStore(db_session, Employee)

    current = await store.load(employee.id)
    assert current == LockState()

    assert await store.update_attempts(employee.id, current, LockState(attempts=1))
    # stale expectation no longer matches the row
    assert not await store.update_attempts(employee.id, current, LockState(attempts=1))

    assert (await store.load(employee.id)).attempts == 1


@pytest.mark.asyncio
async def test_sql_store_policy_locks_and_clears(create_employee, db_session):
    employee = await create_employee()
    store = SqlCredentialStore(db_session, Employee)
    policy = LockoutPolicy()

    for _ in range(5):
        state = await policy.record_failure(store, employee.id, NOW)
    assert state.attempts == 5
    stored = await store.load(employee.id)
    assert stored.is_locked(NOW)

    await policy.record_success(store, employee.id)
    assert await store.load(employee.id) == LockState()


@pytest.mark.asyncio
async def test_sql_store_unknown_id(db_session):
    store = SqlCredentialStore(db_session, Employee)
    assert await store.load("does-not-exist") is None

"""
SQL implementation of the lockout ``CredentialStore`` for any principal table.
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.core.lockout import LockState


class SqlCredentialStore:
    """Reads and conditionally writes ``login_attempts`` / ``lock_until``.

    ``update_attempts`` is a compare-and-swap: the UPDATE only matches while
    the row still holds the state the caller read, so two concurrent failed
    logins for the same account cannot overwrite each other's increment.
    """

    def __init__(self, db: AsyncSession, model: type) -> None:
        self.db = db
        self.model = model

    async def load(self, principal_id: str) -> LockState | None:
        result = await self.db.execute(
            select(self.model.login_attempts, self.model.lock_until).where(
                self.model.id == principal_id
            )
        )
        row = result.one_or_none()
        if row is None:
            return None
        return LockState(attempts=row.login_attempts or 0, lock_until=row.lock_until)

    async def update_attempts(
        self, principal_id: str, expected: LockState, new: LockState
    ) -> bool:
        model = self.model
        if expected.lock_until is None:
            lock_matches = model.lock_until.is_(None)
        else:
            lock_matches = model.lock_until == expected.lock_until
        result = await self.db.execute(
            update(model)
            .where(
                model.id == principal_id,
                model.login_attempts == expected.attempts,
                lock_matches,
            )
            .values(login_attempts=new.attempts, lock_until=new.lock_until)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount == 1

    async def clear_attempts(self, principal_id: str) -> None:
        await self.db.execute(
            update(self.model)
            .where(self.model.id == principal_id)
            .values(login_attempts=0, lock_until=None)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

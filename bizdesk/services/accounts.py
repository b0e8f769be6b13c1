"""
Account creation and password changes shared by every principal kind.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.core.exceptions import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


async def find_by_email(db: AsyncSession, model: type, email: str) -> Any | None:
    result = await db.execute(select(model).where(model.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def get_or_404(db: AsyncSession, model: type, principal_id: str, label: str) -> Any:
    obj = await db.get(model, principal_id)
    if obj is None:
        raise NotFoundError(f"{label} not found")
    return obj


async def ensure_email_available(db: AsyncSession, model: type, email: str, label: str) -> None:
    if await find_by_email(db, model, email) is not None:
        raise ConflictError(f"{label} with this email already exists")


async def ensure_code_available(db: AsyncSession, column: Any, code: str, label: str) -> None:
    result = await db.execute(select(column).where(column == code))
    if result.first() is not None:
        raise ConflictError(f"{label} already exists")


async def next_sequential_code(
    db: AsyncSession,
    column: Any,
    prefix: str,
    now: datetime | None = None,
) -> str:
    """Next ``<prefix><yy><nnnn>`` code, e.g. ``ADM250007``."""
    year = (now or datetime.now(timezone.utc)).strftime("%y")
    stem = f"{prefix}{year}"
    result = await db.execute(
        select(column).where(column.like(f"{stem}%")).order_by(column.desc()).limit(1)
    )
    last = result.scalar_one_or_none()
    sequence = 1
    if last is not None:
        tail = last[-4:]
        if tail.isdigit():
            sequence = int(tail) + 1
    return f"{stem}{sequence:04d}"


async def create_account(db: AsyncSession, account: Any, password: str, label: str) -> Any:
    """Hash *password* onto *account* and persist it."""
    await account.set_password(password)
    db.add(account)
    try:
        await db.commit()
    except IntegrityError:
        # lost a race against a concurrent registration with the same email / code
        await db.rollback()
        raise ConflictError(f"{label} already exists") from None
    await db.refresh(account)
    logger.info("%s account created: %s", label, account.id)
    return account


async def change_password(
    db: AsyncSession, account: Any, current_password: str, new_password: str
) -> None:
    if not await account.check_password(current_password):
        raise ValidationError("Current password is incorrect")
    await account.set_password(new_password)
    await db.commit()
    logger.info("Password changed for account %s", account.id)


def apply_updates(obj: Any, values: dict[str, Any], fields: tuple[str, ...]) -> None:
    """Copy the present keys of *values* listed in *fields* onto *obj*.

    Model validators raise ``ValueError`` for out-of-vocabulary values; those
    surface as a 400, as does an explicit ``null`` for a NOT NULL column.
    """
    columns = sa_inspect(type(obj)).columns
    for name in fields:
        if name in values:
            if values[name] is None and not columns[name].nullable:
                message = f"{name} cannot be null"
                raise ValidationError(message, errors=[{"field": name, "message": message}])
            try:
                setattr(obj, name, values[name])
            except ValueError as exc:
                raise ValidationError(str(exc), errors=[{"field": name, "message": str(exc)}]) from exc

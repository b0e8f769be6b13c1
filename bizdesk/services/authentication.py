"""
Login flow and bearer-token gate for every principal kind.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.core.exceptions import AccountError, AccountErrorKind, AuthError, AuthErrorKind
from bizdesk.core.lockout import LockoutPolicy
from bizdesk.core.permissions import AuthContext
from bizdesk.core.security import TokenService
from bizdesk.services.credential_store import SqlCredentialStore
from bizdesk.services.principals import PrincipalKind, resolve_role

logger = logging.getLogger(__name__)


def issue_token(tokens: TokenService, kind: PrincipalKind, principal: Any) -> str:
    return tokens.issue(principal.id, principal.email, kind.role)


async def login(
    db: AsyncSession,
    kind: PrincipalKind,
    email: str,
    password: str,
    tokens: TokenService,
    policy: LockoutPolicy,
    now: datetime | None = None,
) -> tuple[Any, str]:
    """Verify credentials and return ``(principal, token)``.

    Checks run in a fixed order: lookup, lock, active flag, kind-specific
    checks (subscription, password age), then the password itself. Only a
    wrong password counts towards the lockout.
    """
    now = now or datetime.now(timezone.utc)
    model = kind.model
    result = await db.execute(
        select(model).where(model.email == email.strip().lower(), *kind.login_criteria)
    )
    principal = result.scalar_one_or_none()
    if principal is None:
        raise AccountError(AccountErrorKind.INVALID_CREDENTIALS)

    if principal.lock_state.is_locked(now):
        logger.info("Login refused for locked %s account %s", kind.role, principal.id)
        raise AccountError(AccountErrorKind.LOCKED)
    if not principal.is_active:
        raise AccountError(AccountErrorKind.DEACTIVATED)
    for check in kind.login_checks:
        check(principal, now)

    store = SqlCredentialStore(db, model)
    if not await principal.check_password(password):
        state = await policy.record_failure(store, principal.id, now)
        logger.info(
            "Failed %s login for %s (%d consecutive)", kind.role, principal.id, state.attempts
        )
        raise AccountError(AccountErrorKind.INVALID_CREDENTIALS)

    await policy.record_success(store, principal.id)
    principal.last_login = now
    await db.commit()
    await db.refresh(principal)
    logger.info("%s %s logged in", kind.role.capitalize(), principal.id)
    return principal, issue_token(tokens, kind, principal)


async def authenticate_token(
    db: AsyncSession,
    tokens: TokenService,
    token: str | None,
    now: datetime | None = None,
) -> AuthContext:
    """Resolve a bearer token to the live principal it names."""
    if not token:
        raise AuthError(AuthErrorKind.NO_TOKEN)
    claims = tokens.verify(token)
    kind = resolve_role(claims.get("role"))

    principal = await db.get(kind.model, str(claims["id"]))
    if principal is None or not principal.is_active:
        raise AccountError(AccountErrorKind.INACTIVE)

    now = now or datetime.now(timezone.utc)
    for check in kind.gate_checks:
        check(principal, now)

    return AuthContext(
        id=str(claims["id"]),
        role=claims["role"],
        principal=principal,
        email=claims.get("email"),
    )

"""
FastAPI dependencies: database session, bearer-token gate and authorization guards.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable, Coroutine
from typing import Any, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.core.exceptions import AppError
from bizdesk.core.lockout import LockoutPolicy
from bizdesk.core.permissions import (
    AuthContext,
    check_admin_level,
    check_module,
    check_permission,
    check_role,
)
from bizdesk.core.security import TokenService
from bizdesk.db.session import async_session_factory
from bizdesk.services.authentication import authenticate_token

# auto_error=False so a missing header reaches the gate and gets our own 401 body
bearer_scheme = HTTPBearer(auto_error=False)

Guard = Callable[..., Coroutine[Any, Any, AuthContext]]


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Application services ────────────────────────────────────────────
def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_lockout_policy(request: Request) -> LockoutPolicy:
    return request.app.state.lockout_policy


# ── Auth dependencies ───────────────────────────────────────────────
def _bearer_token(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthContext:
    """Resolve the bearer token to an active principal or fail the request."""
    return await authenticate_token(db, tokens, _bearer_token(credentials))


async def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[AuthContext]:
    """Like :func:`get_current_principal` but anonymous requests pass through as ``None``."""
    try:
        return await authenticate_token(db, tokens, _bearer_token(credentials))
    except AppError:
        return None


# ── Guards ──────────────────────────────────────────────────────────
def require_role(*roles: str) -> Guard:
    async def _guard(ctx: AuthContext = Depends(get_current_principal)) -> AuthContext:
        return check_role(ctx, roles)

    return _guard


def require_permission(capability: str) -> Guard:
    async def _guard(ctx: AuthContext = Depends(get_current_principal)) -> AuthContext:
        return check_permission(ctx, capability)

    return _guard


def require_admin_level(*levels: str) -> Guard:
    async def _guard(ctx: AuthContext = Depends(get_current_principal)) -> AuthContext:
        return check_admin_level(ctx, levels)

    return _guard


def require_module(module: str) -> Guard:
    async def _guard(ctx: AuthContext = Depends(get_current_principal)) -> AuthContext:
        return check_module(ctx, module)

    return _guard


require_admin = require_role("admin")
require_employee_or_admin = require_role("employee", "admin")
require_super_admin = require_admin_level("super_admin")


async def require_employee_manager(
    ctx: AuthContext = Depends(require_employee_or_admin),
) -> AuthContext:
    """Admins, or employees holding ``manage_employees``."""
    if ctx.role == "admin":
        return ctx
    return check_permission(ctx, "manage_employees")

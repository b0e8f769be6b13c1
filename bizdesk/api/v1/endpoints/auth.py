"""
Auth endpoints: per-kind registration and login, ``/me`` and logout.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.api.v1.deps import (
    get_current_principal,
    get_db,
    get_lockout_policy,
    get_token_service,
    require_super_admin,
)
from bizdesk.core.config import settings
from bizdesk.core.exceptions import ValidationError
from bizdesk.core.lockout import LockoutPolicy
from bizdesk.core.permissions import AuthContext
from bizdesk.core.security import TokenService
from bizdesk.models.client import Client
from bizdesk.models.user import User
from bizdesk.schemas.admin import AdminCreate
from bizdesk.schemas.auth import LoginRequest, MeData
from bizdesk.schemas.client import ClientRegister
from bizdesk.schemas.common import ApiResponse, MessageResponse
from bizdesk.schemas.employee import EmployeeCreate
from bizdesk.schemas.user import UserRegister
from bizdesk.services import authentication
from bizdesk.services.accounts import create_account, ensure_email_available
from bizdesk.services.principals import PRINCIPALS, resolve_role
from bizdesk.services.staff import provision_admin, provision_employee

# Rate limiter, keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

AuthResponse = ApiResponse[dict[str, Any]]


def _auth_payload(role: str, principal: Any, token: str, message: str) -> AuthResponse:
    kind = PRINCIPALS[role]
    return AuthResponse(message=message, data={kind.label: kind.serialize(principal), "token": token})


def _require_code(value: str | None, field: str, label: str) -> None:
    if not value:
        message = f"{label} is required"
        raise ValidationError("Validation failed", errors=[{"field": field, "message": message}])


async def _login(
    role: str,
    body: LoginRequest,
    db: AsyncSession,
    tokens: TokenService,
    policy: LockoutPolicy,
) -> AuthResponse:
    principal, token = await authentication.login(
        db, PRINCIPALS[role], body.email, body.password, tokens, policy
    )
    return _auth_payload(role, principal, token, "Login successful")


# ── Users & vendors ─────────────────────────────────────────────────
@router.post("/user/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register_user(
    request: Request,
    body: UserRegister,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthResponse:
    await ensure_email_available(db, User, body.email, "User")
    user = User(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        phone_number=body.phone_number,
        role=body.role,
    )
    user = await create_account(db, user, body.password, "User")
    token = authentication.issue_token(tokens, PRINCIPALS[user.role], user)
    return _auth_payload(user.role, user, token, "User registered successfully")


@router.post("/user/login", response_model=AuthResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login_user(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    policy: LockoutPolicy = Depends(get_lockout_policy),
) -> AuthResponse:
    return await _login("user", body, db, tokens, policy)


@router.post("/vendor/login", response_model=AuthResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login_vendor(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    policy: LockoutPolicy = Depends(get_lockout_policy),
) -> AuthResponse:
    return await _login("vendor", body, db, tokens, policy)


# ── Clients ─────────────────────────────────────────────────────────
@router.post("/client/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register_client(
    request: Request,
    body: ClientRegister,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthResponse:
    await ensure_email_available(db, Client, body.email, "Client")
    contact = body.contact_person
    client = Client(
        email=body.email,
        company_name=body.company_name,
        contact_first_name=contact.first_name,
        contact_last_name=contact.last_name,
        contact_phone_number=contact.phone_number,
        contact_position=contact.position,
        address=body.address.model_dump(by_alias=True) if body.address else None,
        business_info=body.business_info.model_dump(by_alias=True) if body.business_info else None,
    )
    client = await create_account(db, client, body.password, "Client")
    token = authentication.issue_token(tokens, PRINCIPALS["client"], client)
    return _auth_payload("client", client, token, "Client registered successfully")


@router.post("/client/login", response_model=AuthResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login_client(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    policy: LockoutPolicy = Depends(get_lockout_policy),
) -> AuthResponse:
    return await _login("client", body, db, tokens, policy)


# ── Employees ───────────────────────────────────────────────────────
@router.post("/employee/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register_employee(
    request: Request,
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthResponse:
    _require_code(body.employee_id, "employeeId", "Employee ID")
    employee = await provision_employee(db, body)
    token = authentication.issue_token(tokens, PRINCIPALS["employee"], employee)
    return _auth_payload("employee", employee, token, "Employee registered successfully")


@router.post("/employee/login", response_model=AuthResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login_employee(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    policy: LockoutPolicy = Depends(get_lockout_policy),
) -> AuthResponse:
    return await _login("employee", body, db, tokens, policy)


# ── Admins ──────────────────────────────────────────────────────────
@router.post("/admin/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register_admin(
    request: Request,
    body: AdminCreate,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    ctx: AuthContext = Depends(require_super_admin),
) -> AuthResponse:
    """Register an admin (super_admin only)."""
    _require_code(body.admin_id, "adminId", "Admin ID")
    admin = await provision_admin(db, body)
    logger.info("Admin %s registered by %s", admin.id, ctx.id)
    token = authentication.issue_token(tokens, PRINCIPALS["admin"], admin)
    return _auth_payload("admin", admin, token, "Admin registered successfully")


@router.post("/admin/login", response_model=AuthResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login_admin(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    policy: LockoutPolicy = Depends(get_lockout_policy),
) -> AuthResponse:
    return await _login("admin", body, db, tokens, policy)


# ── Session ─────────────────────────────────────────────────────────
@router.get("/me", response_model=ApiResponse[MeData])
async def read_current_principal(
    ctx: AuthContext = Depends(get_current_principal),
) -> ApiResponse[MeData]:
    """Return the profile of whoever holds the token."""
    kind = resolve_role(ctx.role)
    return ApiResponse[MeData](data=MeData(user=kind.serialize(ctx.principal), role=ctx.role))


@router.post("/logout", response_model=MessageResponse)
async def logout(_ctx: AuthContext = Depends(get_current_principal)) -> MessageResponse:
    """Tokens are stateless; the client discards its copy."""
    return MessageResponse(message="Logged out successfully")

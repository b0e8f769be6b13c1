"""
Admin self-service and admin management endpoints.

Management routes require the ``super_admin`` admin level. A super admin can
neither be demoted nor deleted through the API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.api.v1.deps import get_db, require_admin, require_super_admin
from bizdesk.core.exceptions import ValidationError
from bizdesk.core.permissions import AuthContext
from bizdesk.models.admin import Admin
from bizdesk.schemas.admin import AdminCreate, AdminRead, AdminUpdate
from bizdesk.schemas.auth import ChangePasswordRequest
from bizdesk.schemas.common import ApiResponse, MessageResponse
from bizdesk.schemas.user import ProfileUpdate
from bizdesk.services.accounts import apply_updates, change_password, get_or_404
from bizdesk.services.credential_store import SqlCredentialStore
from bizdesk.services.staff import provision_admin

router = APIRouter(prefix="/admins", tags=["admins"])
logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "phone_number", "avatar")
MANAGED_FIELDS = PROFILE_FIELDS + (
    "department",
    "position",
    "admin_level",
    "access_level",
    "salary",
    "is_active",
    "session_timeout",
    "password_expiry_days",
    "allowed_modules",
    "permissions",
)


# ── Self-service ────────────────────────────────────────────────────
@router.get("/profile", response_model=ApiResponse[AdminRead])
async def read_profile(ctx: AuthContext = Depends(require_admin)) -> ApiResponse[AdminRead]:
    return ApiResponse[AdminRead](data=AdminRead.model_validate(ctx.principal))


@router.put("/profile", response_model=ApiResponse[AdminRead])
async def update_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
) -> ApiResponse[AdminRead]:
    admin = ctx.principal
    apply_updates(admin, body.model_dump(exclude_unset=True), PROFILE_FIELDS)
    await db.commit()
    await db.refresh(admin)
    return ApiResponse[AdminRead](
        message="Profile updated successfully",
        data=AdminRead.model_validate(admin),
    )


@router.put("/change-password", response_model=MessageResponse)
async def update_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
) -> MessageResponse:
    await change_password(db, ctx.principal, body.current_password, body.new_password)
    return MessageResponse(message="Password changed successfully")


# ── Management (super_admin) ────────────────────────────────────────
@router.get("", response_model=ApiResponse[list[AdminRead]])
async def list_admins(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    admin_level: Optional[str] = Query(None, alias="adminLevel"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_super_admin),
) -> ApiResponse[list[AdminRead]]:
    stmt = select(Admin)
    if admin_level:
        stmt = stmt.where(Admin.admin_level == admin_level)
    if is_active is not None:
        stmt = stmt.where(Admin.is_active == is_active)
    stmt = stmt.order_by(Admin.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(stmt)
    return ApiResponse[list[AdminRead]](
        data=[AdminRead.model_validate(a) for a in result.scalars().all()]
    )


@router.post("", response_model=ApiResponse[AdminRead], status_code=status.HTTP_201_CREATED)
async def create_admin(
    body: AdminCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_super_admin),
) -> ApiResponse[AdminRead]:
    """Provision an admin with the default permissions and modules of its tiers."""
    admin = await provision_admin(db, body)
    logger.info("Admin %s provisioned by %s", admin.admin_id, ctx.id)
    return ApiResponse[AdminRead](
        message="Admin created successfully",
        data=AdminRead.model_validate(admin),
    )


@router.get("/{admin_id}", response_model=ApiResponse[AdminRead])
async def read_admin(
    admin_id: str,
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_super_admin),
) -> ApiResponse[AdminRead]:
    admin = await get_or_404(db, Admin, admin_id, "Admin")
    return ApiResponse[AdminRead](data=AdminRead.model_validate(admin))


@router.put("/{admin_id}", response_model=ApiResponse[AdminRead])
async def update_admin(
    admin_id: str,
    body: AdminUpdate,
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_super_admin),
) -> ApiResponse[AdminRead]:
    admin = await get_or_404(db, Admin, admin_id, "Admin")
    values = body.model_dump(exclude_unset=True)
    new_level = values.get("admin_level")
    if admin.is_super_admin and new_level is not None and new_level != "super_admin":
        raise ValidationError("Cannot demote a super admin")
    apply_updates(admin, values, MANAGED_FIELDS)
    await db.commit()
    await db.refresh(admin)
    return ApiResponse[AdminRead](
        message="Admin updated successfully",
        data=AdminRead.model_validate(admin),
    )


@router.delete("/{admin_id}", response_model=MessageResponse)
async def delete_admin(
    admin_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_super_admin),
) -> MessageResponse:
    admin = await get_or_404(db, Admin, admin_id, "Admin")
    if admin.id == ctx.id:
        raise ValidationError("You cannot delete your own account")
    if admin.is_super_admin:
        raise ValidationError("Cannot delete a super admin")
    await db.delete(admin)
    await db.commit()
    logger.info("Admin %s deleted by %s", admin_id, ctx.id)
    return MessageResponse(message="Admin deleted successfully")


@router.post("/{admin_id}/unlock", response_model=ApiResponse[AdminRead])
async def unlock_admin(
    admin_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_super_admin),
) -> ApiResponse[AdminRead]:
    admin = await get_or_404(db, Admin, admin_id, "Admin")
    await SqlCredentialStore(db, Admin).clear_attempts(admin.id)
    await db.refresh(admin)
    logger.info("Admin %s unlocked by %s", admin_id, ctx.id)
    return ApiResponse[AdminRead](
        message="Admin account unlocked",
        data=AdminRead.model_validate(admin),
    )

"""
Self-service profile endpoints for users and vendors.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.api.v1.deps import get_db, require_role
from bizdesk.core.permissions import AuthContext
from bizdesk.schemas.auth import ChangePasswordRequest
from bizdesk.schemas.common import ApiResponse, MessageResponse
from bizdesk.schemas.user import ProfileUpdate, UserRead
from bizdesk.services.accounts import apply_updates, change_password

router = APIRouter(prefix="/user", tags=["user"])

require_user = require_role("user", "vendor")

PROFILE_FIELDS = ("first_name", "last_name", "phone_number", "avatar")


@router.get("/profile", response_model=ApiResponse[UserRead])
async def read_profile(ctx: AuthContext = Depends(require_user)) -> ApiResponse[UserRead]:
    return ApiResponse[UserRead](data=UserRead.model_validate(ctx.principal))


@router.put("/profile", response_model=ApiResponse[UserRead])
async def update_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_user),
) -> ApiResponse[UserRead]:
    user = ctx.principal
    apply_updates(user, body.model_dump(exclude_unset=True), PROFILE_FIELDS)
    await db.commit()
    await db.refresh(user)
    return ApiResponse[UserRead](
        message="Profile updated successfully",
        data=UserRead.model_validate(user),
    )


@router.put("/change-password", response_model=MessageResponse)
async def update_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_user),
) -> MessageResponse:
    await change_password(db, ctx.principal, body.current_password, body.new_password)
    return MessageResponse(message="Password changed successfully")

"""
Employee self-service and employee management endpoints.

- ``/profile`` and ``/change-password`` are for the employee holding the token.
- Management routes are open to admins and to employees holding the
  ``manage_employees`` permission. Changing an employee's role, permissions
  or active flag still needs an admin token.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.api.v1.deps import get_db, require_employee_manager, require_role
from bizdesk.core.exceptions import AuthorizationError, AuthorizationErrorKind, ValidationError
from bizdesk.core.permissions import AuthContext
from bizdesk.models.employee import Employee
from bizdesk.schemas.auth import ChangePasswordRequest
from bizdesk.schemas.common import ApiResponse, MessageResponse
from bizdesk.schemas.employee import EmployeeCreate, EmployeeRead, EmployeeUpdate
from bizdesk.schemas.user import ProfileUpdate
from bizdesk.services.accounts import apply_updates, change_password, get_or_404
from bizdesk.services.credential_store import SqlCredentialStore
from bizdesk.services.staff import provision_employee

router = APIRouter(prefix="/employees", tags=["employees"])
logger = logging.getLogger(__name__)

require_employee = require_role("employee")

PROFILE_FIELDS = ("first_name", "last_name", "phone_number", "avatar")
MANAGED_FIELDS = PROFILE_FIELDS + (
    "department",
    "position",
    "role",
    "salary",
    "is_active",
    "permissions",
)
# access-control fields only an admin token may change
ADMIN_ONLY_FIELDS = ("role", "permissions", "is_active")


# ── Self-service ────────────────────────────────────────────────────
@router.get("/profile", response_model=ApiResponse[EmployeeRead])
async def read_profile(ctx: AuthContext = Depends(require_employee)) -> ApiResponse[EmployeeRead]:
    return ApiResponse[EmployeeRead](data=EmployeeRead.model_validate(ctx.principal))


@router.put("/profile", response_model=ApiResponse[EmployeeRead])
async def update_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_employee),
) -> ApiResponse[EmployeeRead]:
    employee = ctx.principal
    apply_updates(employee, body.model_dump(exclude_unset=True), PROFILE_FIELDS)
    await db.commit()
    await db.refresh(employee)
    return ApiResponse[EmployeeRead](
        message="Profile updated successfully",
        data=EmployeeRead.model_validate(employee),
    )


@router.put("/change-password", response_model=MessageResponse)
async def update_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_employee),
) -> MessageResponse:
    await change_password(db, ctx.principal, body.current_password, body.new_password)
    return MessageResponse(message="Password changed successfully")


# ── Management ──────────────────────────────────────────────────────
@router.get("", response_model=ApiResponse[list[EmployeeRead]])
async def list_employees(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    department: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_employee_manager),
) -> ApiResponse[list[EmployeeRead]]:
    stmt = select(Employee)
    if department:
        stmt = stmt.where(Employee.department == department)
    if role:
        stmt = stmt.where(Employee.role == role)
    if is_active is not None:
        stmt = stmt.where(Employee.is_active == is_active)
    stmt = stmt.order_by(Employee.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(stmt)
    employees = result.scalars().all()
    return ApiResponse[list[EmployeeRead]](
        data=[EmployeeRead.model_validate(e) for e in employees]
    )


@router.post("", response_model=ApiResponse[EmployeeRead], status_code=status.HTTP_201_CREATED)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_employee_manager),
) -> ApiResponse[EmployeeRead]:
    """Provision an employee; ``employeeId`` is generated when omitted."""
    employee = await provision_employee(db, body)
    logger.info("Employee %s provisioned by %s %s", employee.employee_id, ctx.role, ctx.id)
    return ApiResponse[EmployeeRead](
        message="Employee created successfully",
        data=EmployeeRead.model_validate(employee),
    )


@router.get("/{employee_id}", response_model=ApiResponse[EmployeeRead])
async def read_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_employee_manager),
) -> ApiResponse[EmployeeRead]:
    employee = await get_or_404(db, Employee, employee_id, "Employee")
    return ApiResponse[EmployeeRead](data=EmployeeRead.model_validate(employee))


@router.put("/{employee_id}", response_model=ApiResponse[EmployeeRead])
async def update_employee(
    employee_id: str,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_employee_manager),
) -> ApiResponse[EmployeeRead]:
    employee = await get_or_404(db, Employee, employee_id, "Employee")
    values = body.model_dump(exclude_unset=True)
    if ctx.role != "admin" and any(name in values for name in ADMIN_ONLY_FIELDS):
        raise AuthorizationError(
            AuthorizationErrorKind.FORBIDDEN,
            "Only admins can change role, permissions or active status",
        )
    apply_updates(employee, values, MANAGED_FIELDS)
    await db.commit()
    await db.refresh(employee)
    return ApiResponse[EmployeeRead](
        message="Employee updated successfully",
        data=EmployeeRead.model_validate(employee),
    )


@router.delete("/{employee_id}", response_model=MessageResponse)
async def delete_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_employee_manager),
) -> MessageResponse:
    employee = await get_or_404(db, Employee, employee_id, "Employee")
    if ctx.role == "employee" and ctx.id == employee.id:
        raise ValidationError("You cannot delete your own account")
    await db.delete(employee)
    await db.commit()
    logger.info("Employee %s deleted by %s %s", employee_id, ctx.role, ctx.id)
    return MessageResponse(message="Employee deleted successfully")


@router.post("/{employee_id}/unlock", response_model=ApiResponse[EmployeeRead])
async def unlock_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_employee_manager),
) -> ApiResponse[EmployeeRead]:
    employee = await get_or_404(db, Employee, employee_id, "Employee")
    await SqlCredentialStore(db, Employee).clear_attempts(employee.id)
    await db.refresh(employee)
    logger.info("Employee %s unlocked by %s %s", employee_id, ctx.role, ctx.id)
    return ApiResponse[EmployeeRead](
        message="Employee account unlocked",
        data=EmployeeRead.model_validate(employee),
    )

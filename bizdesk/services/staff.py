"""
Provisioning of employee and admin accounts with their default tiers.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.core.permissions import (
    default_admin_permissions,
    default_employee_permissions,
    default_modules,
)
from bizdesk.models.admin import Admin
from bizdesk.models.employee import Employee
from bizdesk.schemas.admin import AdminCreate
from bizdesk.schemas.employee import EmployeeCreate
from bizdesk.services.accounts import (
    create_account,
    ensure_code_available,
    ensure_email_available,
    next_sequential_code,
)

EMPLOYEE_CODE_PREFIX = "EMP"
ADMIN_CODE_PREFIX = "ADM"


async def provision_employee(db: AsyncSession, body: EmployeeCreate) -> Employee:
    """Create an employee holding the default permissions of its role.

    A missing ``employee_id`` is generated as ``EMP<yy><nnnn>``.
    """
    await ensure_email_available(db, Employee, body.email, "Employee")
    if body.employee_id:
        await ensure_code_available(db, Employee.employee_id, body.employee_id, "Employee ID")
        code = body.employee_id
    else:
        code = await next_sequential_code(db, Employee.employee_id, EMPLOYEE_CODE_PREFIX)

    employee = Employee(
        email=body.email,
        employee_id=code,
        first_name=body.first_name,
        last_name=body.last_name,
        phone_number=body.phone_number,
        department=body.department,
        position=body.position,
        role=body.role,
        salary=body.salary,
        permissions=default_employee_permissions(body.role),
    )
    if body.hire_date is not None:
        employee.hire_date = body.hire_date
    return await create_account(db, employee, body.password, "Employee")


async def provision_admin(db: AsyncSession, body: AdminCreate) -> Admin:
    """Create an admin with permissions from its level and modules from its access level."""
    await ensure_email_available(db, Admin, body.email, "Admin")
    if body.admin_id:
        await ensure_code_available(db, Admin.admin_id, body.admin_id, "Admin ID")
        code = body.admin_id
    else:
        code = await next_sequential_code(db, Admin.admin_id, ADMIN_CODE_PREFIX)

    admin = Admin(
        email=body.email,
        admin_id=code,
        first_name=body.first_name,
        last_name=body.last_name,
        phone_number=body.phone_number,
        department=body.department,
        position=body.position,
        admin_level=body.admin_level,
        access_level=body.access_level,
        salary=body.salary,
        permissions=default_admin_permissions(body.admin_level),
        allowed_modules=default_modules(body.access_level),
    )
    if body.hire_date is not None:
        admin.hire_date = body.hire_date
    return await create_account(db, admin, body.password, "Admin")

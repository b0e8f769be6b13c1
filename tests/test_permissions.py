"""Tests for permission vocabularies, default tiers and authorization guards."""

import pytest

from bizdesk.api.v1.deps import require_admin_level, require_module, require_permission, require_role
from bizdesk.core.exceptions import AuthorizationError, AuthorizationErrorKind
from bizdesk.core.permissions import (
    ADMIN_PERMISSIONS,
    DEFAULT_ADMIN_PERMISSIONS,
    DEFAULT_EMPLOYEE_PERMISSIONS,
    DEFAULT_MODULES,
    EMPLOYEE_PERMISSIONS,
    MODULES,
    AuthContext,
    check_permission,
    check_role,
    default_admin_permissions,
    default_employee_permissions,
    default_modules,
    validate_choices,
)
from bizdesk.models.admin import Admin
from bizdesk.models.employee import Employee
from bizdesk.models.user import User


# ── Tiers ───────────────────────────────────────────────────────────
def test_employee_tier_is_exact():
    assert default_employee_permissions("employee") == [
        "view_dashboard",
        "view_customers",
        "view_products",
        "create_sales",
        "view_reports",
    ]


def test_manager_admin_tier_is_exact():
    assert default_admin_permissions("manager") == [
        "view_dashboard",
        "manage_customers",
        "manage_products",
        "manage_sales",
        "manage_inventory",
        "view_reports",
        "create_sales",
        "edit_sales",
        "delete_sales",
        "create_customers",
        "edit_customers",
        "delete_customers",
        "create_products",
        "edit_products",
        "delete_products",
        "manage_employees",
        "view_advanced_analytics",
        "export_data",
        "generate_reports",
    ]


def test_admin_tiers_nest():
    manager = set(DEFAULT_ADMIN_PERMISSIONS["manager"])
    admin = set(DEFAULT_ADMIN_PERMISSIONS["admin"])
    super_admin = set(DEFAULT_ADMIN_PERMISSIONS["super_admin"])
    assert manager < admin < super_admin


def test_module_tiers_nest():
    read_only = set(DEFAULT_MODULES["read_only"])
    limited = set(DEFAULT_MODULES["limited_access"])
    full = set(DEFAULT_MODULES["full_access"])
    assert read_only < limited < full
    assert full == set(MODULES)


def test_tiers_stay_inside_vocabularies():
    for perms in DEFAULT_EMPLOYEE_PERMISSIONS.values():
        assert set(perms) <= set(EMPLOYEE_PERMISSIONS)
    for perms in DEFAULT_ADMIN_PERMISSIONS.values():
        assert set(perms) <= set(ADMIN_PERMISSIONS)
        assert len(perms) == len(set(perms))
    assert set(EMPLOYEE_PERMISSIONS) <= set(ADMIN_PERMISSIONS)


def test_unknown_tier_keys_fall_back():
    assert default_employee_permissions("intern") == DEFAULT_EMPLOYEE_PERMISSIONS["employee"]
    assert default_admin_permissions(None) == DEFAULT_ADMIN_PERMISSIONS["admin"]
    assert default_modules("everything") == DEFAULT_MODULES["limited_access"]


def test_tier_lookups_return_copies():
    perms = default_employee_permissions("employee")
    perms.append("manage_settings")
    assert "manage_settings" not in DEFAULT_EMPLOYEE_PERMISSIONS["employee"]


def test_validate_choices_dedupes_and_rejects():
    assert validate_choices(["view_reports", "view_reports"], EMPLOYEE_PERMISSIONS, "permission") == [
        "view_reports"
    ]
    with pytest.raises(ValueError, match="Invalid permission"):
        validate_choices(["fly"], EMPLOYEE_PERMISSIONS, "permission")


# ── Decisions ───────────────────────────────────────────────────────
def _employee_ctx(permissions):
    employee = Employee(
        email="ann@example.com",
        employee_id="EMP0001",
        first_name="Ann",
        last_name="Lee",
        department="Sales",
        position="Rep",
        role="employee",
        permissions=permissions,
    )
    return AuthContext(id="e1", role="employee", principal=employee)


def test_no_context_is_unauthenticated():
    with pytest.raises(AuthorizationError) as exc:
        check_role(None, ("admin",))
    assert exc.value.status_code == 401
    with pytest.raises(AuthorizationError) as exc:
        check_permission(None, "view_reports")
    assert exc.value.kind is AuthorizationErrorKind.UNAUTHENTICATED


@pytest.mark.asyncio
async def test_require_role():
    guard = require_role("admin", "employee")
    ctx = _employee_ctx([])
    assert await guard(ctx) is ctx

    user_ctx = AuthContext(id="u1", role="user", principal=User(email="u@example.com"))
    with pytest.raises(AuthorizationError) as exc:
        await guard(user_ctx)
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_require_permission_follows_add_and_remove():
    guard = require_permission("manage_products")
    ctx = _employee_ctx(default_employee_permissions("employee"))

    with pytest.raises(AuthorizationError) as exc:
        await guard(ctx)
    assert exc.value.status_code == 403

    ctx.principal.add_permission("manage_products")
    assert await guard(ctx) is ctx

    ctx.principal.remove_permission("manage_products")
    with pytest.raises(AuthorizationError):
        await guard(ctx)


@pytest.mark.asyncio
async def test_users_hold_no_permissions():
    ctx = AuthContext(id="u1", role="user", principal=User(email="u@example.com"))
    with pytest.raises(AuthorizationError):
        await require_permission("view_dashboard")(ctx)


def _admin_ctx(admin_level, access_level):
    admin = Admin(
        email="boss@example.com",
        admin_id="ADM0001",
        first_name="Big",
        last_name="Boss",
        department="IT",
        position="Head",
        admin_level=admin_level,
        access_level=access_level,
        permissions=default_admin_permissions(admin_level),
        allowed_modules=default_modules(access_level),
    )
    return AuthContext(id="a1", role="admin", principal=admin)


@pytest.mark.asyncio
async def test_require_admin_level():
    guard = require_admin_level("super_admin")
    assert await guard(_admin_ctx("super_admin", "full_access"))
    with pytest.raises(AuthorizationError) as exc:
        await guard(_admin_ctx("manager", "full_access"))
    assert exc.value.status_code == 403
    with pytest.raises(AuthorizationError):
        await guard(_employee_ctx([]))


@pytest.mark.asyncio
async def test_require_module():
    ctx = _admin_ctx("admin", "read_only")
    assert await require_module("sales")(ctx) is ctx
    with pytest.raises(AuthorizationError) as exc:
        await require_module("billing")(ctx)
    assert "billing" in exc.value.message


def test_admin_helpers():
    ctx = _admin_ctx("super_admin", "full_access")
    admin = ctx.principal
    assert admin.is_super_admin
    assert admin.has_full_access
    assert admin.can_access_module("content_management")
    assert admin.has_permission("manage_admins")
    admin.remove_permission("manage_admins")
    assert not admin.has_permission("manage_admins")
    with pytest.raises(ValueError):
        admin.add_permission("fly")

"""
Permission / module vocabularies, default tiers and authorization decisions.

The tier tables are fixed lookups: an admin's default permissions follow its
admin level, an employee's follow its role, and an admin's allowed modules
follow its access level.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from bizdesk.core.exceptions import AuthorizationError, AuthorizationErrorKind

# ── Roles ───────────────────────────────────────────────────────────
USER_ROLES = ("user", "vendor")
TOKEN_ROLES = ("user", "vendor", "client", "employee", "admin")
EMPLOYEE_ROLES = ("employee", "supervisor", "manager", "admin")
ADMIN_LEVELS = ("admin", "manager", "super_admin")
ACCESS_LEVELS = ("full_access", "limited_access", "read_only")

# ── Vocabularies ────────────────────────────────────────────────────
EMPLOYEE_PERMISSIONS: tuple[str, ...] = (
    "view_dashboard",
    "manage_customers",
    "manage_products",
    "manage_sales",
    "manage_inventory",
    "manage_reports",
    "manage_employees",
    "manage_settings",
    "view_reports",
    "create_sales",
    "edit_sales",
    "delete_sales",
    "view_customers",
    "create_customers",
    "edit_customers",
    "delete_customers",
    "view_products",
    "create_products",
    "edit_products",
    "delete_products",
)

ADMIN_PERMISSIONS: tuple[str, ...] = (
    # System management
    "manage_system_settings",
    "manage_database",
    "manage_backups",
    "manage_security",
    "view_system_logs",
    "manage_api_keys",
    # User management
    "manage_all_users",
    "manage_employees",
    "manage_clients",
    "manage_admins",
    "view_user_logs",
    "reset_user_passwords",
    "suspend_users",
    "delete_users",
    # Business management
    "manage_business_settings",
    "manage_company_info",
    "manage_billing",
    "manage_subscriptions",
    "view_financial_reports",
    "manage_tax_settings",
    # Content management
    "manage_content",
    "manage_templates",
    "manage_notifications",
    "manage_announcements",
    "manage_help_docs",
    # Advanced analytics
    "view_advanced_analytics",
    "export_data",
    "generate_reports",
    "view_audit_logs",
    "manage_dashboards",
) + tuple(p for p in EMPLOYEE_PERMISSIONS if p != "manage_employees")

MODULES: tuple[str, ...] = (
    "dashboard",
    "customers",
    "products",
    "sales",
    "inventory",
    "employees",
    "reports",
    "settings",
    "analytics",
    "admin_panel",
    "system_settings",
    "user_management",
    "billing",
    "content_management",
)

SUBSCRIPTION_FEATURES = (
    "basic_features",
    "advanced_analytics",
    "custom_branding",
    "priority_support",
    "api_access",
)

# ── Default tiers ───────────────────────────────────────────────────
_EMPLOYEE_MANAGER = [
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
]

_EMPLOYEE_ADMIN = [
    "view_dashboard",
    "manage_customers",
    "manage_products",
    "manage_sales",
    "manage_inventory",
    "manage_reports",
    "manage_employees",
    "manage_settings",
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
]

DEFAULT_EMPLOYEE_PERMISSIONS: dict[str, list[str]] = {
    "employee": [
        "view_dashboard",
        "view_customers",
        "view_products",
        "create_sales",
        "view_reports",
    ],
    "supervisor": [
        "view_dashboard",
        "manage_customers",
        "view_products",
        "manage_sales",
        "view_reports",
        "edit_sales",
        "create_customers",
        "edit_customers",
    ],
    "manager": _EMPLOYEE_MANAGER,
    "admin": _EMPLOYEE_ADMIN,
}

_ANALYTICS = ["view_advanced_analytics", "export_data", "generate_reports"]

_ADMIN_ADMIN = _EMPLOYEE_ADMIN + _ANALYTICS + [
    "manage_business_settings",
    "manage_company_info",
    "view_financial_reports",
    "manage_content",
    "manage_notifications",
    "manage_announcements",
]

DEFAULT_ADMIN_PERMISSIONS: dict[str, list[str]] = {
    "manager": _EMPLOYEE_MANAGER + ["manage_employees"] + _ANALYTICS,
    "admin": _ADMIN_ADMIN,
    "super_admin": _EMPLOYEE_ADMIN
    + _ANALYTICS
    + [
        "view_audit_logs",
        "manage_dashboards",
        "manage_business_settings",
        "manage_company_info",
        "view_financial_reports",
        "manage_content",
        "manage_notifications",
        "manage_announcements",
        "manage_system_settings",
        "manage_database",
        "manage_backups",
        "manage_security",
        "view_system_logs",
        "manage_api_keys",
        "manage_all_users",
        "manage_clients",
        "manage_admins",
        "view_user_logs",
        "reset_user_passwords",
        "suspend_users",
        "delete_users",
        "manage_billing",
        "manage_subscriptions",
        "manage_tax_settings",
        "manage_templates",
        "manage_help_docs",
    ],
}

_READ_ONLY_MODULES = ["dashboard", "customers", "products", "sales", "inventory", "reports"]

DEFAULT_MODULES: dict[str, list[str]] = {
    "read_only": _READ_ONLY_MODULES,
    "limited_access": [
        "dashboard",
        "customers",
        "products",
        "sales",
        "inventory",
        "employees",
        "reports",
        "settings",
        "analytics",
    ],
    "full_access": list(MODULES),
}


def default_employee_permissions(role: str | None) -> list[str]:
    return list(DEFAULT_EMPLOYEE_PERMISSIONS.get(role or "", DEFAULT_EMPLOYEE_PERMISSIONS["employee"]))


def default_admin_permissions(admin_level: str | None) -> list[str]:
    return list(DEFAULT_ADMIN_PERMISSIONS.get(admin_level or "", DEFAULT_ADMIN_PERMISSIONS["admin"]))


def default_modules(access_level: str | None) -> list[str]:
    return list(DEFAULT_MODULES.get(access_level or "", DEFAULT_MODULES["limited_access"]))


def validate_choices(values: Iterable[str], allowed: Iterable[str], label: str) -> list[str]:
    """Return *values* as a de-duplicated list, rejecting anything outside *allowed*."""
    allowed_set = set(allowed)
    result: list[str] = []
    for value in values:
        if value not in allowed_set:
            raise ValueError(f"Invalid {label}: {value!r}")
        if value not in result:
            result.append(value)
    return result


# ── Decisions ───────────────────────────────────────────────────────
@dataclass
class AuthContext:
    """Authenticated principal attached to a request."""

    id: str
    role: str
    principal: Any
    email: str | None = None

    @property
    def permissions(self) -> list[str]:
        return list(getattr(self.principal, "permissions", None) or [])


def check_role(ctx: AuthContext | None, allowed: Iterable[str]) -> AuthContext:
    if ctx is None:
        raise AuthorizationError(AuthorizationErrorKind.UNAUTHENTICATED)
    if ctx.role not in set(allowed):
        raise AuthorizationError(AuthorizationErrorKind.FORBIDDEN)
    return ctx


def check_permission(ctx: AuthContext | None, capability: str) -> AuthContext:
    if ctx is None:
        raise AuthorizationError(AuthorizationErrorKind.UNAUTHENTICATED)
    if capability not in ctx.permissions:
        raise AuthorizationError(
            AuthorizationErrorKind.FORBIDDEN,
            f"Access denied, missing permission: {capability}",
        )
    return ctx


def check_admin_level(ctx: AuthContext | None, levels: Iterable[str]) -> AuthContext:
    ctx = check_role(ctx, ("admin",))
    if getattr(ctx.principal, "admin_level", None) not in set(levels):
        raise AuthorizationError(
            AuthorizationErrorKind.FORBIDDEN,
            "Access denied, insufficient admin level",
        )
    return ctx


def check_module(ctx: AuthContext | None, module: str) -> AuthContext:
    ctx = check_role(ctx, ("admin",))
    if module not in (getattr(ctx.principal, "allowed_modules", None) or []):
        raise AuthorizationError(
            AuthorizationErrorKind.FORBIDDEN,
            f"Access denied, module not allowed: {module}",
        )
    return ctx

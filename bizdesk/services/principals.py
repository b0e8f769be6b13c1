"""
Principal registry: one table mapping a token role to its store and checks.

Adding a principal kind means adding one ``PrincipalKind`` entry here; the
login flow, the token gate and ``/auth/me`` all dispatch through
:func:`resolve_role`.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel
from sqlalchemy import ColumnElement

from bizdesk.core.exceptions import (
    AccountError,
    AccountErrorKind,
    AuthError,
    AuthErrorKind,
    SubscriptionError,
)
from bizdesk.models.admin import Admin
from bizdesk.models.client import Client
from bizdesk.models.employee import Employee
from bizdesk.models.user import User
from bizdesk.schemas.admin import AdminRead
from bizdesk.schemas.client import ClientRead
from bizdesk.schemas.employee import EmployeeRead
from bizdesk.schemas.user import UserRead

Check = Callable[[Any, datetime], None]


def require_subscription(principal: Client, now: datetime) -> None:
    if not principal.subscription_active_at(now):
        raise SubscriptionError()


def require_unlocked(principal: Any, now: datetime) -> None:
    if principal.lock_state.is_locked(now):
        raise AccountError(AccountErrorKind.LOCKED)


def require_fresh_password(principal: Admin, now: datetime) -> None:
    if principal.password_expired_at(now):
        raise AccountError(AccountErrorKind.PASSWORD_EXPIRED)


@dataclass(frozen=True)
class PrincipalKind:
    role: str
    model: type
    read_schema: type[BaseModel]
    # key of the record in login / register response bodies
    label: str
    # run at login after the lock and active checks, before the password check
    login_checks: tuple[Check, ...] = ()
    # run by the token gate on every authenticated request
    gate_checks: tuple[Check, ...] = ()
    login_criteria: tuple[ColumnElement[bool], ...] = ()

    def serialize(self, principal: Any) -> dict[str, Any]:
        return self.read_schema.model_validate(principal).model_dump(by_alias=True, mode="json")


PRINCIPALS: dict[str, PrincipalKind] = {
    "user": PrincipalKind("user", User, UserRead, "user"),
    "vendor": PrincipalKind(
        "vendor",
        User,
        UserRead,
        "user",
        login_criteria=(User.role == "vendor",),
    ),
    "client": PrincipalKind(
        "client",
        Client,
        ClientRead,
        "client",
        login_checks=(require_subscription,),
        gate_checks=(require_subscription,),
    ),
    "employee": PrincipalKind(
        "employee",
        Employee,
        EmployeeRead,
        "employee",
        gate_checks=(require_unlocked,),
    ),
    "admin": PrincipalKind(
        "admin",
        Admin,
        AdminRead,
        "admin",
        login_checks=(require_fresh_password,),
        gate_checks=(require_unlocked,),
    ),
}


def resolve_role(role: str | None) -> PrincipalKind:
    try:
        return PRINCIPALS[role or ""]
    except KeyError:
        raise AuthError(AuthErrorKind.INVALID_ROLE) from None

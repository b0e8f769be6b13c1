"""Pydantic schemas for employees."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from bizdesk.core.permissions import EMPLOYEE_PERMISSIONS, validate_choices
from bizdesk.core.validators import check_password_strength, check_phone, normalise_email
from bizdesk.schemas.common import CamelModel, OrgText, PersonName, StaffCode
from bizdesk.schemas.user import check_avatar

EmployeeRole = Literal["employee", "supervisor", "manager", "admin"]


class EmployeeCreate(CamelModel):
    """Body of both self-registration and admin provisioning.

    ``employee_id`` is required on registration; provisioning generates one
    when it is omitted.
    """

    email: str
    password: str
    first_name: PersonName
    last_name: PersonName
    phone_number: str | None = None
    employee_id: StaffCode | None = None
    department: OrgText
    position: OrgText
    role: EmployeeRole = "employee"
    salary: float | None = Field(default=None, ge=0)
    hire_date: datetime | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalise_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return check_password_strength(v)

    @field_validator("phone_number")
    @classmethod
    def _phone(cls, v: str | None) -> str | None:
        return check_phone(v)


class EmployeeUpdate(CamelModel):
    first_name: PersonName | None = None
    last_name: PersonName | None = None
    phone_number: str | None = None
    avatar: str | None = None
    department: OrgText | None = None
    position: OrgText | None = None
    role: EmployeeRole | None = None
    salary: float | None = Field(default=None, ge=0)
    is_active: bool | None = None
    permissions: list[str] | None = None

    @field_validator("phone_number")
    @classmethod
    def _phone(cls, v: str | None) -> str | None:
        return check_phone(v)

    @field_validator("avatar")
    @classmethod
    def _avatar(cls, v: str | None) -> str | None:
        return check_avatar(v)

    @field_validator("permissions")
    @classmethod
    def _permissions(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return validate_choices(v, EMPLOYEE_PERMISSIONS, "permission")


class EmployeeRead(CamelModel):
    id: str
    email: str
    employee_id: str
    first_name: str
    last_name: str
    full_name: str
    phone_number: str | None = None
    avatar: str | None = None
    department: str
    position: str
    hire_date: datetime | None = None
    salary: float | None = None
    role: str
    permissions: list[str] = []
    is_active: bool
    is_email_verified: bool = False
    is_locked: bool = False
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

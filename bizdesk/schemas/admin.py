"""Pydantic schemas for admins."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from bizdesk.core.permissions import ADMIN_PERMISSIONS, MODULES, validate_choices
from bizdesk.core.validators import check_password_strength, check_phone, normalise_email
from bizdesk.schemas.common import CamelModel, OrgText, PersonName, StaffCode
from bizdesk.schemas.user import check_avatar

AdminLevel = Literal["super_admin", "admin", "manager"]
AccessLevel = Literal["full_access", "limited_access", "read_only"]


class AdminCreate(CamelModel):
    """Body of admin registration and provisioning.

    Registration carries an explicit ``admin_id``; provisioning generates one.
    """

    email: str
    password: str
    first_name: PersonName
    last_name: PersonName
    phone_number: str | None = None
    admin_id: StaffCode | None = None
    department: OrgText
    position: OrgText
    admin_level: AdminLevel = "admin"
    access_level: AccessLevel = "limited_access"
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


class AdminUpdate(CamelModel):
    first_name: PersonName | None = None
    last_name: PersonName | None = None
    phone_number: str | None = None
    avatar: str | None = None
    department: OrgText | None = None
    position: OrgText | None = None
    admin_level: AdminLevel | None = None
    access_level: AccessLevel | None = None
    salary: float | None = Field(default=None, ge=0)
    is_active: bool | None = None
    session_timeout: int | None = Field(default=None, ge=5, le=480)
    password_expiry_days: int | None = Field(default=None, ge=30, le=365)
    allowed_modules: list[str] | None = None
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
        return validate_choices(v, ADMIN_PERMISSIONS, "permission")

    @field_validator("allowed_modules")
    @classmethod
    def _modules(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return validate_choices(v, MODULES, "module")


class AdminRead(CamelModel):
    id: str
    email: str
    admin_id: str
    first_name: str
    last_name: str
    full_name: str
    phone_number: str | None = None
    avatar: str | None = None
    department: str
    position: str
    hire_date: datetime | None = None
    salary: float | None = None
    admin_level: str
    access_level: str
    permissions: list[str] = []
    allowed_modules: list[str] = []
    session_timeout: int
    two_factor_enabled: bool = False
    password_expiry_days: int
    last_password_change: datetime | None = None
    days_until_password_expiry: int = 0
    is_active: bool
    is_email_verified: bool = False
    is_locked: bool = False
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

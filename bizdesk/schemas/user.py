"""Pydantic schemas for end users and vendors."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import field_validator

from bizdesk.core.validators import check_password_strength, check_phone, normalise_email
from bizdesk.schemas.common import CamelModel, PersonName


def check_avatar(v: str | None) -> str | None:
    if v is not None and not v.startswith(("http://", "https://")):
        raise ValueError("Please enter a valid avatar URL")
    return v


class UserRegister(CamelModel):
    email: str
    password: str
    first_name: PersonName
    last_name: PersonName
    phone_number: str | None = None
    role: Literal["user", "vendor"] = "user"

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


class ProfileUpdate(CamelModel):
    """Self-service profile fields shared by users, employees and admins."""

    first_name: PersonName | None = None
    last_name: PersonName | None = None
    phone_number: str | None = None
    avatar: str | None = None

    @field_validator("phone_number")
    @classmethod
    def _phone(cls, v: str | None) -> str | None:
        return check_phone(v)

    @field_validator("avatar")
    @classmethod
    def _avatar(cls, v: str | None) -> str | None:
        return check_avatar(v)


class UserRead(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    phone_number: str | None = None
    avatar: str | None = None
    role: str
    is_active: bool
    is_email_verified: bool = False
    is_locked: bool = False
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

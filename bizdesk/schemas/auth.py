"""Pydantic schemas shared by the login / me / password endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from bizdesk.core.validators import check_password_strength, normalise_email
from bizdesk.schemas.common import CamelModel


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalise_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str
    confirm_password: str | None = None

    @field_validator("current_password")
    @classmethod
    def _current(cls, v: str) -> str:
        if not v:
            raise ValueError("Current password is required")
        return v

    @field_validator("new_password")
    @classmethod
    def _new(cls, v: str) -> str:
        return check_password_strength(v)

    @field_validator("confirm_password")
    @classmethod
    def _confirm(cls, v: str | None, info) -> str | None:
        if v is not None and v != info.data.get("new_password"):
            raise ValueError("Password confirmation does not match password")
        return v


class MeData(CamelModel):
    user: dict[str, Any]
    role: str

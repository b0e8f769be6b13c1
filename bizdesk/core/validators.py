"""Field rules shared by the ORM models and the request schemas."""

from __future__ import annotations

import re

EMAIL_RE = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.[A-Za-z]{2,}$")
PHONE_RE = re.compile(r"^\+?[\d\s\-()]+$")
# lower, upper, digit and one of @$!%*?&
PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]")
PASSWORD_MIN_LENGTH = 8


def normalise_email(value: str) -> str:
    value = (value or "").strip().lower()
    if not EMAIL_RE.match(value):
        raise ValueError("Please enter a valid email address")
    return value


def check_password_strength(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError("Password must be at least 8 characters long")
    if not PASSWORD_RE.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase "
            "letter, one number, and one special character"
        )
    return value


def check_phone(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if value and not PHONE_RE.match(value):
        raise ValueError("Please enter a valid phone number")
    return value or None

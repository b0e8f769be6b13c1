"""Pydantic schemas for client (tenant) accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import Field, field_validator

from bizdesk.core.validators import check_password_strength, check_phone, normalise_email
from bizdesk.schemas.common import CamelModel, OrgText, PersonName


class ContactPerson(CamelModel):
    first_name: PersonName
    last_name: PersonName
    phone_number: str | None = None
    position: str | None = Field(default=None, max_length=100)

    @field_validator("phone_number")
    @classmethod
    def _phone(cls, v: str | None) -> str | None:
        return check_phone(v)


class ContactPersonUpdate(CamelModel):
    first_name: PersonName | None = None
    last_name: PersonName | None = None
    phone_number: str | None = None
    position: str | None = Field(default=None, max_length=100)

    @field_validator("phone_number")
    @classmethod
    def _phone(cls, v: str | None) -> str | None:
        return check_phone(v)


class Address(CamelModel):
    street: str | None = Field(default=None, max_length=200)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    zip_code: str | None = Field(default=None, max_length=20)
    country: str | None = Field(default=None, max_length=100)


class BusinessInfo(CamelModel):
    industry: str | None = Field(default=None, max_length=100)
    company_size: Literal["1-10", "11-50", "51-200", "201-500", "501-1000", "1000+"] = "1-10"
    website: str | None = Field(default=None, pattern=r"^https?://.+")
    tax_id: str | None = Field(default=None, max_length=50)


class ClientRegister(CamelModel):
    email: str
    password: str
    company_name: OrgText
    contact_person: ContactPerson
    address: Address | None = None
    business_info: BusinessInfo | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return normalise_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return check_password_strength(v)


class ClientProfileUpdate(CamelModel):
    company_name: OrgText | None = None
    contact_person: ContactPersonUpdate | None = None
    address: Address | None = None
    business_info: BusinessInfo | None = None
    settings: dict[str, Any] | None = None


class ContactPersonRead(CamelModel):
    first_name: str
    last_name: str
    full_name: str
    phone_number: str | None = None
    position: str | None = None


class SubscriptionRead(CamelModel):
    plan: str
    status: str
    start_date: datetime | None = None
    end_date: datetime | None = None
    features: list[str] = []
    is_active: bool


class ClientRead(CamelModel):
    id: str
    email: str
    company_name: str
    contact_person: ContactPersonRead
    address: dict[str, Any] | None = None
    business_info: dict[str, Any] | None = None
    settings: dict[str, Any] | None = None
    subscription: SubscriptionRead
    is_subscription_active: bool
    is_active: bool
    is_email_verified: bool = False
    is_locked: bool = False
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ApiKeyRead(CamelModel):
    api_key: str
    expires_at: datetime | None = None

"""Base schema config, shared field types and the response envelope."""

from __future__ import annotations

from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

T = TypeVar("T")

PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]
OrgText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
StaffCode = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=20)]


class CamelModel(BaseModel):
    """JSON bodies use camelCase; Python code uses snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str | None = None
    data: T | None = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    db: bool = False

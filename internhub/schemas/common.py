"""Shared Pydantic schema base with camelCase aliases."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """All API schemas inherit from this to auto-generate camelCase aliases."""

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
        "from_attributes": True,
    }


class NamedCount(CamelModel):
    """A ``{name, value}`` chart point."""

    name: str
    value: int


class DatedCount(CamelModel):
    """A ``{date, count}`` chart point."""

    date: str
    count: int


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    """Health-check response returned by /health."""
    status: str = "ok"
    app: str
    env: str


class LoginRequest(CamelModel):
    password: str

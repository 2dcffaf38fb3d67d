"""Account schemas: persisted record, request bodies and public projections."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from .base import ApiModel, Record, migration, utcnow


class Account(Record):
    """A registered user; `password` holds a bcrypt hash."""
    collection = "users"

    id: str
    first_name: str
    last_name: str
    direction: str
    direction_name: str | None = None
    phone: str = ""
    telegram: str
    login: str
    password: str
    is_admin: bool = False
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@migration("users")
def _users_v0_to_v1(doc: dict[str, Any]) -> dict[str, Any]:
    # legacy documents used numeric ids and omitted the admin flag
    doc["id"] = str(doc.get("id", ""))
    doc["direction"] = str(doc.get("direction", ""))
    doc.setdefault("isAdmin", False)
    return doc


class LoginRequest(ApiModel):
    login: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RegisterRequest(ApiModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    direction: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    telegram: str = Field(min_length=1)
    login: str = Field(min_length=1)
    password: str = Field(min_length=1)


class PublicUser(ApiModel):
    """What a client learns about itself after login."""
    id: str
    first_name: str
    last_name: str
    direction: str
    direction_name: str | None = None
    is_admin: bool = False


class AdminUserView(ApiModel):
    """Account as listed to admins; never includes the password hash."""
    id: str
    first_name: str
    last_name: str
    direction: str
    direction_name: str | None = None
    phone: str
    telegram: str
    login: str
    created_at: datetime


class LoginResponse(ApiModel):
    success: bool = True
    token: str
    user: PublicUser

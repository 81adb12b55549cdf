"""Pydantic models for user documents stored in Cosmos DB."""

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from crisiscommand.core.models import ApiModel, Document, utcnow

Role = Literal["citizen", "responder", "service_admin", "global_admin"]
Language = Literal["en", "tw", "ee", "ga", "dag"]


def normalize_phone(v: str) -> str:
    """Strip formatting from a phone number, keeping digits and a leading +."""
    # "+233 20 000 0001" and "+233-200000001" are the same caller
    return "".join(ch for ch in v if ch.isdigit() or ch == "+")


class NewUser(ApiModel):
    """Fields accepted when registering a user."""

    phone_number: str = Field(min_length=3, max_length=30)
    email: str | None = Field(default=None, max_length=254)
    role: Role
    service_id: str | None = None
    name: str | None = Field(default=None, max_length=200)
    preferred_language: Language = "en"

    @field_validator("phone_number")
    @classmethod
    def _phone(cls, v: str) -> str:
        return normalize_phone(v)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v: str | None) -> str | None:
        return v.lower() if v else v


class UserUpdate(ApiModel):
    """Partial update for a user profile."""

    email: str | None = Field(default=None, max_length=254)
    role: Role | None = None
    service_id: str | None = None
    name: str | None = Field(default=None, max_length=200)
    preferred_language: Language | None = None
    is_active: bool | None = None
    last_login_at: datetime | None = None


class User(Document):
    """A person using the system.

    Citizens report incidents; responders and service admins belong to
    an emergency service via ``service_id``.
    """

    phone_number: str
    email: str | None = None
    role: Role = "citizen"
    service_id: str | None = None
    name: str | None = None
    preferred_language: Language = "en"
    is_active: bool = True
    last_login_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

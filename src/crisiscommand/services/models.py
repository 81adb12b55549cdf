"""Pydantic models for emergency service documents."""

from datetime import datetime

from pydantic import Field, field_validator

from crisiscommand.core.models import ApiModel, Document, utcnow


class NewEmergencyService(ApiModel):
    """Fields accepted when registering an emergency service."""

    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=40)
    service_numbers: list[str] = Field(max_length=10)
    description: str | None = Field(default=None, max_length=1000)

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, v: str) -> str:
        return v.strip().upper()


class EmergencyServiceUpdate(ApiModel):
    """Partial update for an emergency service."""

    name: str | None = Field(default=None, max_length=200)
    service_numbers: list[str] | None = None
    description: str | None = Field(default=None, max_length=1000)
    is_active: bool | None = None


class EmergencyService(Document):
    """An emergency service organization, e.g. the Police (hotline 191)."""

    name: str
    code: str  # POLICE, FIRE, AMBULANCE, NADMO, UNIFIED
    service_numbers: list[str] = Field(default_factory=list)
    description: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)

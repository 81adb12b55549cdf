"""Pydantic models for emergency unit documents stored in Cosmos DB."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from crisiscommand.core.models import ApiModel, Document, Location, utcnow

UnitStatus = Literal["available", "busy", "offline", "maintenance"]


class NewEmergencyUnit(ApiModel):
    """Fields accepted when registering a unit."""

    service_id: str
    call_sign: str = Field(min_length=1, max_length=40)
    unit_type: str = Field(max_length=40)  # patrol, ambulance, fire_truck, rescue
    location: Location | None = None
    assigned_responder_id: str | None = None
    capacity: int = Field(default=1, ge=1)
    equipment: list[str] = Field(default_factory=list)


class EmergencyUnitUpdate(ApiModel):
    """Partial update for a unit, e.g. a new position or status."""

    call_sign: str | None = Field(default=None, min_length=1, max_length=40)
    unit_type: str | None = Field(default=None, max_length=40)
    status: UnitStatus | None = None
    location: Location | None = None
    current_incident_id: str | None = None
    assigned_responder_id: str | None = None
    capacity: int | None = Field(default=None, ge=1)
    equipment: list[str] | None = None
    is_active: bool | None = None
    last_maintenance_at: datetime | None = None


class EmergencyUnit(Document):
    """A response vehicle or team belonging to an emergency service."""

    service_id: str
    call_sign: str  # e.g. "AMB-193-B"
    unit_type: str
    status: UnitStatus = "available"
    location: Location | None = None
    current_incident_id: str | None = None
    assigned_responder_id: str | None = None
    capacity: int = 1
    equipment: list[str] = Field(default_factory=list)
    is_active: bool = True
    last_maintenance_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

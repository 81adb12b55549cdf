"""Pydantic models for incident and assignment documents stored in Cosmos DB."""

from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from crisiscommand.core.models import ApiModel, Document, Location, Priority, utcnow

MAX_DESCRIPTION_LENGTH = 5000
MAX_MEDIA_URLS = 20

IncidentStatus = Literal[
    "new", "assigned", "accepted", "en_route", "on_scene", "resolved", "closed"
]
AssignmentStatus = Literal["assigned", "accepted", "declined", "completed"]

# Statuses that still need a response; resolved and closed incidents drop
# off the dispatcher board.
ACTIVE_STATUSES: tuple[str, ...] = ("new", "assigned", "accepted", "en_route", "on_scene")
COMPLETED_STATUSES: tuple[str, ...] = ("resolved", "closed")


class NewIncident(ApiModel):
    """Fields a citizen (or dispatcher) submits when reporting an incident."""

    reporter_id: str | None = None
    service_id: str
    type: str = Field(max_length=40)  # police, fire, ambulance, unified
    category: str = Field(max_length=80)  # accident, robbery, fire, medical_emergency, ...
    priority: Priority = "medium"
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    location: Location
    service_number: str = Field(max_length=10)  # hotline dialed, e.g. "191"
    is_silent: bool = False
    is_offline: bool = False  # queued on the device while offline


class IncidentUpdate(ApiModel):
    """Partial update for an incident. Unknown keys are ignored."""

    service_id: str | None = None
    type: str | None = Field(default=None, max_length=40)
    category: str | None = Field(default=None, max_length=80)
    priority: Priority | None = None
    status: IncidentStatus | None = None
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    location: Location | None = None
    estimated_response_time: int | None = Field(default=None, ge=0)
    is_silent: bool | None = None
    metadata: dict[str, Any] | None = None


class Incident(Document):
    """Full incident document stored in Cosmos DB.

    Status is a plain field: any known status may be written at any time.
    Assignment fields record only the most recent assignment; the full
    history lives in ``IncidentAssignment`` documents.
    """

    reporter_id: str | None = None
    service_id: str
    type: str
    category: str
    priority: Priority = "medium"
    status: IncidentStatus = "new"
    title: str
    description: str | None = None
    location: Location
    service_number: str

    # Assignment and response tracking
    assigned_responder_id: str | None = None
    assigned_by_id: str | None = None
    assigned_at: datetime | None = None
    accepted_at: datetime | None = None
    completed_at: datetime | None = None
    estimated_response_time: int | None = None  # minutes
    actual_response_time: int | None = None  # minutes

    is_silent: bool = False
    is_offline: bool = False
    media_urls: list[str] = Field(default_factory=list, max_length=MAX_MEDIA_URLS)
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_active(self) -> bool:
        """True while the incident still needs a response."""
        return self.status in ACTIVE_STATUSES


class IncidentAssignment(Document):
    """One responder assignment, kept as an audit trail per incident."""

    incident_id: str
    responder_id: str
    assigned_by_id: str
    status: AssignmentStatus = "assigned"
    assigned_at: datetime = Field(default_factory=utcnow)
    response_at: datetime | None = None
    notes: str | None = Field(default=None, max_length=1000)

"""Pydantic model for audit log documents."""

from datetime import datetime
from typing import Any

from pydantic import Field

from crisiscommand.core.models import Document, utcnow


class AuditLog(Document):
    """One recorded action, e.g. ``assign_incident`` on an incident."""

    user_id: str | None = None
    service_id: str | None = None
    action: str  # create_incident, assign_incident, update_status, ...
    entity_type: str | None = None  # incident, user, unit, message
    entity_id: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

"""Pydantic models for notification documents stored in Cosmos DB."""

from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from crisiscommand.core.models import ApiModel, Document, utcnow

NotificationType = Literal["assignment", "status_update", "broadcast", "system"]


class NewNotification(ApiModel):
    """Fields accepted when creating a notification."""

    service_id: str | None = None
    recipient_id: str | None = None
    type: NotificationType
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=2000)
    data: dict[str, Any] = Field(default_factory=dict)
    expires_at: datetime | None = None


class Notification(Document):
    """A notification addressed to one user, one service, or everyone."""

    service_id: str | None = None
    recipient_id: str | None = None
    type: NotificationType
    title: str
    message: str
    data: dict[str, Any] = Field(default_factory=dict)
    is_read: bool = False
    expires_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)

"""Pydantic models for chat message documents stored in Cosmos DB."""

from datetime import datetime
from typing import Any, Literal, Self

from pydantic import Field, model_validator

from crisiscommand.core.models import ApiModel, Document, utcnow

MAX_MESSAGE_LENGTH = 5000

ChannelType = Literal["incident", "service", "broadcast"]
MessageType = Literal["text", "image", "audio", "system", "assignment"]


class NewChatMessage(ApiModel):
    """Fields accepted when posting a chat message."""

    incident_id: str | None = None
    service_id: str | None = None
    channel_type: ChannelType = "incident"
    message: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)
    message_type: MessageType = "text"

    @model_validator(mode="after")
    def _channel_target(self) -> Self:
        """Incident and service channels need the ID they are scoped to."""
        if self.channel_type == "incident" and not self.incident_id:
            raise ValueError("incidentId is required for incident messages")
        if self.channel_type == "service" and not self.service_id:
            raise ValueError("serviceId is required for service messages")
        return self


class ChatMessage(Document):
    """A chat message on an incident, service-wide, or broadcast channel."""

    incident_id: str | None = None
    service_id: str | None = None
    channel_type: ChannelType = "incident"
    sender_id: str
    message: str
    message_type: MessageType = "text"
    is_read: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)

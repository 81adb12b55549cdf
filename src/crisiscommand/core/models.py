"""Shared Pydantic building blocks for stored documents and API payloads.

Documents are stored in Cosmos DB with snake_case keys. The HTTP API
speaks camelCase; both spellings are accepted on input.
"""

import uuid
from datetime import UTC, datetime
from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Priority = Literal["low", "medium", "high", "critical"]


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def new_id() -> str:
    """Generate a new document ID."""
    return str(uuid.uuid4())


class ApiModel(BaseModel):
    """Base model with camelCase aliases for the HTTP API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api(self) -> dict:
        """Serialize for JSON responses (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)


class Document(ApiModel):
    """A top-level document stored in its own Cosmos DB container."""

    id: str = Field(default_factory=new_id)

    def to_cosmos(self) -> dict:
        """Serialize for Cosmos DB storage."""
        return self.model_dump(mode="json")

    @classmethod
    def from_cosmos(cls, data: dict) -> Self:
        """Deserialize from Cosmos DB document."""
        return cls.model_validate(data)


class Location(ApiModel):
    """Where an incident happened or a unit currently is."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: str = Field(max_length=500)
    ghana_post_gps: str | None = Field(default=None, alias="ghanaPostGPS", max_length=20)

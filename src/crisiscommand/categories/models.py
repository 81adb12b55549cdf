"""Pydantic models for incident category documents."""

from datetime import datetime

from pydantic import Field

from crisiscommand.core.models import ApiModel, Document, Priority, utcnow


class NewIncidentCategory(ApiModel):
    """Fields accepted when defining a category."""

    service_id: str
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=80)
    description: str | None = Field(default=None, max_length=1000)
    priority: Priority = "medium"
    questions: list[str] = Field(default_factory=list, max_length=20)
    sort_order: int = 0


class IncidentCategoryUpdate(ApiModel):
    """Partial update for a category."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    priority: Priority | None = None
    questions: list[str] | None = Field(default=None, max_length=20)
    is_active: bool | None = None
    sort_order: int | None = None


class IncidentCategory(Document):
    """A kind of incident a service handles, e.g. "robbery" for the Police.

    ``questions`` are the guided prompts shown to a citizen while
    reporting, and ``priority`` is the default priority to suggest.
    """

    service_id: str
    name: str
    code: str
    description: str | None = None
    priority: Priority = "medium"
    questions: list[str] = Field(default_factory=list)
    is_active: bool = True
    sort_order: int = 0
    created_at: datetime = Field(default_factory=utcnow)

"""Async Cosmos DB operations for incident and assignment documents.

Internal implementation detail. HTTP handlers go through
``crisiscommand.incidents.operations`` for writes so audit records,
notifications, and realtime events stay consistent.
"""

from datetime import datetime

from crisiscommand.core.cosmos import DocumentStore
from crisiscommand.incidents.models import ACTIVE_STATUSES, Incident, IncidentAssignment


class IncidentStore(DocumentStore[Incident]):
    """Async CRUD operations for incident documents.

    Listings are sorted newest first, the order dispatchers work them in.
    """

    container_name = "incidents"
    model = Incident
    touch_on_update = True

    async def list_all(self, *, max_items: int | None = None) -> list[Incident]:
        """Every incident, newest first."""
        return await self.query(order_by="created_at", descending=True, max_items=max_items)

    async def list_active(self) -> list[Incident]:
        """Incidents that still need a response, newest first."""
        return await self.query(
            {"status": ACTIVE_STATUSES}, order_by="created_at", descending=True
        )

    async def list_by_status(self, status: str) -> list[Incident]:
        """Incidents in one status, newest first."""
        return await self.query({"status": status}, order_by="created_at", descending=True)

    async def list_by_service(self, service_id: str) -> list[Incident]:
        """Incidents routed to an emergency service, newest first."""
        return await self.query(
            {"service_id": service_id}, order_by="created_at", descending=True
        )

    async def list_by_reporter(self, reporter_id: str) -> list[Incident]:
        """Incidents a citizen reported, newest first."""
        return await self.query(
            {"reporter_id": reporter_id}, order_by="created_at", descending=True
        )


class AssignmentStore(DocumentStore[IncidentAssignment]):
    """Assignment history records."""

    container_name = "incident-assignments"
    model = IncidentAssignment

    async def list_for_incident(self, incident_id: str) -> list[IncidentAssignment]:
        """Assignments for an incident, oldest first."""
        return await self.query({"incident_id": incident_id}, order_by="assigned_at")

    async def list_for_responder(self, responder_id: str) -> list[IncidentAssignment]:
        """Assignments given to a responder, newest first."""
        return await self.query(
            {"responder_id": responder_id}, order_by="assigned_at", descending=True
        )

    async def update_status(
        self,
        assignment_id: str,
        status: str,
        response_at: datetime | None = None,
    ) -> IncidentAssignment | None:
        """Record a responder's answer to an assignment.

        Returns:
            The updated assignment, or None if it does not exist
        """
        changes: dict = {"status": status}
        if response_at is not None:
            changes["response_at"] = response_at
        return await self.patch(assignment_id, changes)

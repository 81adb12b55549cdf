"""Incident lifecycle operations.

Every write goes through here so it leaves an audit record, notifies
the people involved, and pushes a realtime event:

- Citizens create incidents; status starts at "new"
- Any known status may be written at any time (no transition rules)
- Assignment overwrites the previous assignment; last write wins
- Resolving stamps completion time and the actual response time

Functions return the API representation of the incident, or a dict
with an ``"error"`` key when the incident does not exist.
"""

import logging
from datetime import datetime

from crisiscommand import realtime
from crisiscommand.audit.store import AuditStore
from crisiscommand.auth import current_user_id
from crisiscommand.core.models import utcnow
from crisiscommand.incidents.models import Incident, IncidentAssignment, NewIncident
from crisiscommand.incidents.store import AssignmentStore, IncidentStore
from crisiscommand.notifications.models import NewNotification
from crisiscommand.notifications.operations import create_notification

logger = logging.getLogger(__name__)

NOT_FOUND = {"error": "Incident not found"}


def _minutes_between(start: datetime, end: datetime) -> int:
    return max(0, round((end - start).total_seconds() / 60))


async def _publish(event_type: str, incident: Incident) -> None:
    """Broadcast an incident event and refresh the service's subscribers."""
    payload = incident.to_api()
    await realtime.manager.broadcast({"type": event_type, "incident": payload})

    async def load() -> list[dict]:
        async with IncidentStore() as store:
            incidents = await store.list_by_service(incident.service_id)
        return [i.to_api() for i in incidents]

    await realtime.hub.publish(realtime.incidents_topic(incident.service_id), load)


async def create_incident(data: NewIncident) -> dict:
    """Record a newly reported incident.

    Args:
        data: Validated report from the citizen or dispatcher

    Returns:
        The created incident
    """
    incident = Incident.model_validate(data.model_dump())

    async with IncidentStore() as store:
        created = await store.create(incident)

    async with AuditStore() as audit:
        await audit.record(
            created.reporter_id or current_user_id("system"),
            "create_incident",
            "incident",
            created.id,
            {"type": created.type, "serviceId": created.service_id},
            service_id=created.service_id,
        )

    logger.info(
        "Incident %s reported (%s/%s, priority=%s)",
        created.id,
        created.type,
        created.category,
        created.priority,
    )
    await _publish("incident_created", created)
    return created.to_api()


async def update_incident(incident_id: str, changes: dict) -> dict:
    """Apply a partial update to an incident.

    When ``changes`` contains a ``status`` key the update is handled as a
    status change (completion stamps, audit, reporter notification).

    Args:
        incident_id: The incident document ID
        changes: snake_case field values to write

    Returns:
        The updated incident, or an error if not found
    """
    changes = dict(changes)
    status = changes.pop("status", None)
    if status:
        return await update_status(incident_id, status, changes)

    async with IncidentStore() as store:
        updated = await store.patch(incident_id, changes)

    if updated is None:
        return NOT_FOUND

    await _publish("incident_updated", updated)
    return updated.to_api()


async def update_status(incident_id: str, status: str, updates: dict | None = None) -> dict:
    """Move an incident to a new status.

    Resolving stamps ``completed_at`` and ``actual_response_time``
    (minutes since the report) the first time only. Accepting stamps
    ``accepted_at`` once.

    Raises:
        pydantic.ValidationError: If ``status`` is not a known status
    """
    async with IncidentStore() as store:
        doc = await store.get(incident_id)
        if doc is None:
            return NOT_FOUND

        now = utcnow()
        changes = {**(updates or {}), "status": status}
        if status == "resolved" and doc.completed_at is None:
            changes["completed_at"] = now
            changes["actual_response_time"] = _minutes_between(doc.created_at, now)
        elif status == "accepted" and doc.accepted_at is None:
            changes["accepted_at"] = now

        previous = doc.status
        updated = await store.update(doc, changes)

    async with AuditStore() as audit:
        await audit.record(
            current_user_id("system"),
            "update_status",
            "incident",
            incident_id,
            {"status": status, "previous": previous},
            service_id=updated.service_id,
        )

    logger.info("Incident %s status %s -> %s", incident_id, previous, status)

    if updated.reporter_id and status != previous:
        await create_notification(
            NewNotification(
                recipient_id=updated.reporter_id,
                service_id=updated.service_id,
                type="status_update",
                title="Incident update",
                message=f"{updated.title}: {status.replace('_', ' ')}",
                data={"incidentId": updated.id, "status": status},
            )
        )

    await _publish("incident_updated", updated)
    return updated.to_api()


async def assign_incident(
    incident_id: str,
    responder_id: str,
    assigned_by_id: str = "system",
    *,
    notes: str | None = None,
) -> dict:
    """Assign a responder to an incident.

    Overwrites any previous assignment on the incident and appends an
    assignment record. The responder is notified.

    Args:
        incident_id: The incident document ID
        responder_id: User ID of the responder
        assigned_by_id: User ID of the dispatcher making the assignment
        notes: Optional dispatcher notes for the responder

    Returns:
        The updated incident, or an error if not found
    """
    now = utcnow()
    async with IncidentStore() as store:
        updated = await store.patch(
            incident_id,
            {
                "assigned_responder_id": responder_id,
                "assigned_by_id": assigned_by_id,
                "assigned_at": now,
                "status": "assigned",
            },
        )

    if updated is None:
        return NOT_FOUND

    async with AssignmentStore() as assignments:
        assignment = await assignments.create(
            IncidentAssignment(
                incident_id=incident_id,
                responder_id=responder_id,
                assigned_by_id=assigned_by_id,
                assigned_at=now,
                notes=notes,
            )
        )

    async with AuditStore() as audit:
        await audit.record(
            assigned_by_id,
            "assign_incident",
            "incident",
            incident_id,
            {"responderId": responder_id, "assignmentId": assignment.id},
            service_id=updated.service_id,
        )

    logger.info("Incident %s assigned to %s by %s", incident_id, responder_id, assigned_by_id)

    await create_notification(
        NewNotification(
            recipient_id=responder_id,
            service_id=updated.service_id,
            type="assignment",
            title=f"New assignment: {updated.title}",
            message=notes or updated.location.address,
            data={"incidentId": updated.id, "assignmentId": assignment.id},
        )
    )

    await _publish("incident_assigned", updated)
    return updated.to_api()


async def respond_to_assignment(assignment_id: str, status: str) -> dict:
    """Record a responder accepting, declining, or completing an assignment.

    Accepting also moves the incident to "accepted".

    Returns:
        The updated assignment, or an error if not found
    """
    async with AssignmentStore() as store:
        assignment = await store.update_status(assignment_id, status, response_at=utcnow())

    if assignment is None:
        return {"error": "Assignment not found"}

    async with AuditStore() as audit:
        await audit.record(
            assignment.responder_id,
            f"assignment_{status}",
            "assignment",
            assignment_id,
            {"incidentId": assignment.incident_id},
        )

    if status == "accepted":
        await update_status(assignment.incident_id, "accepted")

    return assignment.to_api()


async def attach_media(incident_id: str, urls: list[str]) -> dict:
    """Append media URLs (already uploaded elsewhere) to an incident.

    Returns:
        The updated incident, or an error if not found
    """
    async with IncidentStore() as store:
        doc = await store.get(incident_id)
        if doc is None:
            return NOT_FOUND
        merged = list(dict.fromkeys([*doc.media_urls, *urls]))
        updated = await store.update(doc, {"media_urls": merged})

    await _publish("incident_updated", updated)
    return updated.to_api()

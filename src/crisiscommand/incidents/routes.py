"""HTTP route handlers for incidents and assignments.

Routes:
- GET   /api/incidents                       → Active incidents
- GET   /api/incidents/all                   → Every incident
- GET   /api/incidents/service/{service_id}  → Incidents of a service
- GET   /api/incidents/user/{user_id}        → Incidents a citizen reported
- GET   /api/incidents/status/{status}       → Incidents in one status
- POST  /api/incidents                       → Report an incident
- GET   /api/incidents/{incident_id}         → One incident
- PATCH /api/incidents/{incident_id}         → Update fields or status
- POST  /api/incidents/{incident_id}/assign  → Assign a responder
- GET   /api/incidents/{incident_id}/assignments → Assignment history
- POST  /api/incidents/{incident_id}/media   → Attach media URLs
- PATCH /api/assignments/{assignment_id}     → Responder answers an assignment
"""

import logging
from typing import Literal

from pydantic import Field
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from crisiscommand.auth import current_user_id, get_current_user
from crisiscommand.core.models import ApiModel
from crisiscommand.http import not_found, parse_body, result_response
from crisiscommand.incidents import operations
from crisiscommand.incidents.models import IncidentUpdate, NewIncident
from crisiscommand.incidents.store import AssignmentStore, IncidentStore

logger = logging.getLogger(__name__)


class AssignRequest(ApiModel):
    """Body of an assignment request."""

    responder_id: str = Field(min_length=1)
    assigned_by_id: str | None = None
    notes: str | None = Field(default=None, max_length=1000)


class AssignmentResponse(ApiModel):
    """Body of a responder's answer to an assignment."""

    status: Literal["accepted", "declined", "completed"]


class MediaRequest(ApiModel):
    """Body listing media URLs to attach."""

    urls: list[str] = Field(min_length=1, max_length=10)


def _listing(incidents: list[ApiModel]) -> Response:
    return JSONResponse([i.to_api() for i in incidents])


async def list_active_incidents(request: Request) -> Response:
    """Return incidents that still need a response."""
    async with IncidentStore() as store:
        incidents = await store.list_active()
    return _listing(incidents)


async def list_all_incidents(request: Request) -> Response:
    """Return every incident, newest first."""
    async with IncidentStore() as store:
        incidents = await store.list_all()
    return _listing(incidents)


async def list_service_incidents(request: Request) -> Response:
    """Return the incidents routed to a service."""
    async with IncidentStore() as store:
        incidents = await store.list_by_service(request.path_params["service_id"])
    return _listing(incidents)


async def list_user_incidents(request: Request) -> Response:
    """Return the incidents a citizen reported."""
    async with IncidentStore() as store:
        incidents = await store.list_by_reporter(request.path_params["user_id"])
    return _listing(incidents)


async def list_status_incidents(request: Request) -> Response:
    """Return the incidents in one status."""
    async with IncidentStore() as store:
        incidents = await store.list_by_status(request.path_params["status"])
    return _listing(incidents)


async def get_incident(request: Request) -> Response:
    """Return one incident."""
    async with IncidentStore() as store:
        incident = await store.get(request.path_params["incident_id"])
    if incident is None:
        return not_found("Incident")
    return JSONResponse(incident.to_api())


async def create_incident(request: Request) -> Response:
    """Record a new incident report."""
    data = await parse_body(request, NewIncident, "incident")
    user = get_current_user()
    if data.reporter_id is None and user is not None:
        data.reporter_id = user.user_id
    result = await operations.create_incident(data)
    return JSONResponse(result, status_code=201)


async def update_incident(request: Request) -> Response:
    """Apply a partial update; a ``status`` key triggers a status change."""
    data = await parse_body(request, IncidentUpdate, "incident")
    result = await operations.update_incident(
        request.path_params["incident_id"], data.model_dump(exclude_unset=True)
    )
    return result_response(result)


async def assign_incident(request: Request) -> Response:
    """Assign a responder to an incident."""
    data = await parse_body(request, AssignRequest, "assignment")
    assigned_by = data.assigned_by_id or current_user_id("system")
    result = await operations.assign_incident(
        request.path_params["incident_id"],
        data.responder_id,
        assigned_by,
        notes=data.notes,
    )
    return result_response(result)


async def list_incident_assignments(request: Request) -> Response:
    """Return the assignment history of an incident, oldest first."""
    async with AssignmentStore() as store:
        assignments = await store.list_for_incident(request.path_params["incident_id"])
    return JSONResponse([a.to_api() for a in assignments])


async def respond_to_assignment(request: Request) -> Response:
    """Record a responder accepting, declining, or completing an assignment."""
    data = await parse_body(request, AssignmentResponse, "assignment")
    result = await operations.respond_to_assignment(
        request.path_params["assignment_id"], data.status
    )
    return result_response(result)


async def attach_media(request: Request) -> Response:
    """Attach already-uploaded media URLs to an incident."""
    data = await parse_body(request, MediaRequest, "media")
    result = await operations.attach_media(request.path_params["incident_id"], data.urls)
    if "error" in result:
        return result_response(result)
    return JSONResponse({"files": data.urls, "mediaUrls": result["mediaUrls"]})


routes = [
    Route("/api/incidents", list_active_incidents, methods=["GET"]),
    Route("/api/incidents", create_incident, methods=["POST"]),
    Route("/api/incidents/all", list_all_incidents, methods=["GET"]),
    Route("/api/incidents/service/{service_id}", list_service_incidents, methods=["GET"]),
    Route("/api/incidents/user/{user_id}", list_user_incidents, methods=["GET"]),
    Route("/api/incidents/status/{status}", list_status_incidents, methods=["GET"]),
    Route("/api/incidents/{incident_id}/assign", assign_incident, methods=["POST"]),
    Route(
        "/api/incidents/{incident_id}/assignments", list_incident_assignments, methods=["GET"]
    ),
    Route("/api/incidents/{incident_id}/media", attach_media, methods=["POST"]),
    Route("/api/incidents/{incident_id}", get_incident, methods=["GET"]),
    Route("/api/incidents/{incident_id}", update_incident, methods=["PATCH"]),
    Route("/api/assignments/{assignment_id}", respond_to_assignment, methods=["PATCH"]),
]

"""HTTP route handlers for emergency services.

Routes:
- GET   /api/emergency-services          → All services
- POST  /api/emergency-services          → Register a service
- GET   /api/emergency-services/{code}   → Service by code (e.g. POLICE)
- PATCH /api/emergency-services/id/{id}  → Update a service
"""

import logging

from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from crisiscommand.http import not_found, parse_body
from crisiscommand.services.models import (
    EmergencyService,
    EmergencyServiceUpdate,
    NewEmergencyService,
)
from crisiscommand.services.store import ServiceStore

logger = logging.getLogger(__name__)


async def list_services(request: Request) -> Response:
    """Return every emergency service."""
    async with ServiceStore() as store:
        services = await store.list_all()
    return JSONResponse([s.to_api() for s in services])


async def create_service(request: Request) -> Response:
    """Register a new emergency service."""
    data = await parse_body(request, NewEmergencyService, "service")
    async with ServiceStore() as store:
        created = await store.create(EmergencyService.model_validate(data.model_dump()))
    return JSONResponse(created.to_api(), status_code=201)


async def get_service_by_code(request: Request) -> Response:
    """Return one service by its code."""
    async with ServiceStore() as store:
        service = await store.get_by_code(request.path_params["code"])
    if service is None:
        return not_found("Emergency service")
    return JSONResponse(service.to_api())


async def update_service(request: Request) -> Response:
    """Apply a partial update to a service."""
    data = await parse_body(request, EmergencyServiceUpdate, "service")
    async with ServiceStore() as store:
        updated = await store.patch(
            request.path_params["service_id"], data.model_dump(exclude_unset=True)
        )
    if updated is None:
        return not_found("Emergency service")
    return JSONResponse(updated.to_api())


routes = [
    Route("/api/emergency-services", list_services, methods=["GET"]),
    Route("/api/emergency-services", create_service, methods=["POST"]),
    Route("/api/emergency-services/id/{service_id}", update_service, methods=["PATCH"]),
    Route("/api/emergency-services/{code}", get_service_by_code, methods=["GET"]),
]

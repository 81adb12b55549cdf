"""HTTP route handlers for emergency units.

Routes:
- GET    /api/emergency-units?serviceId=&status=           → Units, optionally filtered
- POST   /api/emergency-units                              → Register a unit
- GET    /api/emergency-units/service/{service_id}         → Units of a service
- GET    /api/emergency-units/service/{service_id}/available → Units free to dispatch
- PATCH  /api/emergency-units/{unit_id}                    → Update position, status, ...
- DELETE /api/emergency-units/{unit_id}                    → Remove a unit
"""

import logging

from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from crisiscommand.http import not_found, parse_body
from crisiscommand.units.models import EmergencyUnit, EmergencyUnitUpdate, NewEmergencyUnit
from crisiscommand.units.store import UnitStore

logger = logging.getLogger(__name__)


async def list_units(request: Request) -> Response:
    """Return units, filtered by ``serviceId`` and ``status`` when given."""
    service_id = request.query_params.get("serviceId")
    status = request.query_params.get("status")
    async with UnitStore() as store:
        if service_id:
            units = await store.list_by_service(service_id, status=status)
        else:
            units = await store.list_all(status=status)
    return JSONResponse([u.to_api() for u in units])


async def create_unit(request: Request) -> Response:
    """Register a new unit; it starts out available."""
    data = await parse_body(request, NewEmergencyUnit, "unit")
    async with UnitStore() as store:
        created = await store.create(EmergencyUnit.model_validate(data.model_dump()))
    logger.info("Unit %s registered for service %s", created.call_sign, created.service_id)
    return JSONResponse(created.to_api(), status_code=201)


async def list_service_units(request: Request) -> Response:
    """Return every unit of a service."""
    async with UnitStore() as store:
        units = await store.list_by_service(request.path_params["service_id"])
    return JSONResponse([u.to_api() for u in units])


async def list_available_units(request: Request) -> Response:
    """Return the active, available units of a service."""
    async with UnitStore() as store:
        units = await store.list_available(request.path_params["service_id"])
    return JSONResponse([u.to_api() for u in units])


async def update_unit(request: Request) -> Response:
    """Apply a partial update to a unit."""
    data = await parse_body(request, EmergencyUnitUpdate, "unit")
    async with UnitStore() as store:
        updated = await store.patch(
            request.path_params["unit_id"], data.model_dump(exclude_unset=True)
        )
    if updated is None:
        return not_found("Unit")
    return JSONResponse(updated.to_api())


async def delete_unit(request: Request) -> Response:
    """Remove a unit."""
    unit_id = request.path_params["unit_id"]
    async with UnitStore() as store:
        deleted = await store.delete(unit_id)
    if not deleted:
        return not_found("Unit")
    logger.info("Unit %s deleted", unit_id)
    return Response(status_code=204)


routes = [
    Route("/api/emergency-units", list_units, methods=["GET"]),
    Route("/api/emergency-units", create_unit, methods=["POST"]),
    Route(
        "/api/emergency-units/service/{service_id}/available",
        list_available_units,
        methods=["GET"],
    ),
    Route("/api/emergency-units/service/{service_id}", list_service_units, methods=["GET"]),
    Route("/api/emergency-units/{unit_id}", update_unit, methods=["PATCH"]),
    Route("/api/emergency-units/{unit_id}", delete_unit, methods=["DELETE"]),
]

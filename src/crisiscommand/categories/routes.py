"""HTTP route handlers for incident categories.

Routes:
- GET   /api/incident-categories/{service_id}    → Categories of a service
- POST  /api/incident-categories                 → Define a category
- PATCH /api/incident-categories/id/{category_id} → Update a category
"""

from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from crisiscommand.categories.models import (
    IncidentCategory,
    IncidentCategoryUpdate,
    NewIncidentCategory,
)
from crisiscommand.categories.store import CategoryStore
from crisiscommand.http import not_found, parse_body


async def list_categories(request: Request) -> Response:
    async with CategoryStore() as store:
        categories = await store.list_for_service(request.path_params["service_id"])
    return JSONResponse([c.to_api() for c in categories])


async def create_category(request: Request) -> Response:
    data = await parse_body(request, NewIncidentCategory, "category")
    async with CategoryStore() as store:
        created = await store.create(IncidentCategory.model_validate(data.model_dump()))
    return JSONResponse(created.to_api(), status_code=201)


async def update_category(request: Request) -> Response:
    data = await parse_body(request, IncidentCategoryUpdate, "category")
    async with CategoryStore() as store:
        updated = await store.patch(
            request.path_params["category_id"], data.model_dump(exclude_unset=True)
        )
    if updated is None:
        return not_found("Category")
    return JSONResponse(updated.to_api())


routes = [
    Route("/api/incident-categories", create_category, methods=["POST"]),
    Route("/api/incident-categories/id/{category_id}", update_category, methods=["PATCH"]),
    Route("/api/incident-categories/{service_id}", list_categories, methods=["GET"]),
]

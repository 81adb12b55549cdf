"""HTTP route handlers for users.

Routes:
- POST   /api/users                     → Register a user
- GET    /api/users/phone/{phone}       → User by phone number
- GET    /api/users/service/{service_id} → Users of a service
- GET    /api/users/role/{role}         → Users with a role
- GET    /api/users/{user_id}           → One user
- PATCH  /api/users/{user_id}           → Update a profile
- DELETE /api/users/{user_id}           → Remove a user
- GET    /api/users/{user_id}/assignments → Responder's assignments
"""

import logging

from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from crisiscommand.http import error, not_found, parse_body
from crisiscommand.incidents.store import AssignmentStore
from crisiscommand.users.models import NewUser, User, UserUpdate
from crisiscommand.users.store import UserStore

logger = logging.getLogger(__name__)


async def create_user(request: Request) -> Response:
    """Register a user. Phone numbers are unique."""
    data = await parse_body(request, NewUser, "user")
    async with UserStore() as store:
        existing = await store.get_by_phone(data.phone_number)
        if existing is not None:
            return error(
                "Phone number already registered", status_code=409, existingId=existing.id
            )
        created = await store.create(User.model_validate(data.model_dump()))
    logger.info("Registered %s user %s", created.role, created.id)
    return JSONResponse(created.to_api(), status_code=201)


async def get_user(request: Request) -> Response:
    """Return one user."""
    async with UserStore() as store:
        user = await store.get(request.path_params["user_id"])
    if user is None:
        return not_found("User")
    return JSONResponse(user.to_api())


async def get_user_by_phone(request: Request) -> Response:
    """Return the user registered with a phone number."""
    async with UserStore() as store:
        user = await store.get_by_phone(request.path_params["phone"])
    if user is None:
        return not_found("User")
    return JSONResponse(user.to_api())


async def update_user(request: Request) -> Response:
    """Apply a partial profile update."""
    data = await parse_body(request, UserUpdate, "user")
    async with UserStore() as store:
        updated = await store.patch(
            request.path_params["user_id"], data.model_dump(exclude_unset=True)
        )
    if updated is None:
        return not_found("User")
    return JSONResponse(updated.to_api())


async def delete_user(request: Request) -> Response:
    """Remove a user."""
    async with UserStore() as store:
        deleted = await store.delete(request.path_params["user_id"])
    if not deleted:
        return not_found("User")
    return Response(status_code=204)


async def list_service_users(request: Request) -> Response:
    """Return the users affiliated with a service."""
    async with UserStore() as store:
        users = await store.list_by_service(request.path_params["service_id"])
    return JSONResponse([u.to_api() for u in users])


async def list_role_users(request: Request) -> Response:
    """Return the users with a role."""
    async with UserStore() as store:
        users = await store.list_by_role(request.path_params["role"])
    return JSONResponse([u.to_api() for u in users])


async def list_user_assignments(request: Request) -> Response:
    """Return the assignments given to a responder, newest first."""
    async with AssignmentStore() as store:
        assignments = await store.list_for_responder(request.path_params["user_id"])
    return JSONResponse([a.to_api() for a in assignments])


routes = [
    Route("/api/users", create_user, methods=["POST"]),
    Route("/api/users/phone/{phone}", get_user_by_phone, methods=["GET"]),
    Route("/api/users/service/{service_id}", list_service_users, methods=["GET"]),
    Route("/api/users/role/{role}", list_role_users, methods=["GET"]),
    Route("/api/users/{user_id}/assignments", list_user_assignments, methods=["GET"]),
    Route("/api/users/{user_id}", get_user, methods=["GET"]),
    Route("/api/users/{user_id}", update_user, methods=["PATCH"]),
    Route("/api/users/{user_id}", delete_user, methods=["DELETE"]),
]

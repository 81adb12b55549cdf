"""HTTP route handlers for notifications.

Routes:
- GET   /api/notifications/user/{user_id}       → A user's notifications
- GET   /api/notifications/service/{service_id} → A service's notifications
- POST  /api/notifications                      → Create and push a notification
- PATCH /api/notifications/{notification_id}/read → Mark read
"""

from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from crisiscommand.http import not_found, parse_body
from crisiscommand.notifications.models import NewNotification
from crisiscommand.notifications.operations import create_notification
from crisiscommand.notifications.store import NotificationStore


async def list_user_notifications(request: Request) -> Response:
    """Return a user's notifications, newest first."""
    async with NotificationStore() as store:
        notifications = await store.list_for_user(request.path_params["user_id"])
    return JSONResponse([n.to_api() for n in notifications])


async def list_service_notifications(request: Request) -> Response:
    """Return a service's notifications, newest first."""
    async with NotificationStore() as store:
        notifications = await store.list_for_service(request.path_params["service_id"])
    return JSONResponse([n.to_api() for n in notifications])


async def post_notification(request: Request) -> Response:
    data = await parse_body(request, NewNotification, "notification")
    created = await create_notification(data)
    return JSONResponse(created, status_code=201)


async def mark_notification_read(request: Request) -> Response:
    async with NotificationStore() as store:
        notification = await store.mark_read(request.path_params["notification_id"])
    if notification is None:
        return not_found("Notification")
    return JSONResponse(notification.to_api())


routes = [
    Route("/api/notifications", post_notification, methods=["POST"]),
    Route("/api/notifications/user/{user_id}", list_user_notifications, methods=["GET"]),
    Route(
        "/api/notifications/service/{service_id}", list_service_notifications, methods=["GET"]
    ),
    Route(
        "/api/notifications/{notification_id}/read", mark_notification_read, methods=["PATCH"]
    ),
]

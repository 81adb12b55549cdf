"""HTTP and WebSocket handlers for chat.

Routes:
- GET   /api/incidents/{incident_id}/messages → Incident thread (oldest first)
- POST  /api/incidents/{incident_id}/messages → Post to an incident thread
- GET   /api/services/{service_id}/messages   → Service-wide channel
- PATCH /api/messages/{message_id}/read       → Mark a message read
- WS    /ws?userId=...                        → Realtime events

Socket frames from the client (JSON):
- ``{"type": "chat_message", "incidentId", "content", "senderId"}``
- ``{"type": "subscribe", "topic": "messages:<incident_id>"}``
- ``{"type": "unsubscribe", "topic": ...}``
- ``{"type": "ping"}`` → ``{"type": "pong"}``
"""

import json
import logging
from collections.abc import Callable

from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route, WebSocketRoute
from starlette.websockets import WebSocket, WebSocketDisconnect

from crisiscommand import realtime
from crisiscommand.auth import current_user_id
from crisiscommand.chat.models import NewChatMessage
from crisiscommand.chat.operations import ANONYMOUS_SENDER, send_message
from crisiscommand.chat.store import MessageStore
from crisiscommand.http import BadRequest, invalid, not_found, read_json

logger = logging.getLogger(__name__)


async def list_incident_messages(request: Request) -> Response:
    """Return the chat thread of an incident."""
    async with MessageStore() as store:
        messages = await store.list_for_incident(request.path_params["incident_id"])
    return JSONResponse([m.to_api() for m in messages])


async def post_incident_message(request: Request) -> Response:
    """Post a message to an incident thread."""
    body = await read_json(request)
    sender_id = body.pop("senderId", None) or current_user_id(ANONYMOUS_SENDER)
    try:
        data = NewChatMessage.model_validate(
            {**body, "incidentId": request.path_params["incident_id"]}
        )
    except ValidationError as exc:
        raise BadRequest(invalid("Invalid message data", exc)) from None

    message = await send_message(data, sender_id)
    return JSONResponse(message, status_code=201)


async def list_service_messages(request: Request) -> Response:
    """Return a service-wide chat channel."""
    async with MessageStore() as store:
        messages = await store.list_for_service(request.path_params["service_id"])
    return JSONResponse([m.to_api() for m in messages])


async def mark_message_read(request: Request) -> Response:
    """Flag a message as read."""
    async with MessageStore() as store:
        message = await store.mark_read(request.path_params["message_id"])
    if message is None:
        return not_found("Message")
    return JSONResponse(message.to_api())


async def _handle_frame(
    websocket: WebSocket,
    key: str,
    frame: dict,
    subscriptions: dict[str, Callable[[], None]],
) -> None:
    """Act on one client frame."""
    frame_type = frame.get("type")

    if frame_type == "ping":
        if not key.startswith(realtime.ANONYMOUS_PREFIX):
            realtime.manager.touch(key)
        await websocket.send_json({"type": "pong"})

    elif frame_type == "chat_message":
        try:
            data = NewChatMessage.model_validate(
                {
                    "incidentId": frame.get("incidentId"),
                    "message": frame.get("content", ""),
                    "messageType": "text",
                }
            )
        except ValidationError as exc:
            logger.warning(
                "Ignoring invalid chat message from %s (%d errors)", key, exc.error_count()
            )
            return
        sender_id = frame.get("senderId") or (
            ANONYMOUS_SENDER if key.startswith(realtime.ANONYMOUS_PREFIX) else key
        )
        await send_message(data, sender_id)

    elif frame_type == "subscribe":
        topic = frame.get("topic")
        if not isinstance(topic, str) or not topic or topic in subscriptions:
            return

        async def deliver(snapshot: list[dict]) -> None:
            await websocket.send_json({"type": "snapshot", "topic": topic, "data": snapshot})

        subscriptions[topic] = realtime.hub.subscribe(topic, deliver)

    elif frame_type == "unsubscribe":
        unsubscribe = subscriptions.pop(frame.get("topic", ""), None)
        if unsubscribe:
            unsubscribe()

    else:
        logger.debug("Ignoring WebSocket frame of type %r from %s", frame_type, key)


async def chat_socket(websocket: WebSocket) -> None:
    """Realtime connection: chat messages in, events out."""
    user_id = websocket.query_params.get("userId") or None
    key = await realtime.manager.connect(websocket, user_id)
    subscriptions: dict[str, Callable[[], None]] = {}

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            try:
                frame = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError):
                logger.warning("Malformed WebSocket frame from %s", key)
                continue
            if not isinstance(frame, dict):
                logger.warning("Non-object WebSocket frame from %s", key)
                continue
            await _handle_frame(websocket, key, frame, subscriptions)
    except WebSocketDisconnect:
        pass
    finally:
        for unsubscribe in subscriptions.values():
            unsubscribe()
        realtime.manager.disconnect(key, websocket)


routes = [
    Route("/api/incidents/{incident_id}/messages", list_incident_messages, methods=["GET"]),
    Route("/api/incidents/{incident_id}/messages", post_incident_message, methods=["POST"]),
    Route("/api/services/{service_id}/messages", list_service_messages, methods=["GET"]),
    Route("/api/messages/{message_id}/read", mark_message_read, methods=["PATCH"]),
    WebSocketRoute("/ws", chat_socket),
]

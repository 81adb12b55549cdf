"""In-process realtime fan-out over WebSockets.

Two mechanisms:

- :class:`ConnectionManager` tracks one open socket per user (plus
  anonymous sockets) and pushes events to everyone or to one user.
- :class:`TopicHub` holds per-topic callbacks. Publishing hands every
  subscriber a fresh snapshot of the topic (e.g. all messages on an
  incident), mirroring a hosted database's value subscriptions.

Delivery is best effort: no ordering, retry, or backpressure. A socket
that fails on send is dropped.
"""

import inspect
import logging
import uuid
from collections import defaultdict
from collections.abc import Awaitable, Callable
from datetime import datetime

from cachetools import TTLCache
from starlette.websockets import WebSocket, WebSocketDisconnect

from crisiscommand.core.models import utcnow

logger = logging.getLogger(__name__)

Snapshot = list[dict]
Callback = Callable[[Snapshot], Awaitable[None] | None]
SnapshotLoader = Callable[[], Awaitable[Snapshot]]

ANONYMOUS_PREFIX = "anon:"


def incidents_topic(service_id: str) -> str:
    """Topic carrying all incidents of a service."""
    return f"incidents:{service_id}"


def messages_topic(incident_id: str) -> str:
    """Topic carrying the chat thread of an incident."""
    return f"messages:{incident_id}"


def service_messages_topic(service_id: str) -> str:
    """Topic carrying a service-wide chat channel."""
    return f"service-messages:{service_id}"


def notifications_topic(user_id: str) -> str:
    """Topic carrying a user's notifications."""
    return f"notifications:{user_id}"


class ConnectionManager:
    """Open WebSocket connections keyed by user ID.

    A user reconnecting replaces their previous socket. Presence
    (last-seen time) expires after ``presence_ttl`` seconds without a
    ping.
    """

    def __init__(self, presence_ttl: int = 300) -> None:
        self._connections: dict[str, WebSocket] = {}
        self._presence: TTLCache[str, datetime] = TTLCache(maxsize=10_000, ttl=presence_ttl)

    async def connect(self, websocket: WebSocket, user_id: str | None = None) -> str:
        """Accept a socket and register it.

        Returns:
            The connection key: the user ID, or a generated anonymous key
        """
        await websocket.accept()
        key = user_id or f"{ANONYMOUS_PREFIX}{uuid.uuid4()}"
        self._connections[key] = websocket
        if user_id:
            self.touch(user_id)
        logger.info("WebSocket connected: %s (%d open)", key, len(self._connections))
        return key

    def disconnect(self, key: str, websocket: WebSocket | None = None) -> None:
        """Forget a connection.

        When ``websocket`` is given, only removes the entry if it is still
        that socket (the user may have reconnected meanwhile).
        """
        current = self._connections.get(key)
        if current is None or (websocket is not None and current is not websocket):
            return
        del self._connections[key]
        self._presence.pop(key, None)
        logger.info("WebSocket disconnected: %s (%d open)", key, len(self._connections))

    def touch(self, user_id: str) -> None:
        """Record that a user was just seen."""
        self._presence[user_id] = utcnow()

    def online_users(self) -> dict[str, datetime]:
        """Users seen within the presence TTL, with their last-seen time."""
        self._presence.expire()
        return dict(self._presence.items())

    def is_connected(self, key: str) -> bool:
        """Whether a connection is open under this key."""
        return key in self._connections

    @property
    def connection_count(self) -> int:
        """Number of open connections."""
        return len(self._connections)

    async def send_to(self, user_id: str, event: dict) -> bool:
        """Send an event to one user's socket.

        Returns:
            True if the user was connected and the send succeeded
        """
        websocket = self._connections.get(user_id)
        if websocket is None:
            return False
        return await self._send(user_id, websocket, event)

    async def broadcast(self, event: dict) -> int:
        """Send an event to every open socket.

        Returns:
            Number of sockets the event was delivered to
        """
        delivered = 0
        for key, websocket in list(self._connections.items()):
            if await self._send(key, websocket, event):
                delivered += 1
        return delivered

    async def _send(self, key: str, websocket: WebSocket, event: dict) -> bool:
        try:
            await websocket.send_json(event)
        except (WebSocketDisconnect, RuntimeError, OSError):
            logger.debug("Dropping dead WebSocket %s", key, exc_info=True)
            self.disconnect(key, websocket)
            return False
        return True


class TopicHub:
    """Per-topic snapshot subscriptions.

    Usage::

        unsubscribe = hub.subscribe(messages_topic(incident_id), on_messages)
        ...
        unsubscribe()
    """

    def __init__(self) -> None:
        self._subscribers: defaultdict[str, list[Callback]] = defaultdict(list)

    def subscribe(self, topic: str, callback: Callback) -> Callable[[], None]:
        """Register a callback for a topic.

        Returns:
            A function that removes the subscription (safe to call twice)
        """
        self._subscribers[topic].append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(topic)
            if callbacks and callback in callbacks:
                callbacks.remove(callback)
                if not callbacks:
                    del self._subscribers[topic]

        return unsubscribe

    def has_subscribers(self, topic: str) -> bool:
        """Whether anyone is listening on a topic."""
        return bool(self._subscribers.get(topic))

    async def publish(self, topic: str, load: SnapshotLoader) -> int:
        """Load the topic's snapshot and hand it to every subscriber.

        The loader only runs when the topic has subscribers. A failing
        callback is logged and does not stop delivery to the others.

        Returns:
            Number of callbacks that received the snapshot
        """
        callbacks = list(self._subscribers.get(topic, ()))
        if not callbacks:
            return 0

        snapshot = await load()
        delivered = 0
        for callback in callbacks:
            try:
                result = callback(snapshot)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Subscriber failed on topic %s", topic)
                continue
            delivered += 1
        return delivered


# Process-wide instances used by the server and the operation modules
manager = ConnectionManager()
hub = TopicHub()

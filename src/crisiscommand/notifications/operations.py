"""Notification delivery: persist, then push to whoever is listening."""

import logging

from crisiscommand import realtime
from crisiscommand.notifications.models import NewNotification, Notification
from crisiscommand.notifications.store import NotificationStore

logger = logging.getLogger(__name__)


async def create_notification(data: NewNotification) -> dict:
    """Store a notification and push it in realtime.

    A notification with a recipient goes to that user's open socket and
    topic subscribers. A broadcast without a recipient goes to every
    open socket.

    Returns:
        The created notification
    """
    notification = Notification.model_validate(data.model_dump())

    async with NotificationStore() as store:
        created = await store.create(notification)

    event = {"type": "notification", "notification": created.to_api()}

    if created.recipient_id:
        recipient = created.recipient_id
        delivered = await realtime.manager.send_to(recipient, event)
        logger.debug("Notification %s pushed to %s: %s", created.id, recipient, delivered)

        async def load() -> list[dict]:
            async with NotificationStore() as s:
                notifications = await s.list_for_user(recipient)
            return [n.to_api() for n in notifications]

        await realtime.hub.publish(realtime.notifications_topic(recipient), load)
    elif created.type == "broadcast":
        count = await realtime.manager.broadcast(event)
        logger.info("Broadcast notification %s to %d connections", created.id, count)

    return created.to_api()

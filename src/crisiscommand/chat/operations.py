"""Chat message delivery.

Messages are persisted first, then broadcast to every open socket as a
``new_message`` event, and the thread's topic subscribers receive the
refreshed thread.
"""

import logging

from crisiscommand import realtime
from crisiscommand.chat.models import ChatMessage, NewChatMessage
from crisiscommand.chat.store import MessageStore

logger = logging.getLogger(__name__)

ANONYMOUS_SENDER = "anonymous"


async def send_message(data: NewChatMessage, sender_id: str = ANONYMOUS_SENDER) -> dict:
    """Persist a chat message and fan it out.

    Args:
        data: Validated message payload
        sender_id: User ID of the sender

    Returns:
        The created message
    """
    message = ChatMessage.model_validate({**data.model_dump(), "sender_id": sender_id})

    async with MessageStore() as store:
        created = await store.create(message)

    logger.info(
        "Message %s from %s on %s channel", created.id, sender_id, created.channel_type
    )

    await realtime.manager.broadcast({"type": "new_message", "message": created.to_api()})

    if created.incident_id:
        incident_id = created.incident_id

        async def load_thread() -> list[dict]:
            async with MessageStore() as s:
                messages = await s.list_for_incident(incident_id)
            return [m.to_api() for m in messages]

        await realtime.hub.publish(realtime.messages_topic(incident_id), load_thread)

    if created.service_id:
        service_id = created.service_id

        async def load_channel() -> list[dict]:
            async with MessageStore() as s:
                messages = await s.list_for_service(service_id)
            return [m.to_api() for m in messages]

        await realtime.hub.publish(realtime.service_messages_topic(service_id), load_channel)

    return created.to_api()

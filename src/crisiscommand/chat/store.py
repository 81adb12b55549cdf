"""Async Cosmos DB operations for chat message documents."""

from crisiscommand.chat.models import ChatMessage
from crisiscommand.core.cosmos import DocumentStore


class MessageStore(DocumentStore[ChatMessage]):
    """Chat messages. Listings are oldest first, the order a thread reads in."""

    container_name = "chat-messages"
    model = ChatMessage

    async def list_for_incident(self, incident_id: str) -> list[ChatMessage]:
        """Messages on an incident thread."""
        return await self.query({"incident_id": incident_id}, order_by="created_at")

    async def list_for_service(self, service_id: str) -> list[ChatMessage]:
        """Messages on a service-wide channel."""
        return await self.query({"service_id": service_id}, order_by="created_at")

    async def mark_read(self, message_id: str) -> ChatMessage | None:
        """Flag a message as read. Returns None if it does not exist."""
        return await self.patch(message_id, {"is_read": True})

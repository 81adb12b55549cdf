"""Async Cosmos DB operations for notification documents."""

from crisiscommand.core.cosmos import DocumentStore
from crisiscommand.notifications.models import Notification


class NotificationStore(DocumentStore[Notification]):
    """Notifications, listed newest first."""

    container_name = "notifications"
    model = Notification

    async def list_for_user(self, user_id: str) -> list[Notification]:
        """Notifications addressed to a user."""
        return await self.query(
            {"recipient_id": user_id}, order_by="created_at", descending=True
        )

    async def list_for_service(self, service_id: str) -> list[Notification]:
        """Notifications addressed to a service."""
        return await self.query(
            {"service_id": service_id}, order_by="created_at", descending=True
        )

    async def mark_read(self, notification_id: str) -> Notification | None:
        """Flag a notification as read. Returns None if it does not exist."""
        return await self.patch(notification_id, {"is_read": True})

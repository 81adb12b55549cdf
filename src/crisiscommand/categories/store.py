"""Async Cosmos DB operations for incident category documents."""

from crisiscommand.categories.models import IncidentCategory
from crisiscommand.core.cosmos import DocumentStore


class CategoryStore(DocumentStore[IncidentCategory]):
    """Incident categories per emergency service."""

    container_name = "incident-categories"
    model = IncidentCategory

    async def list_for_service(self, service_id: str) -> list[IncidentCategory]:
        """Categories of a service in display order."""
        return await self.query({"service_id": service_id}, order_by="sort_order")

"""Async Cosmos DB operations for emergency service documents."""

from crisiscommand.core.cosmos import DocumentStore
from crisiscommand.services.models import EmergencyService


class ServiceStore(DocumentStore[EmergencyService]):
    """Emergency services, looked up by ID or by their short code."""

    container_name = "emergency-services"
    model = EmergencyService

    async def get_by_code(self, code: str) -> EmergencyService | None:
        """Find a service by code (e.g. "POLICE"). Codes are stored upper-case."""
        results = await self.query({"code": code.upper()}, max_items=1)
        return results[0] if results else None

    async def list_all(self) -> list[EmergencyService]:
        """All services in registration order."""
        return await self.query(order_by="created_at")

"""Async Cosmos DB operations for emergency unit documents."""

from crisiscommand.core.cosmos import DocumentStore
from crisiscommand.units.models import EmergencyUnit


class UnitStore(DocumentStore[EmergencyUnit]):
    """Emergency units, listed by service and availability."""

    container_name = "emergency-units"
    model = EmergencyUnit
    touch_on_update = True

    async def list_all(self, *, status: str | None = None) -> list[EmergencyUnit]:
        """Every unit, optionally only those in one status."""
        filters = {"status": status} if status else None
        return await self.query(filters, order_by="call_sign")

    async def list_by_service(
        self, service_id: str, *, status: str | None = None
    ) -> list[EmergencyUnit]:
        """Units belonging to a service, optionally only those in one status."""
        filters: dict = {"service_id": service_id}
        if status:
            filters["status"] = status
        return await self.query(filters, order_by="call_sign")

    async def list_available(self, service_id: str) -> list[EmergencyUnit]:
        """Active units of a service that can take a call right now."""
        return await self.query(
            {"service_id": service_id, "status": "available", "is_active": True},
            order_by="call_sign",
        )

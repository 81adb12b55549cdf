"""Async Cosmos DB operations for user documents."""

from crisiscommand.core.cosmos import DocumentStore
from crisiscommand.users.models import User, normalize_phone


class UserStore(DocumentStore[User]):
    """Users, looked up by ID, phone number, service, or role."""

    container_name = "users"
    model = User
    touch_on_update = True

    async def get_by_phone(self, phone_number: str) -> User | None:
        """Find the user registered with a phone number."""
        results = await self.query({"phone_number": normalize_phone(phone_number)}, max_items=1)
        return results[0] if results else None

    async def list_by_service(self, service_id: str) -> list[User]:
        """Users affiliated with an emergency service."""
        return await self.query({"service_id": service_id}, order_by="created_at")

    async def list_by_role(self, role: str) -> list[User]:
        """Users with the given role."""
        return await self.query({"role": role}, order_by="created_at")

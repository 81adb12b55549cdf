"""Async Cosmos DB operations for the audit log."""

from typing import Any

from crisiscommand.audit.models import AuditLog
from crisiscommand.auth import get_current_client
from crisiscommand.core.cosmos import DocumentStore

DEFAULT_AUDIT_LIMIT = 100


class AuditStore(DocumentStore[AuditLog]):
    """Append-only audit records."""

    container_name = "audit-logs"
    model = AuditLog

    async def record(
        self,
        user_id: str | None,
        action: str,
        entity_type: str | None = None,
        entity_id: str | None = None,
        details: dict[str, Any] | None = None,
        *,
        service_id: str | None = None,
    ) -> AuditLog:
        """Append an audit record.

        Inside an HTTP request the client address and user agent are
        recorded too.
        """
        client = get_current_client()
        entry = AuditLog(
            user_id=user_id,
            service_id=service_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details or {},
            ip_address=client.ip_address if client else None,
            user_agent=client.user_agent if client else None,
        )
        return await self.create(entry)

    async def list_recent(self, limit: int = DEFAULT_AUDIT_LIMIT) -> list[AuditLog]:
        """Most recent records first."""
        return await self.query(order_by="created_at", descending=True, max_items=limit)

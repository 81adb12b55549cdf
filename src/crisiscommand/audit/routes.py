"""HTTP route handlers for the audit log.

Routes:
- GET /api/audit-logs?limit=N → Most recent records (default 100)
"""

from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from crisiscommand.audit.store import DEFAULT_AUDIT_LIMIT, AuditStore
from crisiscommand.http import error

MAX_AUDIT_LIMIT = 1000


async def list_audit_logs(request: Request) -> Response:
    """Return the most recent audit records."""
    raw = request.query_params.get("limit")
    limit = DEFAULT_AUDIT_LIMIT
    if raw is not None:
        try:
            limit = int(raw)
        except ValueError:
            return error("limit must be an integer")
        if not 1 <= limit <= MAX_AUDIT_LIMIT:
            return error(f"limit must be between 1 and {MAX_AUDIT_LIMIT}")

    async with AuditStore() as store:
        entries = await store.list_recent(limit)
    return JSONResponse([e.to_api() for e in entries])


routes = [
    Route("/api/audit-logs", list_audit_logs, methods=["GET"]),
]

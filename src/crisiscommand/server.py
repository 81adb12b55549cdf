"""CrisisCommand HTTP and WebSocket server.

Run locally::

    uv run crisis-server

Or with uvicorn::

    uv run uvicorn crisiscommand.server:app --host 0.0.0.0 --port 8000

Without ``COSMOS_ENDPOINT`` every store keeps its documents in memory,
which is enough for local development.
"""

import contextlib
import logging
import os

from dotenv import load_dotenv
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from crisiscommand import metrics, realtime
from crisiscommand.audit.routes import routes as audit_routes
from crisiscommand.auth import IdentityMiddleware
from crisiscommand.categories.routes import routes as category_routes
from crisiscommand.chat.routes import routes as chat_routes
from crisiscommand.core.config import get_cors_origins, get_presence_ttl
from crisiscommand.core.models import utcnow
from crisiscommand.http import (
    BadRequest,
    bad_request_handler,
    error,
    server_error_handler,
    validation_error_handler,
)
from crisiscommand.incidents.routes import routes as incident_routes
from crisiscommand.notifications.routes import routes as notification_routes
from crisiscommand.seed import seed_emergency_services
from crisiscommand.services.routes import routes as service_routes
from crisiscommand.services.store import ServiceStore
from crisiscommand.units.routes import routes as unit_routes
from crisiscommand.users.routes import routes as user_routes

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Logging: module-level so it runs on import (uvicorn reimports for the app)
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
# Silence Azure SDK HTTP-level noise (request/response headers)
logging.getLogger("azure.core.pipeline.policies.http_logging_policy").setLevel(logging.WARNING)
logging.getLogger("azure.cosmos._cosmos_http_logging_policy").setLevel(logging.WARNING)
logging.getLogger("azure.identity").setLevel(logging.WARNING)

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

load_dotenv()

realtime.manager = realtime.ConnectionManager(presence_ttl=get_presence_ttl())


# ---------------------------------------------------------------------------
# Server-level routes
# ---------------------------------------------------------------------------


async def performance_metrics(request: Request) -> Response:
    """Metrics over ``timeframe`` (1h, 24h, 7d, 30d) for one or all services."""
    result = await metrics.performance_metrics(
        request.query_params.get("timeframe", metrics.DEFAULT_TIMEFRAME),
        request.query_params.get("serviceId") or None,
    )
    if "error" in result:
        return error(result["error"])
    return JSONResponse(result["metrics"])


async def online_users(request: Request) -> Response:
    """Users seen over a WebSocket within the presence window."""
    users = realtime.manager.online_users()
    return JSONResponse(
        {
            "users": [
                {"userId": user_id, "lastSeen": seen.isoformat()}
                for user_id, seen in sorted(users.items())
            ],
            "connections": realtime.manager.connection_count,
        }
    )


async def health(request: Request) -> JSONResponse:
    """Health check endpoint."""
    async with ServiceStore() as store:
        services = await store.list_all()
    return JSONResponse(
        {
            "status": "ok",
            "service": "crisiscommand",
            "timestamp": utcnow().isoformat(),
            "version": os.getenv("BUILD_VERSION", "dev"),
            "services": [s.code for s in services],
        }
    )


# ---------------------------------------------------------------------------
# ASGI App assembly
# ---------------------------------------------------------------------------


@contextlib.asynccontextmanager
async def lifespan(app: Starlette):
    """Seed the service directory before serving requests."""
    created = await seed_emergency_services()
    if created:
        logger.info("Startup created %d emergency services", created)
    yield


routes = [
    Route("/api/health", health, methods=["GET"]),
    Route("/api/online-users", online_users, methods=["GET"]),
    Route("/api/performance-metrics", performance_metrics, methods=["GET"]),
    *service_routes,
    *user_routes,
    *incident_routes,
    *chat_routes,
    *unit_routes,
    *category_routes,
    *notification_routes,
    *audit_routes,
]

app = Starlette(
    routes=routes,
    lifespan=lifespan,
    exception_handlers={
        BadRequest: bad_request_handler,
        ValidationError: validation_error_handler,
        Exception: server_error_handler,
    },
    middleware=[
        Middleware(
            CORSMiddleware,
            allow_origins=get_cors_origins(),
            allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "X-User-Id", "X-User-Role"],
        ),
        Middleware(IdentityMiddleware),
    ],
)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Run the CrisisCommand server with uvicorn."""
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info("Starting CrisisCommand server on %s:%d", host, port)
    uvicorn.run(
        "crisiscommand.server:app",
        host=host,
        port=port,
        log_level="info",
    )

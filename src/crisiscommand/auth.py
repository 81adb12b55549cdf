"""Simulated caller identity for the HTTP API.

There is no credential verification: clients identify themselves with
``X-User-Id`` and ``X-User-Role`` headers. The identity is only used to
attribute audit records and to default sender/assigner IDs.
"""

import logging
from contextvars import ContextVar
from dataclasses import dataclass

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

USER_ID_HEADER = "x-user-id"
USER_ROLE_HEADER = "x-user-role"

# Context variables holding the caller and its client for the current request
_current_user: ContextVar["UserContext | None"] = ContextVar("current_user", default=None)
_current_client: ContextVar["RequestClient | None"] = ContextVar("current_client", default=None)


@dataclass(frozen=True)
class UserContext:
    """Caller identity taken from request headers."""

    user_id: str
    role: str = "citizen"

    @property
    def is_staff(self) -> bool:
        """Responders and admins, as opposed to reporting citizens."""
        return self.role in {"responder", "service_admin", "global_admin"}


@dataclass(frozen=True)
class RequestClient:
    """Where the current request came from, for audit records."""

    ip_address: str | None = None
    user_agent: str | None = None


def get_request_user(request: Request) -> UserContext | None:
    """Extract the caller from request headers, if identified."""
    user_id = request.headers.get(USER_ID_HEADER, "").strip()
    if not user_id:
        return None
    role = request.headers.get(USER_ROLE_HEADER, "").strip() or "citizen"
    return UserContext(user_id=user_id, role=role)


def get_current_user() -> UserContext | None:
    """Get the caller for the current request, or None if anonymous."""
    return _current_user.get()


def set_current_user(user: UserContext | None) -> None:
    """Set the caller for the current request."""
    _current_user.set(user)


def get_request_client(request: Request) -> RequestClient:
    """Client address and user agent of a request."""
    return RequestClient(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent") or None,
    )


def get_current_client() -> RequestClient | None:
    """Client of the current request, or None outside a request."""
    return _current_client.get()


def set_current_client(client: RequestClient | None) -> None:
    """Set the client of the current request."""
    _current_client.set(client)


def current_user_id(default: str) -> str:
    """The current caller's ID, or ``default`` when anonymous."""
    user = _current_user.get()
    return user.user_id if user else default


class IdentityMiddleware(BaseHTTPMiddleware):
    """Attach the header-supplied identity to every HTTP request."""

    async def dispatch(self, request, call_next):
        set_current_user(get_request_user(request))
        set_current_client(get_request_client(request))
        return await call_next(request)

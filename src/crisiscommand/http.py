"""Small helpers shared by the JSON route handlers."""

import json
import logging
from typing import TypeVar

from pydantic import BaseModel, ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class BadRequest(Exception):
    """Raised by :func:`parse_body` with a ready-made 400 response."""

    def __init__(self, response: JSONResponse) -> None:
        super().__init__(response.body)
        self.response = response


def error(message: str, status_code: int = 400, **extra) -> JSONResponse:
    """JSON error response: ``{"error": message, ...}``."""
    return JSONResponse({"error": message, **extra}, status_code=status_code)


def invalid(message: str, exc: ValidationError) -> JSONResponse:
    """400 response listing pydantic validation errors."""
    return error(message, details=exc.errors(include_url=False, include_context=False))


def not_found(what: str) -> JSONResponse:
    """404 response for a missing entity."""
    return error(f"{what} not found", status_code=404)


def result_response(result: dict, status_code: int = 200) -> JSONResponse:
    """Map an operation result to a response: ``{"error"}`` dicts become 404s."""
    if "error" in result:
        return error(result["error"], status_code=404)
    return JSONResponse(result, status_code=status_code)


async def read_json(request: Request) -> dict:
    """Read a JSON object body.

    Raises:
        BadRequest: If the body is not a JSON object
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequest(error("Invalid JSON body")) from None
    if not isinstance(body, dict):
        raise BadRequest(error("JSON body must be an object"))
    return body


async def parse_body(request: Request, model: type[ModelT], what: str) -> ModelT:
    """Read and validate a JSON body against ``model``.

    Raises:
        BadRequest: If the body is not JSON or fails validation
    """
    body = await read_json(request)
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise BadRequest(invalid(f"Invalid {what} data", exc)) from None


async def bad_request_handler(request: Request, exc: BadRequest) -> JSONResponse:
    """Starlette exception handler for :class:`BadRequest`."""
    return exc.response


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Starlette exception handler for validation failures raised by stores."""
    return invalid("Invalid data", exc)


async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and hide details from the client."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error("Server error", status_code=500)

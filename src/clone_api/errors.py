"""Error taxonomy and the handlers that render it as `{ok: false, error}` responses."""
import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class CloneApiError(Exception):
    """Base class for errors that map onto a specific HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "internal_error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CloneApiError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "invalid request"


class RateLimitError(CloneApiError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "rate_limited"


class NotFoundError(CloneApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "not_found"


class InternalError(CloneApiError):
    """Unexpected adapter or runtime failure; the message is exposed to the caller."""


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(content={"ok": False, "error": message}, status_code=status_code)


async def handle_clone_api_errors(request: Request, exc: CloneApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.message, exc.status_code)


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI's parameter validation failures as a 400 envelope."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return error_response("; ".join(messages) or "invalid request", status.HTTP_400_BAD_REQUEST)


async def handle_http_exceptions(request: Request, exc: StarletteHTTPException) -> Response:
    """Unmatched paths and methods collapse into a plain-text 404."""
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return PlainTextResponse("Not found", status_code=status.HTTP_404_NOT_FOUND)
    return error_response(str(exc.detail), exc.status_code)


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception as err:  # pylint: disable=broad-except
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response(str(err) or err.__class__.__name__, status.HTTP_500_INTERNAL_SERVER_ERROR)

"""
Error taxonomy and its HTTP mapping.

Services raise the typed errors below; :func:`register_exception_handlers`
maps each kind to its status code by class.  Clients always receive
``{"error": "<message>"}``.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class BlogAPIError(Exception):
    status_code: int = 500
    default_message: str = "internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BlogAPIError):
    status_code = 400
    default_message = "invalid input"

    def __init__(self, message: str | None = None, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class AuthenticationError(BlogAPIError):
    status_code = 401
    default_message = "authentication required"


class InvalidTokenError(AuthenticationError):
    """Any token failure: malformed, bad signature, expired or not yet valid."""

    default_message = "invalid or expired token"


class AuthorizationError(BlogAPIError):
    status_code = 403
    default_message = "permission denied"


class NotFoundError(BlogAPIError):
    status_code = 404
    default_message = "not found"


class ConflictError(BlogAPIError):
    # Duplicate username/email is reported as bad input.
    status_code = 400
    default_message = "resource already exists"


class InternalError(BlogAPIError):
    status_code = 500


def _error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "invalid input: " + "; ".join(parts)


async def blog_api_error_handler(request: Request, exc: BlogAPIError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc.message)
        return _error_response(exc.status_code, InternalError.default_message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return _error_response(exc.status_code, exc.message, headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _format_validation_errors(exc)
    logger.warning("Rejected input on %s %s: %s", request.method, request.url.path, message)
    return _error_response(400, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return _error_response(500, InternalError.default_message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BlogAPIError, blog_api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

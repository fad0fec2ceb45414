"""Service-layer failure kinds and their translation to HTTP responses.

Services raise one of the four kinds below with a stable machine-readable
``code``; handlers never build error responses themselves.  The exception
handlers registered by ``register_error_handlers`` render every failure as
``{"error": <code>, "message": <text>}``.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class; subclasses fix the HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, code: str, message: str = ""):
        super().__init__(message or code)
        self.code = code
        self.message = message or code


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthorizationError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if isinstance(exc, AuthorizationError):
        logger.warning("Denied %s %s: %s", request.method, request.url.path, exc.code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
    )


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "internal_error", "message": "Internal server error"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

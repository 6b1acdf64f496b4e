from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

logger = logging.getLogger(__name__)


class PortalError(Exception):
    """
    Erreur applicative : un code HTTP + un message renvoyé tel quel au client.
    """

    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PortalError):
    status_code = HTTP_400_BAD_REQUEST
    default_message = "Missing required fields"


class PayloadTooLargeError(ValidationError):
    status_code = HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_message = "File too large"


class AuthError(PortalError):
    status_code = HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized access attempt"


class NotFoundError(PortalError):
    status_code = HTTP_404_NOT_FOUND
    default_message = "File not found"


class UpstreamError(PortalError):
    """
    Échec d'un service externe (stockage, KV, auth).
    `message` reste générique, `detail` part seulement dans les logs.
    """

    def __init__(self, message: str | None = None, detail: str | None = None):
        super().__init__(message)
        self.detail = detail


def _error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    if isinstance(exc, UpstreamError):
        logger.error(
            "%s on %s: %s", exc.message, request.url.path, exc.detail or "no detail"
        )
    elif exc.status_code >= 500:
        logger.error("%s on %s", exc.message, request.url.path)
    return _error_response(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # 404 route inconnue, 405 mauvaise méthode... au même format que le reste
    return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Invalid request on %s: %s", request.url.path, exc.errors())
    return _error_response(HTTP_400_BAD_REQUEST, ValidationError.default_message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "%s on %s (500): %s", type(exc).__name__, request.url.path, exc, exc_info=exc
    )
    return _error_response(HTTP_500_INTERNAL_SERVER_ERROR, PortalError.default_message)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

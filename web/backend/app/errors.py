"""Translate domain failures into HTTP responses.

Every :class:`~devhub.errors.DevHubError` maps to exactly one status code.
Anything else becomes a generic 500; the underlying error text is logged,
never returned.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from devhub.errors import (
    Conflict,
    DeliveryFailed,
    DevHubError,
    Forbidden,
    Internal,
    NotFound,
    Unauthorized,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[DevHubError], int] = {
    ValidationFailed: status.HTTP_400_BAD_REQUEST,
    Unauthorized: status.HTTP_401_UNAUTHORIZED,
    Forbidden: status.HTTP_403_FORBIDDEN,
    NotFound: status.HTTP_404_NOT_FOUND,
    Conflict: status.HTTP_409_CONFLICT,
    DeliveryFailed: status.HTTP_502_BAD_GATEWAY,
    Internal: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: DevHubError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _field_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        # Drop the "body"/"query" prefix
        field = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc)
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": field, "message": message})
    return errors


def install_error_handlers(app: FastAPI) -> None:
    """Register the domain, validation and fallback handlers on ``app``."""

    @app.exception_handler(DevHubError)
    async def _domain_error(request: Request, exc: DevHubError) -> JSONResponse:
        code = status_for(exc)
        body: dict = {"message": exc.message}
        headers = None
        if isinstance(exc, ValidationFailed):
            body["errors"] = exc.errors
        elif isinstance(exc, Unauthorized):
            headers = {"WWW-Authenticate": "Bearer"}
        elif isinstance(exc, Internal):
            logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc.__cause__ or exc)
            body = {"message": Internal.default_message}
        return JSONResponse(status_code=code, content=body, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": ValidationFailed.default_message, "errors": _field_errors(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": Internal.default_message},
        )

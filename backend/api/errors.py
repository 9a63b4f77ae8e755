"""
Exception handlers.

Turns DefyError subclasses raised anywhere below the routes into JSON
error responses with a status code chosen by error category.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    DecodingError,
    DefyError,
    ExternalServiceError,
    NetworkError,
    NotFoundError,
    ValidationError,
)

from .models.errors import ErrorResponse

logger = logging.getLogger(__name__)

# First match wins, so subclasses come before their bases
STATUS_BY_ERROR: list[tuple[type[DefyError], int]] = [
    (ValidationError, 422),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (NetworkError, 503),
    (ExternalServiceError, 502),
    (DecodingError, 500),
    (ConfigurationError, 500),
]


def status_for(error: DefyError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return 500


async def handle_defy_error(request: Request, exc: DefyError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code} {exc.code}")

    body = ErrorResponse(**exc.to_dict())
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DefyError, handle_defy_error)

"""FastAPI exception handlers for custom exceptions."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import (
    ConfigurationError,
    MajelisError,
    ProofNotFoundError,
    StorageError,
    UnauthorizedError,
    UploadFailedError,
    ValidationError,
)

GENERIC_ERROR_MESSAGE = MajelisError.default_message


async def majelis_exception_handler(request: Request, exc: MajelisError) -> JSONResponse:
    """Map Majelis exceptions to ``{"message": ...}`` bodies."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = exc.message

    if isinstance(exc, UnauthorizedError):
        status_code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(exc, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, ProofNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, UploadFailedError):
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    elif isinstance(exc, (ConfigurationError, StorageError)):
        # Internal detail stays in the log.
        message = GENERIC_ERROR_MESSAGE

    log = logger.error if status_code >= 500 else logger.info
    log(
        "Majelis exception on {method} {path}: {type} - {message}",
        method=request.method,
        path=request.url.path,
        type=type(exc).__name__,
        message=exc.message,
        details=exc.details,
    )

    return JSONResponse(status_code=status_code, content={"message": message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep framework errors (bad multipart, unknown route) in the ``{"message"}`` shape."""
    message = exc.detail if isinstance(exc.detail, str) else GENERIC_ERROR_MESSAGE
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        "Unhandled exception on {method} {path}",
        method=request.method,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": GENERIC_ERROR_MESSAGE},
    )


__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "http_exception_handler",
    "majelis_exception_handler",
    "unhandled_exception_handler",
]

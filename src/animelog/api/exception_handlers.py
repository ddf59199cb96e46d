"""Custom exception handlers for the FastAPI application.

Converts domain exceptions into HTTP responses. Response bodies use the
{"error": "..."} shape the frontend has always read.

Status mapping:
- ValidationError, RequestValidationError → 400
- EntityNotFoundException → 404
- DuplicateEntityException → 409
- UpstreamRateLimited → 429 (+ Retry-After when Jikan sent one)
- UpstreamError, DownloadError → 502
- StorageError → 500
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from animelog.domain.exceptions import (
    DownloadError,
    DuplicateEntityException,
    EntityNotFoundException,
    StorageError,
    UpstreamError,
    UpstreamRateLimited,
    ValidationError,
)

logger = logging.getLogger(__name__)


# Hey future me - Pydantic's exc.errors() can carry the raw request body as bytes in 'input',
# which JSONResponse can't serialize. Walk the structure and decode bytes before responding.
def _sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    def _sanitize_value(value: Any) -> Any:
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        if isinstance(value, dict):
            return {k: _sanitize_value(v) for k, v in value.items()}
        if isinstance(value, list | tuple):
            return [_sanitize_value(item) for item in value]
        return value

    return [_sanitize_value(error) for error in errors]


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


# Hey future me, register these during app setup (create_app), BEFORE requests arrive. Starlette
# looks handlers up along the exception's MRO, so UpstreamRateLimited hits its own handler even
# though it's also an UpstreamError.
def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for the domain exception taxonomy."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.warning("Validation error at %s: %s", request.url.path, exc.message)
        return _error(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = _sanitize_validation_errors(list(exc.errors()))
        logger.warning("Request validation error at %s: %s", request.url.path, details)
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request.", details=details)

    @app.exception_handler(EntityNotFoundException)
    async def not_found_handler(request: Request, exc: EntityNotFoundException) -> JSONResponse:
        logger.info(
            "Entity not found at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
        )
        return _error(status.HTTP_404_NOT_FOUND, exc.message)

    @app.exception_handler(DuplicateEntityException)
    async def duplicate_handler(request: Request, exc: DuplicateEntityException) -> JSONResponse:
        logger.info("Duplicate entity at %s: %s", request.url.path, exc.message)
        return _error(status.HTTP_409_CONFLICT, exc.message)

    @app.exception_handler(UpstreamRateLimited)
    async def rate_limited_handler(request: Request, exc: UpstreamRateLimited) -> JSONResponse:
        logger.warning("Jikan rate limited request at %s", request.url.path)
        response = _error(status.HTTP_429_TOO_MANY_REQUESTS, exc.message)
        if exc.retry_after is not None:
            response.headers["Retry-After"] = str(int(exc.retry_after))
        return response

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.warning("Upstream error at %s: %s", request.url.path, exc.message)
        return _error(status.HTTP_502_BAD_GATEWAY, exc.message)

    @app.exception_handler(DownloadError)
    async def download_error_handler(request: Request, exc: DownloadError) -> JSONResponse:
        logger.warning("Download error at %s: %s", request.url.path, exc.message)
        return _error(status.HTTP_502_BAD_GATEWAY, exc.message)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage error at %s: %s (path=%s)", request.url.path, exc.message, exc.path)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Server error: {exc.message}")

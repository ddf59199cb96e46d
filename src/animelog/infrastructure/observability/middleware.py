"""Middleware for observability: correlation ids and request logging."""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from animelog.infrastructure.observability.logging import set_correlation_id

logger = logging.getLogger(__name__)


# Hey future me, this runs for EVERY request. It sets the correlation id first so all logs of the
# request (throttle waits, Jikan lookups, downloads) carry it, then logs method/path/status/duration.
# Cover files served from /anime-covers are skipped - the grid page loads hundreds of them.
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests and responses with a correlation id."""

    def __init__(
        self, app: ASGIApp, skip_prefixes: tuple[str, ...] = ("/anime-covers/",)
    ) -> None:
        super().__init__(app)
        self.skip_prefixes = skip_prefixes

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = set_correlation_id(request.headers.get("X-Correlation-ID"))
        path = request.url.path
        quiet = path.startswith(self.skip_prefixes)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("✗ %s %s crashed", request.method, path)
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        if not quiet:
            logger.info(
                "← %s %s %d (%.0fms)",
                request.method,
                path,
                response.status_code,
                duration_ms,
                extra={"method": request.method, "path": path, "status_code": response.status_code},
            )
        response.headers["X-Correlation-ID"] = correlation_id
        return response

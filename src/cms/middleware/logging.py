"""Request logging middleware."""
import time
from collections.abc import Callable
from typing import Awaitable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

EXCLUDED_PATHS = frozenset({
    "/api/health/live",
    "/api/health/ready",
    "/api/docs",
    "/api/openapi.json",
})

STATIC_EVENT = "static_request"
API_EVENT = "http_request"


def content_target(request: Request) -> str | None:
    """Storage-relative node a request addresses, from its query string.

    Upload deletions name the file separately, so it is joined onto the
    directory path.

    Args:
        request: Incoming HTTP request.

    Returns:
        The ``path`` parameter, with ``file`` appended when present, or None.
    """
    path = request.query_params.get("path")
    filename = request.query_params.get("file")
    if filename:
        return f"{path.rstrip('/')}/{filename}" if path else filename
    return path


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs each request as one structured line.

    API calls carry the storage node they address; static asset hits are
    logged under a separate event at debug level. Health probes and the
    API docs are skipped.
    """

    def __init__(
        self,
        app: Callable[..., Awaitable[Response]],
        api_prefix: str = "/api",
    ) -> None:
        """Initialize middleware.

        Args:
            app: ASGI application.
            api_prefix: URL prefix separating API calls from static assets.
        """
        super().__init__(app)  # type: ignore[arg-type]
        self._api_prefix = api_prefix.rstrip("/") + "/"

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and log method, target, status and timing.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response from handler.
        """
        url_path = request.url.path
        if url_path in EXCLUDED_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        if not url_path.startswith(self._api_prefix):
            logger.debug(
                STATIC_EVENT,
                path=url_path,
                status=response.status_code,
                duration_ms=duration_ms,
            )
            return response

        logger.info(
            API_EVENT,
            method=request.method,
            route=url_path.removeprefix(self._api_prefix.rstrip("/")),
            target=content_target(request),
            status=response.status_code,
            duration_ms=duration_ms,
            client=request.client.host if request.client else None,
        )

        return response

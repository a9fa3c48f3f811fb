"""Request tracing and logging middleware.

The authenticated principal is placed on ``request.state.user_id`` by the
upstream auth layer; these middlewares only read it for log context.
"""

import time
import uuid
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# Probes and docs are too noisy to log per request
DEFAULT_EXCLUDED_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to request state, response headers and log context."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        request.state.request_id = request_id
        request.state.trace_id = request_id  # read by the problem-details handlers

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "user_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its outcome, duration and principal.

    Rejected principals (401) and denied checks (403) are logged as
    ``access_denied`` so they can be audited separately from other client
    errors.
    """

    def __init__(self, app: Any, exclude_paths: tuple[str, ...] | None = None) -> None:
        super().__init__(app)
        self.exclude_paths = exclude_paths or DEFAULT_EXCLUDED_PATHS

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path.startswith(self.exclude_paths):
            return await call_next(request)

        started = time.perf_counter()
        fields: dict[str, Any] = {"method": request.method, "path": request.url.path}

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "request_failed",
                duration_ms=_elapsed_ms(started),
                error=str(exc),
                **fields,
            )
            raise

        fields["status_code"] = response.status_code
        fields["duration_ms"] = _elapsed_ms(started)

        principal = getattr(request.state, "user_id", None)
        if principal:
            fields["user_id"] = str(principal)

        status_code = response.status_code
        if status_code in (401, 403):
            logger.warning("access_denied", **fields)
        elif status_code >= 500:
            logger.error("request_completed", **fields)
        elif status_code >= 400:
            logger.warning("request_completed", **fields)
        else:
            logger.info("request_completed", **fields)

        return response

"""Access logging middleware using structlog with request id and OTEL trace correlation."""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "x-request-id"


class AccessLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that binds a request id and logs each HTTP request.

    The request id (taken from X-Request-ID or generated) is bound into
    structlog contextvars for the lifetime of the request, so every pipeline
    log line emitted while planning a journey carries it. It is echoed back in
    the X-Request-ID response header.

    Log fields:
        - method, path, query: Request line
        - status_code: Response status code
        - duration_ms: Request duration in milliseconds
        - client_ip: Client IP address
        - request_id: Bound via contextvars
        - trace_id/span_id: Added by the OTEL processor
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process request and log access information."""
        start_time = time.perf_counter()

        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        client_ip = request.client.host if request.client else "unknown"
        forwarded_for = None
        if xff_header := request.headers.get("x-forwarded-for"):
            forwarded_for = xff_header.split(",")[0].strip()

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            log_kwargs: dict[str, str | int | float | None] = {
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            }
            if request.url.query:
                log_kwargs["query"] = request.url.query
            if forwarded_for:
                log_kwargs["forwarded_for"] = forwarded_for

            logger.info("http_request", **log_kwargs)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            structlog.contextvars.clear_contextvars()

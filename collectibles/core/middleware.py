"""Request middleware for logging, correlation IDs and response hardening."""

import logging
import re
import time
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

# Read by log filters and error handlers for the lifetime of a request
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_HEADER = "X-Correlation-ID"

# Client-provided ids end up in log lines: alphanumeric, hyphen, underscore
_CORRELATION_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")


def _correlation_id_from(request: Request) -> str:
    supplied = request.headers.get(CORRELATION_HEADER)
    if supplied and _CORRELATION_ID_PATTERN.match(supplied):
        return supplied
    return str(uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation id and echo it back."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        correlation_id = _correlation_id_from(request)
        correlation_id_var.set(correlation_id)
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request; server errors are logged as warnings."""

    def __init__(
        self,
        app: ASGIApp,
        logger: logging.Logger | None = None,
        expose_timing: bool = True,
    ) -> None:
        super().__init__(app)
        self.logger = logger or logging.getLogger("collectibles.requests")
        self.expose_timing = expose_timing

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        self.logger.log(
            level,
            "%s %s -> %d",
            request.method,
            request.url.path,
            response.status_code,
            extra={"duration_ms": round(elapsed_ms, 2)},
        )

        if self.expose_timing:
            response.headers["X-Process-Time"] = f"{elapsed_ms:.2f}ms"
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Item and category images are served from the image delivery CDN
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "img-src 'self' data: https://imagedelivery.net; "
            "frame-ancestors 'none'"
        )
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to limit request body size."""

    def __init__(self, app: ASGIApp, max_size: int) -> None:
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Check the declared request size before processing."""
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                if int(content_length) > self.max_size:
                    return JSONResponse(
                        status_code=413,
                        content={"detail": "Request body too large"},
                    )
            except ValueError:
                return JSONResponse(
                    status_code=400,
                    content={"detail": "Invalid Content-Length header"},
                )
        return await call_next(request)

"""FastAPI middleware for measuring endpoint latency.

This middleware measures the wall-clock time for API requests and records
it into the ``http_server_duration`` histogram, labelled by route template
rather than raw URL so label values stay bounded. Only /api/** routes are
instrumented.
"""

import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.core.logging_config import get_logger
from app.services.metrics import InstrumentKind

logger = get_logger(__name__)

LATENCY_INSTRUMENT = "http_server_duration"
LATENCY_SCOPE = "http_server"

# Label values must come from a fixed vocabulary; raw URLs and methods do not
UNMATCHED_ROUTE = "unmatched"
OTHER_METHOD = "_OTHER"
KNOWN_METHODS = {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "CONNECT", "TRACE"}


def route_label(request: Request) -> str:
    """Route template that handled the request, e.g. '/api/v1/tokenize_counter'."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


def method_label(request: Request) -> str:
    return request.method if request.method in KNOWN_METHODS else OTHER_METHOD


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware that records HTTP endpoint latency for /api/** routes."""

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and measure latency for API routes.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in the chain

        Returns:
            HTTP response from downstream handlers
        """
        # Skip instrumentation for non-API routes
        if not request.url.path.startswith("/api/"):
            return await call_next(request)

        t0 = time.monotonic_ns()
        response = await call_next(request)
        latency_ms = (time.monotonic_ns() - t0) / 1_000_000.0

        # Recording errors must never affect the response
        try:
            runtime = getattr(request.app.state, "metrics", None)
            if runtime is not None:
                runtime.collector.record_event(
                    LATENCY_INSTRUMENT,
                    InstrumentKind.HISTOGRAM,
                    latency_ms,
                    {
                        "http.method": method_label(request),
                        "http.route": route_label(request),
                        "http.status_code": response.status_code,
                    },
                    scope=LATENCY_SCOPE,
                )
        except Exception as e:
            logger.debug(f"Metrics middleware error for {request.method} {request.url.path}: {e}")

        return response

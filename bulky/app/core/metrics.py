"""
Prometheus metrics for application monitoring.
"""
import time

from fastapi import Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client.openmetrics.exposition import generate_latest as generate_latest_openmetrics
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from bulky.app.core.logging import bind_request_context


# Request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Business metrics
login_attempts_total = Counter(
    'login_attempts_total',
    'Login attempts by principal type and outcome',
    ['user_type', 'outcome']
)

pesanan_status_changes_total = Counter(
    'pesanan_status_changes_total',
    'Order status transitions performed by admins',
    ['status_to']
)

ulasan_created_total = Counter(
    'ulasan_created_total',
    'Reviews submitted by buyers',
    ['rating']
)

produk_created_total = Counter(
    'produk_created_total',
    'Products created in the catalog'
)


def _endpoint_label(request: Request) -> str:
    """Use the route template (/panel/produk/{produk_id}) so ids do not explode label cardinality."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Collects HTTP request metrics and opens a log context per request."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/metrics":
            return await call_next(request)

        bind_request_context(request.method, request.url.path, request.headers.get("x-request-id"))
        start_time = time.time()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            duration = time.time() - start_time
            endpoint = _endpoint_label(request)
            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(duration)

        return response


def get_metrics_response(openmetrics: bool = False) -> Response:
    """Render all metrics in Prometheus (default) or OpenMetrics format."""
    if openmetrics:
        content = generate_latest_openmetrics()
        content_type = "application/openmetrics-text; version=1.0.0; charset=utf-8"
    else:
        content = generate_latest()
        content_type = CONTENT_TYPE_LATEST

    return Response(content=content, media_type=content_type)

"""Prometheus metric definitions for the relay."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


orders_created_total = Counter("orders_created_total", "Gateway orders created and stored", ["service"])
payments_verified_total = Counter("payments_verified_total", "Orders marked paid", ["service"])
relay_failures_total = Counter(
    "relay_failures_total",
    "Handler failures by operation and error class",
    ["service", "operation", "reason"],
)
gateway_latency_seconds = Histogram(
    "gateway_latency_seconds",
    "Payment gateway call latency seconds",
    ["service", "operation"],
)
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")

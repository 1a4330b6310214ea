"""Prometheus metrics for monitoring and observability."""

from __future__ import annotations

import time
from collections.abc import Callable

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

# ==============================================================================
# APPLICATION INFO
# ==============================================================================

app_info = Info("weekender", "Weekender API information")
app_info.info({"version": "0.1.0", "service": "weekender-api"})

# ==============================================================================
# HTTP METRICS
# ==============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "HTTP requests currently in progress",
    ["method", "endpoint"],
)

# ==============================================================================
# DOMAIN METRICS
# ==============================================================================

extraction_requests_total = Counter(
    "extraction_requests_total",
    "Extractor calls by kind and result",
    ["kind", "result"],
)

extraction_candidates_total = Counter(
    "extraction_candidates_total",
    "Extracted candidates by outcome after normalization",
    ["outcome"],
)

places_imported_total = Counter(
    "places_imported_total",
    "Places offered to the import path by outcome",
    ["outcome"],
)

plans_shared_total = Counter(
    "plans_shared_total",
    "Share requests by whether a new code was minted",
    ["result"],
)

photo_proxy_requests_total = Counter(
    "photo_proxy_requests_total",
    "Provider photo proxy requests by result",
    ["result"],
)

# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def record_extraction(kind: str, result: str, *, kept: int = 0, dropped: int = 0) -> None:
    extraction_requests_total.labels(kind=kind, result=result).inc()
    if kept:
        extraction_candidates_total.labels(outcome="kept").inc(kept)
    if dropped:
        extraction_candidates_total.labels(outcome="dropped").inc(dropped)


def record_place_import(outcome: str) -> None:
    places_imported_total.labels(outcome=outcome).inc()


def record_plan_shared(result: str) -> None:
    plans_shared_total.labels(result=result).inc()


def record_photo_proxy(result: str) -> None:
    photo_proxy_requests_total.labels(result=result).inc()


UNMATCHED_ENDPOINT = "<unmatched>"


def route_template(request: Request) -> str:
    """
    Label requests by the template of the route that serves them.

    Examples:
        /places/123 -> /places/{place_id}
        /shared/<code> -> /shared/{share_code}

    Raw paths never become label values, so path parameters (share codes
    included) stay out of /metrics and unknown paths share one series.
    """
    partial = None
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return route.path
        if match == Match.PARTIAL and partial is None:
            partial = route.path
    return partial or UNMATCHED_ENDPOINT


# ==============================================================================
# PROMETHEUS MIDDLEWARE
# ==============================================================================


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to track HTTP request metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        endpoint = route_template(request)
        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            http_requests_total.labels(method=method, endpoint=endpoint, status="500").inc()
            raise
        finally:
            duration = time.perf_counter() - start_time
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)
            http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()

        http_requests_total.labels(
            method=method, endpoint=endpoint, status=str(response.status_code)
        ).inc()
        return response


# ==============================================================================
# METRICS ENDPOINT
# ==============================================================================


def get_metrics() -> Response:
    """Generate Prometheus metrics response."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "PrometheusMiddleware",
    "get_metrics",
    "http_requests_total",
    "record_extraction",
    "record_photo_proxy",
    "record_place_import",
    "record_plan_shared",
    "route_template",
]

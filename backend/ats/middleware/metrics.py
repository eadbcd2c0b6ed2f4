"""
Prometheus Metrics Middleware

Provides request/response metrics for monitoring:
- HTTP request latency per route template
- Request count by route and status
- Active request gauge
- Admission-control rejections
- Attachment cleanup failures (best-effort deletes that did not succeed)

Usage:
    from ats.middleware.metrics import setup_metrics

    app = FastAPI()
    setup_metrics(app)

Metrics Endpoint:
    GET /metrics - Prometheus-format metrics
"""

import time
import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    CONTENT_TYPE_LATEST,
    generate_latest,
    REGISTRY,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

logger = logging.getLogger(__name__)

# ==================== Prometheus Metrics ====================

REQUEST_LATENCY = Histogram(
    "ats_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint", "status"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

REQUEST_COUNT = Counter(
    "ats_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

ACTIVE_REQUESTS = Gauge(
    "ats_http_requests_active",
    "Number of in-flight HTTP requests",
    ["method"],
)

ADMISSION_REJECTIONS = Counter(
    "ats_rate_limited_requests_total",
    "Requests rejected by admission control",
)

CLEANUP_FAILURES = Counter(
    "ats_attachment_cleanup_failures_total",
    "Attachment deletions that failed and were skipped",
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Records latency, count and concurrency of every request except /metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        endpoint = route_template(request)
        if endpoint == "/metrics":
            return await call_next(request)

        method = request.method
        ACTIVE_REQUESTS.labels(method=method).inc()
        start_time = time.perf_counter()
        status = "500"

        try:
            response = await call_next(request)
            status = str(response.status_code)
            return response
        finally:
            duration = time.perf_counter() - start_time
            REQUEST_LATENCY.labels(method=method, endpoint=endpoint, status=status).observe(duration)
            REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status).inc()
            ACTIVE_REQUESTS.labels(method=method).dec()


def route_template(request: Request) -> str:
    """
    Route pattern (e.g. /api/jobs/{job_id}) for the request.

    Falls back to "unmatched" so arbitrary paths cannot inflate label
    cardinality.
    """
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", "unmatched")
    return "unmatched"


def metrics_endpoint(request: Request) -> Response:
    return PlainTextResponse(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


def setup_metrics(app: FastAPI) -> None:
    app.add_middleware(PrometheusMiddleware)
    app.add_route("/metrics", metrics_endpoint, methods=["GET"])


# ==================== Helper Functions ====================

def record_admission_rejection() -> None:
    ADMISSION_REJECTIONS.inc()


def record_cleanup_failure() -> None:
    CLEANUP_FAILURES.inc()

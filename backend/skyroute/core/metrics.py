"""
SkyRoute - Prometheus Metrics
Request latency, upstream latency, calendar sampling outcomes

Metrics:
- skyroute_http_requests_total: Requests by route template and status
- skyroute_http_request_duration_seconds: Request latency by route template
- skyroute_external_api_duration_seconds: Upstream API latencies
- skyroute_external_api_calls_total: Upstream API call counts
- skyroute_calendar_dates_total: Sampled calendar dates by outcome
"""

import time
import logging
from typing import Callable
from contextlib import contextmanager

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY
)
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("SkyRoute-Metrics")

# ═══════════════════════════════════════════════════════════════════
# METRIC DEFINITIONS
# ═══════════════════════════════════════════════════════════════════

HTTP_REQUESTS_TOTAL = Counter(
    "skyroute_http_requests_total",
    "HTTP requests handled",
    ["method", "endpoint", "status"]
)

HTTP_REQUEST_DURATION = Histogram(
    "skyroute_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)

EXTERNAL_API_DURATION = Histogram(
    "skyroute_external_api_duration_seconds",
    "Upstream API call duration",
    ["operation"],  # offer_request, offer, order
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 8.0, 15.0, 30.0]
)

EXTERNAL_API_CALLS = Counter(
    "skyroute_external_api_calls_total",
    "Total upstream API calls",
    ["operation", "status"]
)

CALENDAR_DATES = Counter(
    "skyroute_calendar_dates_total",
    "Sampled calendar dates by outcome",
    ["outcome"]  # priced, no_flights
)


# ═══════════════════════════════════════════════════════════════════
# MIDDLEWARE
# ═══════════════════════════════════════════════════════════════════

class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Per-request counter and latency, labelled by route template so offer
    ids and other path values never become label values.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            route = request.scope.get("route")
            endpoint = getattr(route, "path", None) or "unmatched"
            HTTP_REQUESTS_TOTAL.labels(request.method, endpoint, str(status_code)).inc()
            HTTP_REQUEST_DURATION.labels(request.method, endpoint).observe(time.perf_counter() - started)

        return response


# ═══════════════════════════════════════════════════════════════════
# CONTEXT MANAGERS
# ═══════════════════════════════════════════════════════════════════

class ExternalCall:
    """Outcome of one tracked upstream call."""

    def __init__(self):
        self.status = "success"

    def record_response(self, status_code: int):
        if not 200 <= status_code < 300:
            self.status = "error"


@contextmanager
def track_external_api(operation: str):
    """
    Context manager to track upstream API calls.
    Raising, or a non-2xx answer passed to record_response, counts as an error.

    Usage:
        with track_external_api("offer_request") as call:
            response = await client.post(...)
            call.record_response(response.status_code)
    """
    start_time = time.perf_counter()
    call = ExternalCall()

    try:
        yield call
    except BaseException:
        call.status = "error"
        raise
    finally:
        duration = time.perf_counter() - start_time
        EXTERNAL_API_DURATION.labels(operation=operation).observe(duration)
        EXTERNAL_API_CALLS.labels(operation=operation, status=call.status).inc()

        if duration > 10.0:
            logger.warning(f"⚠️ Slow upstream call: {operation} took {duration:.2f}s")


def record_calendar_outcome(priced: bool):
    CALENDAR_DATES.labels(outcome="priced" if priced else "no_flights").inc()


# ═══════════════════════════════════════════════════════════════════
# METRICS ENDPOINT
# ═══════════════════════════════════════════════════════════════════

async def metrics_endpoint():
    """
    Prometheus metrics endpoint
    """
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST
    )


def setup_metrics(app):
    """
    Setup Prometheus metrics for FastAPI app
    """
    app.add_middleware(PrometheusMiddleware)
    app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], tags=["Monitoring"])

    logger.info("✅ Prometheus metrics enabled at /metrics")

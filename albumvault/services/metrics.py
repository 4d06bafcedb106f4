"""
Prometheus metrics for AlbumVault.

Counters are always registered; recording and the HTTP middleware only run
when METRICS_ENABLED is set.
"""

import time

from fastapi import Request
from fastapi.responses import Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from albumvault.config import settings

REQUESTS_TOTAL = Counter(
    "albumvault_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_DURATION = Histogram(
    "albumvault_http_request_seconds",
    "Request duration in seconds",
    ["method", "path"],
)

UPLOADS_TOTAL = Counter(
    "albumvault_uploads_total",
    "Photo uploads by outcome",
    ["status"],
)

RECONCILIATIONS_TOTAL = Counter(
    "albumvault_album_reconciliations_total",
    "Album photo count recomputations",
)

ENABLED = settings.METRICS_ENABLED


async def metrics_endpoint():
    """Prometheus metrics endpoint"""
    if not ENABLED:
        return Response(b"metrics disabled", media_type="text/plain")
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def metrics_middleware(app):
    """Add metrics middleware to FastAPI app"""
    if not ENABLED:
        return

    @app.middleware("http")
    async def _metrics(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        # Route template keeps label cardinality bounded
        route = request.scope.get("route")
        path = getattr(route, "path", request.url.path)
        REQUESTS_TOTAL.labels(
            method=request.method,
            path=path,
            status=str(response.status_code),
        ).inc()
        REQUEST_DURATION.labels(method=request.method, path=path).observe(time.time() - start)
        return response


def record_upload(status: str, count: int = 1):
    """Record photo upload outcomes ("success" / "error")"""
    if ENABLED and count:
        UPLOADS_TOTAL.labels(status=status).inc(count)


def record_reconciliation():
    if ENABLED:
        RECONCILIATIONS_TOTAL.inc()

# SecurityHeadersMiddleware, ErrorEnvelopeMiddleware
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from fastapi import Request, Response
from fastapi.responses import JSONResponse

from albumvault.config import settings

log = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "same-origin"
        if (settings.APP_ENV or "").strip().lower() == "production":
            response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains; preload"
        return response


class ErrorEnvelopeMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        start = time.time()
        request_id = request.headers.get("x-request-id", str(uuid.uuid4())[:8])
        try:
            response: Response = await call_next(request)
        except Exception:
            log.exception("Unhandled error on %s %s (rid=%s)", request.method, request.url.path, request_id)
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error", "path": request.url.path},
                headers={"x-request-id": request_id},
            )
        response.headers.setdefault("x-request-id", request_id)
        response.headers["server-timing"] = f"total;dur={(time.time() - start) * 1000:.2f}"
        return response

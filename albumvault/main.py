import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

import sentry_sdk
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from albumvault import __version__
from albumvault.config import settings
from albumvault.core.middleware import ErrorEnvelopeMiddleware, SecurityHeadersMiddleware
from albumvault.core.rate_limit import limiter
from albumvault.db import init_db, close_db
from albumvault.services.metrics import metrics_endpoint, metrics_middleware

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
log = logging.getLogger("albumvault")

if settings.SENTRY_DSN:
    sentry_sdk.init(dsn=settings.SENTRY_DSN, traces_sample_rate=0.1, environment=settings.APP_ENV)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("Starting AlbumVault...")
    # Secret guard for production deployments
    if (settings.APP_ENV or "").strip().lower() == "production":
        secret = settings.JWT_SECRET or ""
        if secret in ("", "dev", "CHANGE_ME") or secret.startswith("dev-") or len(secret) < 32:
            raise RuntimeError("Insecure JWT_SECRET; set a real secret in production")
    await init_db()

    yield

    log.info("Shutting down AlbumVault...")
    await close_db()
    log.info("Database connections closed")


app = FastAPI(
    title="AlbumVault API",
    description="Photo albums with metadata-aware uploads and public share links",
    version=__version__,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

from albumvault.routers import router  # noqa: E402

app.include_router(router)
log.info("Registered routes count: %s", len(app.routes))

# Uploaded files are public under UPLOAD_URL_PREFIX
upload_dir = Path(settings.UPLOAD_DIR)
upload_dir.mkdir(parents=True, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=upload_dir), name="uploads")

# Middleware setup
app.add_middleware(GZipMiddleware, minimum_size=1024)
app.add_middleware(ErrorEnvelopeMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)

# Enable Prometheus metrics if METRICS_ENABLED=1
metrics_middleware(app)


# Correlation ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id", str(uuid.uuid4())[:8])
    request.state.rid = rid
    response = await call_next(request)
    response.headers["x-request-id"] = rid
    return response


@app.get("/health")
async def health():
    return {"status": "healthy", "version": __version__, "timestamp": datetime.now().isoformat()}


app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False)


if __name__ == "__main__":
    uvicorn.run("albumvault.main:app", host="0.0.0.0", port=8000, reload=settings.APP_ENV == "development")

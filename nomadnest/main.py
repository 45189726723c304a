import logging
import random
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from .config import settings
from .database import AsyncSessionLocal, create_tables
from .exceptions import NomadNestError
from .routers.admin import router as admin_router
from .routers.ads import router as ads_router
from .routers.auth import router as auth_router
from .routers.community import router as community_router
from .routers.health import router as health_router
from .routers.newsletter import router as newsletter_router
from .routers.notifications import router as notifications_router
from .routers.posts import router as posts_router, comments_router
from .routers.settings import router as settings_router
from .routers.subscriptions import router as subscriptions_router
from .routers.taxonomy import router as taxonomy_router
from .routers.travel import router as travel_router
from .routers.trips import router as trips_router
from .services.document_store import DocumentStore
from .services.seed_service import seed_if_empty

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()

    if settings.autoseed_enabled:
        try:
            async with AsyncSessionLocal() as session:
                seeded = await seed_if_empty(DocumentStore(session))
            logger.info(f"Auto-seeding completed: {seeded}")
        except Exception:
            logger.exception("Auto-seeding failed")

    yield


app = FastAPI(
    title="NomadNest - Travel Blog and Community",
    description="""
# NomadNest API

Travel blog, traveller community and trip planner.

## Authentication

`POST /auth/register` or `POST /auth/login` returns a bearer token.
Include it as `Authorization: Bearer <token>`.

## Features

- **Blog**: posts, comments, categories and topics
- **Community**: profiles, feed, groups, events, travel buddies and matching
- **Travel**: hotel, flight and guide search with bookings
- **Trips**: personal trip planner with free-tier limits and subscriptions
- **Admin**: dashboard, site settings, themes, backups and moderation

### Pagination
Blog listings accept `limit` (1-100) and `offset` and return `{items, total, limit, offset}`.

### Metrics
`/metrics` serves Prometheus metrics (token protected outside debug).
""",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(posts_router)
app.include_router(comments_router)
app.include_router(taxonomy_router)
app.include_router(community_router)
app.include_router(notifications_router)
app.include_router(travel_router)
app.include_router(trips_router)
app.include_router(subscriptions_router)
app.include_router(newsletter_router)
app.include_router(settings_router)
app.include_router(ads_router)
app.include_router(admin_router)

# CORS for UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Prometheus metrics
REQUEST_COUNT = Counter("http_requests_total", "Total HTTP requests", [
                        "method", "route", "status"])
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2, 5)
)


@app.exception_handler(NomadNestError)
async def nomadnest_error_handler(request: Request, exc: NomadNestError):
    if exc.status_code >= 403:
        logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


@app.middleware("http")
async def add_request_id_and_errors(request: Request, call_next):
    request_id = str(uuid.uuid4())
    user_id = request.headers.get("x-user-id") or "anon"
    # Sample every request in debug
    if settings.debug or random.random() < settings.log_sample_rate:
        logger.info({
            "event": "request",
            "method": request.method,
            "path": request.url.path,
            "rid": request_id,
            "user_id": user_id,
        })
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(f"Unhandled error rid={request_id}")
        route = getattr(request.scope.get("route"), "path", request.url.path)
        REQUEST_COUNT.labels(method=request.method, route=route, status=500).inc()
        body = {
            "error": {
                "code": "internal_server_error",
                "message": "Internal Server Error",
            },
            "request_id": request_id,
        }
        return JSONResponse(status_code=500, content=body, headers={"X-Request-ID": request_id})

    REQUEST_LATENCY.observe(time.perf_counter() - start)
    route = getattr(request.scope.get("route"), "path", request.url.path)
    REQUEST_COUNT.labels(method=request.method, route=route, status=response.status_code).inc()
    response.headers["X-Request-ID"] = request_id
    return response


@app.get("/")
async def root():
    return {"app": settings.app_name, "docs": "/docs"}


@app.get("/metrics")
async def metrics(request: Request):
    # In dev/debug mode, expose metrics without auth
    if not settings.debug:
        token = request.headers.get("X-Metrics-Token")
        if not settings.metrics_token or token != settings.metrics_token:
            return JSONResponse(status_code=403, content={"detail": "Forbidden"})
    return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

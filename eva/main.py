import logging
import os
import time
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth import get_http_client
from .config import APP_FULL_NAME, FRONTEND_ORIGINS
from .database import init_db
from .domain.account.router import router as account_router
from .domain.account.router import vendor_router as vendor_business_router
from .domain.admin.router import router as admin_router
from .domain.bookings.router import admin_router as admin_bookings_router
from .domain.bookings.router import router as bookings_router
from .domain.bookings.router import vendor_router as vendor_bookings_router
from .domain.catalog.router import router as catalog_router
from .domain.dashboard.router import router as dashboard_router
from .domain.engagement.router import (
    inquiries_router,
    notifications_router,
    quotes_router,
    reviews_router,
    vendor_inquiries_router,
    vendor_quotes_router,
    vendor_reviews_router,
)
from .domain.onboarding.router import router as onboarding_router
from .rate_limiter import get_redis_client
from .routes.jobs import router as jobs_router
from .security_headers import SecurityHeadersMiddleware
from .services.marketplace_client import MarketplaceError, create_http_client

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Request lines from the marketplace client are noise at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"
SLOW_REQUEST_MS = float(os.getenv("SLOW_REQUEST_MS", "2000"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 {APP_FULL_NAME} portal starting")
    try:
        init_db()
    except Exception as e:
        logger.error(f"Failed to create portal tables: {e}")

    try:
        get_redis_client()
        logger.info("✅ Redis reachable")
    except Exception as e:
        logger.warning(f"Redis unavailable - cache disabled and rate limiting counts in memory: {e}")

    if getattr(app.state, "http_client", None) is None:
        app.state.http_client = create_http_client()

    yield

    logger.info("👋 Portal shutting down")
    await app.state.http_client.aclose()


app = FastAPI(title=f"{APP_FULL_NAME} Portal API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(MarketplaceError)
async def marketplace_exception_handler(request: Request, exc: MarketplaceError):
    """Upstream failures keep their status (5xx already mapped to 502/503/504 by the client)"""
    logger.warning(f"Marketplace error on {request.method} {request.url.path}: {exc.status_code} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """A malformed Authorization header is an authentication failure, not a 422"""
    if any("authorization" in str(error.get("loc", "")).lower() for error in exc.errors()):
        logger.warning(f"🔒 Bad Authorization header on {request.url.path}")
        return JSONResponse(
            status_code=401,
            content={"detail": "Not authenticated. Please sign in to the marketplace first."},
        )

    logger.warning(f"Rejected payload on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold the raised ValueError itself
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        error.pop("url", None)
        errors.append(error)
    return errors


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"💥 {request.method} {request.url.path} failed: {e}")
        raise
    elapsed_ms = (time.perf_counter() - started) * 1000
    if elapsed_ms > SLOW_REQUEST_MS:
        logger.warning(f"🐌 {request.method} {request.url.path} -> {response.status_code} in {elapsed_ms:.0f}ms")
    return response


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {FRONTEND_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=FRONTEND_ORIGINS,
    allow_credentials=True,  # Session cookies are forwarded to the marketplace
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# Routes
app.include_router(catalog_router)
app.include_router(onboarding_router)
app.include_router(bookings_router)
app.include_router(vendor_bookings_router)
app.include_router(admin_bookings_router)
app.include_router(dashboard_router)
app.include_router(inquiries_router)
app.include_router(vendor_inquiries_router)
app.include_router(quotes_router)
app.include_router(vendor_quotes_router)
app.include_router(reviews_router)
app.include_router(vendor_reviews_router)
app.include_router(notifications_router)
app.include_router(account_router)
app.include_router(vendor_business_router)
app.include_router(admin_router)
app.include_router(jobs_router)


@app.get("/")
def root():
    return {"message": f"{APP_FULL_NAME} portal API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/health/redis")
def redis_health_check():
    """Redis backs the cache, the rate limiter and the job queue"""
    started = time.perf_counter()
    try:
        store = get_redis_client()
        store.ping()
        server = store.info("server")
    except Exception as e:
        return {"status": "unhealthy", "redis": {"connected": False, "error": str(e)}}
    return {
        "status": "healthy",
        "redis": {
            "connected": True,
            "response_time_ms": round((time.perf_counter() - started) * 1000, 2),
            "version": server.get("redis_version", "unknown"),
        },
    }


@app.get("/health/marketplace")
async def marketplace_health_check(client: httpx.AsyncClient = Depends(get_http_client)):
    """Check that the marketplace API answers"""
    start_time = time.time()
    try:
        response = await client.get("/api/categories", params={"limit": 1})
    except Exception as e:
        return {"status": "unhealthy", "marketplace": {"reachable": False, "error": str(e)}}
    return {
        "status": "healthy" if response.status_code < 500 else "unhealthy",
        "marketplace": {
            "reachable": True,
            "status_code": response.status_code,
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        },
    }

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

APP_FULL_NAME = "EVA - Event Vendors Africa"
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()

# Portal-local storage (onboarding drafts, preferences)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./eva_portal.db")

# Marketplace REST API - owns providers, bookings, quotes, auth and payments
MARKETPLACE_API_URL = os.getenv("MARKETPLACE_API_URL", "http://localhost:3000").rstrip("/")
MARKETPLACE_API_TIMEOUT = float(os.getenv("MARKETPLACE_API_TIMEOUT", "15"))

# Session cookies issued by the marketplace auth layer, forwarded verbatim
SESSION_COOKIE_NAMES = [
    name.strip()
    for name in os.getenv(
        "SESSION_COOKIE_NAMES",
        "authjs.session-token,__Secure-authjs.session-token,next-auth.session-token",
    ).split(",")
    if name.strip()
]

# Frontend base URL for CORS and frame-ancestors
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
FRONTEND_ORIGINS = [
    origin.strip()
    for origin in os.getenv("FRONTEND_ORIGINS", FRONTEND_URL).split(",")
    if origin.strip()
]

# Redis: shared by the cache, the rate limiter and the arq job queue.
# REDIS_URL wins over the individual settings when both are present.
REDIS_URL = os.getenv("REDIS_URL")
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_DB = int(os.getenv("REDIS_DB", "0"))
REDIS_SSL = os.getenv("REDIS_SSL", "false").lower() == "true"

# Redis-backed helpers can be switched off entirely (local dev, tests)
CACHE_ENABLED = os.getenv("CACHE_ENABLED", "true").lower() == "true"
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

# Money
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "EUR")
PLATFORM_FEE_RATE = float(os.getenv("PLATFORM_FEE_RATE", "0.05"))

# Onboarding drafts untouched for this long are purged by the worker
DRAFT_RETENTION_DAYS = int(os.getenv("DRAFT_RETENTION_DAYS", "30"))

# Cache TTLs (seconds)
REFERENCE_DATA_TTL = int(os.getenv("REFERENCE_DATA_TTL", "600"))
SESSION_CACHE_TTL = int(os.getenv("SESSION_CACHE_TTL", "60"))
ANALYTICS_CACHE_TTL = int(os.getenv("ANALYTICS_CACHE_TTL", "300"))

# Admin bearer token used by the worker and maintenance scripts (no caller session there)
MARKETPLACE_SERVICE_TOKEN = os.getenv("MARKETPLACE_SERVICE_TOKEN")

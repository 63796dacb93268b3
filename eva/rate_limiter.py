"""
Per-client request limits for the public catalog endpoints

Each portal worker counts requests in a local fixed window and pushes its
count to Redis every few seconds, so workers started later pick up the
window already in progress. When Redis is down the local count still
applies.
"""

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request

from .config import (
    RATE_LIMIT_ENABLED,
    REDIS_DB,
    REDIS_HOST,
    REDIS_PASSWORD,
    REDIS_PORT,
    REDIS_SSL,
    REDIS_URL,
)

logger = logging.getLogger(__name__)

REDIS_OPTIONS = {
    "decode_responses": True,
    "socket_connect_timeout": 5,
    "socket_timeout": 5,
    "retry_on_timeout": True,
    "health_check_interval": 30,
}

SYNC_INTERVAL = 10
SWEEP_INTERVAL = 60

_redis: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Shared Redis connection, created and pinged on first use"""
    global _redis
    if _redis is not None:
        return _redis

    if REDIS_URL:
        client = redis.from_url(REDIS_URL, **REDIS_OPTIONS)
    else:
        logger.info(f"📡 Redis at {REDIS_HOST}:{REDIS_PORT} db={REDIS_DB} (SSL: {REDIS_SSL})")
        client = redis.Redis(
            host=REDIS_HOST,
            port=REDIS_PORT,
            password=REDIS_PASSWORD,
            db=REDIS_DB,
            ssl=REDIS_SSL,
            **REDIS_OPTIONS,
        )

    try:
        client.ping()
    except Exception as e:
        logger.error(f"❌ Redis unreachable: {e}")
        raise
    _redis = client
    return _redis


@dataclass
class Window:
    count: int
    resets_at: int
    synced_at: int


class WindowCounter:
    """Fixed-window counters for one process, optionally mirrored in Redis"""

    def __init__(self, sync_interval: int = SYNC_INTERVAL, sweep_interval: int = SWEEP_INTERVAL):
        self.sync_interval = sync_interval
        self.sweep_interval = sweep_interval
        self.windows: dict[str, Window] = {}
        self.lock = Lock()
        self.swept_at = 0

    def _sweep(self, now: int) -> None:
        if now - self.swept_at < self.sweep_interval:
            return
        expired = [key for key, window in self.windows.items() if now >= window.resets_at]
        for key in expired:
            del self.windows[key]
        if expired:
            logger.debug(f"🧹 Dropped {len(expired)} expired rate limit windows")
        self.swept_at = now

    def _open(self, key: str, window_seconds: int, now: int, store: Optional[redis.Redis]) -> Window:
        window = Window(count=0, resets_at=now + window_seconds, synced_at=now)
        if store is None:
            return window
        try:
            shared_count, ttl = store.get(key), store.ttl(key)
            if shared_count and ttl > 0:
                window.count, window.resets_at = int(shared_count), now + ttl
        except Exception as e:
            logger.warning(f"⚠️ Could not read {key} from Redis, counting locally: {e}")
        return window

    def hit(
        self, key: str, limit: int, window_seconds: int, store: Optional[redis.Redis] = None
    ) -> tuple[bool, int, int]:
        """
        Count one request against `key`.

        Returns (allowed, count, seconds until the window resets). Rejected
        requests are not counted.
        """
        now = int(time.time())
        with self.lock:
            self._sweep(now)
            window = self.windows.get(key)
            if window is None:
                window = self.windows[key] = self._open(key, window_seconds, now, store)
            elif now >= window.resets_at:
                window.count, window.resets_at, window.synced_at = 0, now + window_seconds, 0

            allowed = window.count < limit
            if allowed:
                window.count += 1

            if store is not None and now - window.synced_at >= self.sync_interval:
                try:
                    store.set(key, window.count, ex=window_seconds)
                    window.synced_at = now
                except Exception as e:
                    logger.warning(f"⚠️ Could not push {key} to Redis: {e}")

            return allowed, window.count, max(0, window.resets_at - now)


counter = WindowCounter()


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def create_rate_limiter(limit: int, window_seconds: int, key_prefix: str = "rate_limit", use_ip: bool = True):
    """
    Build a FastAPI dependency allowing `limit` requests per `window_seconds`,
    per client IP or shared by everyone when use_ip is False.

        rate_limit_contact = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="contact")

        @router.post("/vendors/{provider_id}/contact")
        async def contact(..., _: None = Depends(rate_limit_contact)):
    """

    async def rate_limiter(request: Request):
        if not RATE_LIMIT_ENABLED:
            return

        key = f"{key_prefix}:{client_ip(request) if use_ip else 'global'}"
        try:
            store = get_redis_client()
        except Exception:
            store = None

        allowed, count, retry_after = counter.hit(key, limit, window_seconds, store)
        if not allowed:
            logger.warning(f"🚫 Rate limit hit for {key} ({count}/{limit})")
            raise HTTPException(
                status_code=429,
                detail={
                    "message": f"Too many requests. Limit is {limit} per {window_seconds} seconds.",
                    "retry_after": retry_after,
                    "limit": limit,
                    "window_seconds": window_seconds,
                },
                headers={"Retry-After": str(retry_after)},
            )

        request.state.rate_limit_remaining = limit - count
        request.state.rate_limit_reset = int(time.time()) + retry_after

    return rate_limiter

"""
JSON values in Redis: marketplace reference lists, resolved sessions and
dashboard analytics.

Every operation fails open. With Redis down or CACHE_ENABLED off, reads
miss and writes are dropped, and callers fall through to the marketplace.
"""

import json
import logging
from typing import Any, Optional

from .config import CACHE_ENABLED, REFERENCE_DATA_TTL
from .rate_limiter import get_redis_client

logger = logging.getLogger(__name__)


class Cache:
    def __init__(self, enabled: bool = CACHE_ENABLED):
        self.enabled = enabled
        self._client = None

    @property
    def client(self):
        if not self.enabled:
            return None
        if self._client is None:
            try:
                self._client = get_redis_client()
            except Exception as e:
                logger.warning(f"⚠️ Cache off, Redis unavailable: {e}")
                return None
        return self._client

    def get(self, key: str) -> Optional[Any]:
        client = self.client
        if client is None:
            return None
        try:
            raw = client.get(key)
        except Exception as e:
            logger.error(f"❌ Cache read failed for {key}: {e}")
            return None
        logger.debug(f"{'✅ hit' if raw else '➖ miss'}: {key}")
        return json.loads(raw) if raw else None

    def set(self, key: str, value: Any, ttl: int = REFERENCE_DATA_TTL) -> bool:
        client = self.client
        if client is None:
            return False
        try:
            client.setex(key, ttl, json.dumps(value))
        except Exception as e:
            logger.error(f"❌ Cache write failed for {key}: {e}")
            return False
        return True

    def delete(self, key: str) -> bool:
        client = self.client
        if client is None:
            return False
        try:
            client.delete(key)
        except Exception as e:
            logger.error(f"❌ Cache delete failed for {key}: {e}")
            return False
        return True

    def delete_pattern(self, pattern: str) -> int:
        """Drop every key matching a glob such as 'ref:categories:*'"""
        client = self.client
        if client is None:
            return 0
        try:
            keys = list(client.scan_iter(match=pattern))
            deleted = client.delete(*keys) if keys else 0
        except Exception as e:
            logger.error(f"❌ Cache invalidation failed for {pattern}: {e}")
            return 0
        if deleted:
            logger.info(f"🗑️ Invalidated {deleted} cached entries for {pattern}")
        return deleted


cache = Cache()


def build_reference_key(kind: str, params: Optional[dict] = None) -> str:
    """Key for one filtered reference list; the same filters in any order share a key"""
    parts = [f"{name}={params[name]}" for name in sorted(params or {}) if params[name] is not None]
    return f"ref:{kind}:{'&'.join(parts) or 'all'}"


def invalidate_reference_data(kind: str) -> int:
    """Forget every cached list of one kind (categories, cities, tags) after an admin write"""
    return cache.delete_pattern(f"ref:{kind}:*")


def build_analytics_key(scope: str, owner: str, period: str) -> str:
    return f"analytics:{scope}:{owner}:{period}"

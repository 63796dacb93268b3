"""Cached marketplace reference lists (categories, cities, culture tags)"""

import logging
from typing import Optional

from ..cache import build_reference_key, cache
from ..config import REFERENCE_DATA_TTL
from .marketplace_client import MarketplaceClient, items_of

logger = logging.getLogger(__name__)


async def _cached_list(
    marketplace: MarketplaceClient, kind: str, path: str, key: str, params: Optional[dict] = None
) -> list:
    cache_key = build_reference_key(kind, params)
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    payload = await marketplace.get(path, params=params)
    items = items_of(payload, key)
    cache.set(cache_key, items, REFERENCE_DATA_TTL)
    return items


async def get_categories(marketplace: MarketplaceClient, params: Optional[dict] = None) -> list:
    return await _cached_list(marketplace, "categories", "/api/categories", "categories", params)


async def get_cities(marketplace: MarketplaceClient) -> list:
    return await _cached_list(marketplace, "cities", "/api/cities", "cities")


async def get_tags(marketplace: MarketplaceClient, params: Optional[dict] = None) -> list:
    return await _cached_list(marketplace, "tags", "/api/tags", "tags", params)

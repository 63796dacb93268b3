"""
Category slug normalization for marketplace providers

Older provider records carry short or legacy category slugs ("dj", "venue",
"makeup"). This rewrites them to the canonical slugs used by the catalog.
"""

import logging
from typing import Iterable

from .marketplace_client import MarketplaceClient, items_of, total_of

logger = logging.getLogger(__name__)

# Legacy slug -> canonical slug
CATEGORY_SLUG_MAP = {
    "makeup": "makeup-artists",
    "photographers": "photographers",
    "videography": "videographers",
    "dj": "djs",
    "music": "musicians",
    "decorators": "decorators",
    "decoration": "decoration",
    "venue": "venues",
    "caterers": "caterers",
    "florists": "florists",
    "bakers": "bakers",
    "eventplanners": "event-planners",
    "planners": "event-planners",
}


def normalize_categories(categories: Iterable[str]) -> list[str]:
    """
    Map every slug through CATEGORY_SLUG_MAP (case-insensitive) and drop
    duplicates, keeping the first occurrence. Unknown slugs are kept as-is.

    Example:
        >>> normalize_categories(["DJ", "djs", "Venue", "custom"])
        ['djs', 'venues', 'custom']
    """
    normalized: list[str] = []
    for slug in categories or []:
        mapped = CATEGORY_SLUG_MAP.get(slug.lower(), slug)
        if mapped not in normalized:
            normalized.append(mapped)
    return normalized


async def normalize_provider_category_slugs(marketplace: MarketplaceClient, page_size: int = 100) -> dict:
    """
    Walk every provider through the admin API and patch the ones whose
    category list changes.

    Returns:
        {"checked": int, "updated": int}
    """
    checked = 0
    updated = 0
    page = 1

    while True:
        payload = await marketplace.get("/api/admin/providers", params={"page": page, "limit": page_size})
        providers = items_of(payload, "providers")
        if not providers:
            break

        for provider in providers:
            checked += 1
            current = provider.get("categories") or []
            normalized = normalize_categories(current)
            if normalized == current:
                continue
            await marketplace.patch(f"/api/providers/{provider['id']}", json={"categories": normalized})
            updated += 1
            logger.info(f"🏷️ Provider {provider['id']}: {current} -> {normalized}")

        total = total_of(payload)
        if len(providers) < page_size or (total and page * page_size >= total):
            break
        page += 1

    logger.info(f"✅ Category slug normalization complete: checked {checked}, updated {updated}")
    return {"checked": checked, "updated": updated}

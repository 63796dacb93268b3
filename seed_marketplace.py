"""
Seed marketplace reference data (categories, UK cities, culture tags)
Run: MARKETPLACE_SERVICE_TOKEN=... python seed_marketplace.py
"""

import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from eva.cache import invalidate_reference_data
from eva.services.marketplace_client import MarketplaceClient, create_http_client, service_credentials
from eva.services.seed_service import seed_marketplace

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


async def main() -> dict:
    async with create_http_client() as http:
        summary = await seed_marketplace(MarketplaceClient(http, service_credentials()))
    for kind in ("categories", "cities", "tags"):
        invalidate_reference_data(kind)
    return summary


if __name__ == "__main__":
    logger.info("🌱 Seeding marketplace reference data...")
    try:
        for kind, counts in asyncio.run(main()).items():
            logger.info(f"  {kind}: {counts['created']} created, {counts['skipped']} skipped")
        logger.info("✅ Seeding complete")
    except KeyboardInterrupt:
        logger.info("👋 Stopped by user")
    except Exception as e:
        logger.error(f"❌ Seeding failed: {e}")
        sys.exit(1)

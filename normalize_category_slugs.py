"""
Normalize legacy provider category slugs
Run: MARKETPLACE_SERVICE_TOKEN=... python normalize_category_slugs.py
"""

import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from eva.services.marketplace_client import MarketplaceClient, create_http_client, service_credentials
from eva.services.slug_normalizer import normalize_provider_category_slugs

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


async def main() -> dict:
    async with create_http_client() as http:
        return await normalize_provider_category_slugs(MarketplaceClient(http, service_credentials()))


if __name__ == "__main__":
    logger.info("🏷️ Normalizing provider category slugs...")
    try:
        summary = asyncio.run(main())
        logger.info(f"Providers updated: {summary['updated']} (of {summary['checked']})")
    except KeyboardInterrupt:
        logger.info("👋 Stopped by user")
    except Exception as e:
        logger.error(f"❌ Normalization failed: {e}")
        sys.exit(1)

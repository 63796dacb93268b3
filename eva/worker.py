"""
ARQ Background Worker
Housekeeping for portal-local data and marketplace maintenance jobs
"""

import logging
import os
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from arq.connections import RedisSettings
from arq.cron import cron

from .config import DRAFT_RETENTION_DAYS, REDIS_DB, REDIS_HOST, REDIS_PASSWORD, REDIS_PORT, REDIS_SSL, REDIS_URL
from .database import session_scope
from .domain.onboarding.repository import OnboardingDraftRepository
from .services.marketplace_client import MarketplaceClient, create_http_client, service_credentials
from .services.slug_normalizer import normalize_provider_category_slugs

logger = logging.getLogger(__name__)


def get_redis_settings() -> RedisSettings:
    """arq connection settings built from the shared Redis configuration"""
    timeouts = {"conn_timeout": 15, "conn_retry_delay": 1}
    if REDIS_URL:
        # rediss:// turns on TLS, the path selects the database
        return replace(RedisSettings.from_dsn(REDIS_URL), **timeouts)
    return RedisSettings(
        host=REDIS_HOST,
        port=REDIS_PORT,
        password=REDIS_PASSWORD,
        database=REDIS_DB,
        ssl=REDIS_SSL,
        **timeouts,
    )


async def purge_stale_onboarding_drafts(ctx, retention_days: int = DRAFT_RETENTION_DAYS):
    """
    Daily cron job deleting onboarding drafts nobody touched for
    `retention_days` days.
    """
    cutoff = datetime.now(timezone.utc) - timedelta(days=retention_days)
    logger.info(f"🧹 Purging onboarding drafts untouched since {cutoff.date()}")

    with session_scope() as db:
        deleted = OnboardingDraftRepository.purge_older_than(db, cutoff)
    logger.info(f"✅ Purged {deleted} stale onboarding drafts")
    return {"deleted": deleted}


async def normalize_category_slugs_task(ctx):
    """Rewrite legacy provider category slugs through the admin API"""
    logger.info(f"🚀 ARQ Worker: category slug normalization (job {ctx.get('job_id', 'unknown')})")

    async with create_http_client() as http:
        marketplace = MarketplaceClient(http, service_credentials())
        try:
            return await normalize_provider_category_slugs(marketplace)
        except Exception as e:
            logger.error(f"❌ Category slug normalization failed: {str(e)}")
            raise


class WorkerSettings:
    """ARQ Worker Settings"""

    functions = [
        purge_stale_onboarding_drafts,
        normalize_category_slugs_task,
    ]
    redis_settings = get_redis_settings()

    max_jobs = int(os.getenv("ARQ_MAX_JOBS", "10"))
    job_timeout = int(os.getenv("ARQ_JOB_TIMEOUT", "600"))
    keep_result = int(os.getenv("ARQ_KEEP_RESULT", "3600"))  # Keep job results for 1 hour

    health_check_interval = 60
    max_tries = 3

    cron_jobs = [
        cron(purge_stale_onboarding_drafts, hour=3, minute=0),  # 3 AM UTC
    ]

    logger.info(f"🔧 ARQ Worker configured: max_jobs={max_jobs}, timeout={job_timeout}s")

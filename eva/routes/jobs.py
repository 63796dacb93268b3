"""
Queueing and status of portal background jobs (arq)
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from arq import create_pool
from arq.jobs import Job, JobStatus
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..auth import require_admin
from ..schemas import SessionUser
from ..worker import get_redis_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])

POOL_TIMEOUT = 20.0
STATUS_TIMEOUT = 15.0
RESULT_TIMEOUT = 10.0

STATUS_NAMES = {
    JobStatus.deferred: "queued",
    JobStatus.queued: "queued",
    JobStatus.in_progress: "in_progress",
    JobStatus.complete: "complete",
}


class JobStatusResponse(BaseModel):
    jobId: str
    status: str  # queued, in_progress, complete, failed
    result: Optional[dict] = None
    error: Optional[str] = None


@asynccontextmanager
async def job_pool():
    pool = await asyncio.wait_for(create_pool(get_redis_settings()), timeout=POOL_TIMEOUT)
    try:
        yield pool
    finally:
        await pool.close()


async def enqueue_job(function: str, *args) -> str:
    """Queue a worker function by name and return the job id"""
    async with job_pool() as pool:
        job = await pool.enqueue_job(function, *args)
    if job is None:
        raise HTTPException(status_code=409, detail="An identical job is already queued")
    logger.info(f"📤 Queued {function} as job {job.job_id}")
    return job.job_id


async def read_job(pool, job_id: str) -> JobStatusResponse:
    job = Job(job_id, pool)
    state = await asyncio.wait_for(job.status(), timeout=STATUS_TIMEOUT)
    if state == JobStatus.not_found:
        raise HTTPException(status_code=404, detail="Job not found")

    response = JobStatusResponse(jobId=job_id, status=STATUS_NAMES.get(state, "unknown"))
    if state != JobStatus.complete:
        return response

    try:
        outcome = await asyncio.wait_for(job.result(), timeout=RESULT_TIMEOUT)
        response.result = outcome if isinstance(outcome, dict) else {"data": outcome}
    except asyncio.TimeoutError:
        logger.warning(f"⏰ Timeout reading result of job {job_id}")
        response.status, response.error = "failed", "Timeout retrieving job result"
    except Exception as e:
        # arq re-raises the job's own exception from result()
        logger.error(f"❌ Job {job_id} failed: {e}")
        response.status, response.error = "failed", str(e)
    return response


async def get_job_status_with_retry(job_id: str, max_retries: int = 3, retry_delay: float = 1.0) -> JobStatusResponse:
    """Read a job's status, retrying Redis hiccups with exponential backoff"""
    for attempt in range(1, max_retries + 1):
        try:
            async with job_pool() as pool:
                return await read_job(pool, job_id)
        except HTTPException:
            raise
        except asyncio.TimeoutError:
            logger.warning(f"⏰ Job queue timeout ({attempt}/{max_retries}) for job {job_id}")
            if attempt == max_retries:
                raise HTTPException(
                    status_code=504, detail="Timeout connecting to job queue - please try again"
                ) from None
        except Exception as e:
            logger.warning(f"🔄 Job queue error ({attempt}/{max_retries}) for job {job_id}: {e}")
            if attempt == max_retries:
                raise HTTPException(status_code=500, detail="Failed to retrieve job status after retries") from e

        await asyncio.sleep(retry_delay * 2 ** (attempt - 1))


@router.get("/status/{job_id}", response_model=JobStatusResponse)
async def get_job_status(job_id: str, current_user: SessionUser = Depends(require_admin)):
    """Status of a maintenance job queued from the admin portal"""
    return await get_job_status_with_retry(job_id)

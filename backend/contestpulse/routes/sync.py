from __future__ import annotations
from typing import AsyncGenerator
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from redis import Redis
from redis.exceptions import RedisError
from rq import Queue
import structlog

from contestpulse.config import settings
from contestpulse.errors import StorageError
from contestpulse.jobs.sync_metrics import run_sync, sync_metrics
from contestpulse.schemas.sync import SyncRunPublic, SyncErrorPublic, SyncEnqueued
from contestpulse.services.stats_provider import HttpStatsProvider, StatsProvider
from contestpulse.services.submission_store import SubmissionStore, get_store
from contestpulse.services.sync_lock import SyncAlreadyRunning, SyncLockUnavailable

router = APIRouter(prefix="/sync", tags=["sync"])
log = structlog.get_logger()

async def get_stats_provider() -> AsyncGenerator[StatsProvider, None]:
    async with HttpStatsProvider() as provider:
        yield provider

def get_queue() -> Queue:
    return Queue(settings.sync_queue_name, connection=Redis.from_url(settings.redis_url))

@router.post(
    "/metrics",
    response_model=SyncRunPublic,
    responses={409: {"model": SyncErrorPublic}, 500: {"model": SyncErrorPublic}, 503: {"model": SyncErrorPublic}},
)
async def run_metrics_sync(
    store: SubmissionStore = Depends(get_store),
    provider: StatsProvider = Depends(get_stats_provider),
):
    try:
        summary = await run_sync(store, provider)
    except SyncAlreadyRunning as e:
        return JSONResponse(status_code=409, content={"success": False, "error": str(e)})
    except SyncLockUnavailable as e:
        return JSONResponse(status_code=503, content={"success": False, "error": str(e)})
    except StorageError as e:
        log.error("sync_aborted", error=str(e))
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
    return summary.as_dict()

@router.post("/metrics/enqueue", response_model=SyncEnqueued, status_code=202)
async def enqueue_metrics_sync(q: Queue = Depends(get_queue)):
    try:
        job = q.enqueue(sync_metrics)
    except RedisError as e:
        raise HTTPException(status_code=503, detail=f"Queue unavailable: {e}")
    return SyncEnqueued(job_id=job.id, queue=q.name)

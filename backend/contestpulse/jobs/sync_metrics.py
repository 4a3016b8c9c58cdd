from __future__ import annotations
import asyncio

import structlog

from contestpulse.config import settings
from contestpulse.db import SessionLocal
from contestpulse.errors import StorageError
from contestpulse.services.metrics_sync import MetricsSyncPipeline, SyncRunSummary
from contestpulse.services.stats_provider import HttpStatsProvider, StatsProvider
from contestpulse.services.submission_store import SqlSubmissionStore, SubmissionStore
from contestpulse.services.sync_lock import SyncAlreadyRunning, SyncLockUnavailable, sync_lease

log = structlog.get_logger()


async def run_sync(
    store: SubmissionStore,
    provider: StatsProvider | None = None,
    *,
    deadline: float | None = None,
    cancel: asyncio.Event | None = None,
) -> SyncRunSummary:
    """One metrics sync under the (optional) run lease.

    Raises StorageError, SyncAlreadyRunning or SyncLockUnavailable.
    """
    if deadline is None:
        deadline = settings.sync_deadline_seconds or None
    if settings.sync_lock_enabled:
        # A run must not outlive its lease.
        ttl = settings.sync_lock_ttl_seconds
        deadline = min(deadline, ttl) if deadline else ttl
    with sync_lease():
        if provider is None:
            async with HttpStatsProvider() as p:
                return await MetricsSyncPipeline(store, p).run(deadline=deadline, cancel=cancel)
        return await MetricsSyncPipeline(store, provider).run(deadline=deadline, cancel=cancel)


async def _run() -> dict:
    store = SqlSubmissionStore(SessionLocal)
    try:
        summary = await run_sync(store)
    except SyncAlreadyRunning as e:
        log.info("sync_not_started", reason=str(e))
        return {"success": False, "error": str(e)}
    except (StorageError, SyncLockUnavailable) as e:
        log.error("sync_aborted", error=str(e))
        return {"success": False, "error": str(e)}
    return summary.as_dict()


def sync_metrics() -> dict:
    # RQ entry point (sync); run the async coroutine
    return asyncio.run(_run())

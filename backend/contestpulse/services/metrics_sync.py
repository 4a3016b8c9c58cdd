from __future__ import annotations
import asyncio
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone as dt_tz
from typing import Any, Callable, Iterable, Literal

import structlog

from contestpulse.config import settings
from contestpulse.errors import ExternalProviderError, NotFoundError, StorageError
from contestpulse.services.stats_provider import StatsProvider
from contestpulse.services.submission_store import SubmissionStore
from contestpulse.services.video_ids import extract_video_id

log = structlog.get_logger()

SkipReason = Literal["no_url", "deadline", "cancelled"]


# ---------- per-submission outcomes ----------

@dataclass(frozen=True)
class Updated:
    submission_id: str


@dataclass(frozen=True)
class Skipped:
    submission_id: str
    reason: SkipReason


@dataclass(frozen=True)
class Failed:
    submission_id: str
    reason: str


SyncOutcome = Updated | Skipped | Failed


@dataclass(frozen=True)
class SyncRunSummary:
    updated: int = 0
    failed: int = 0
    skipped: int = 0
    total: int = 0
    success: bool = True

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "updated": self.updated,
            "failed": self.failed,
            "skipped": self.skipped,
            "total": self.total,
        }


def summarize(outcomes: Iterable[SyncOutcome]) -> SyncRunSummary:
    """Fold per-submission outcomes into run counts. Order does not matter."""
    updated = failed = skipped = 0
    for o in outcomes:
        if isinstance(o, Updated):
            updated += 1
        elif isinstance(o, Failed):
            failed += 1
        else:
            skipped += 1
    return SyncRunSummary(updated=updated, failed=failed, skipped=skipped, total=updated + failed + skipped)


def _utcnow() -> datetime:
    return datetime.now(dt_tz.utc)


# ---------- pipeline ----------

class MetricsSyncPipeline:
    """
    Reconcile stored engagement metrics with the stats provider.

    Each call to `run()` is a self-contained batch: list the active
    submissions, sync each one independently, fold the outcomes into a
    summary. Per-item problems never escape `run()`; only a failure to list
    submissions does (as StorageError).
    """

    def __init__(
        self,
        store: SubmissionStore,
        provider: StatsProvider,
        *,
        max_concurrency: int | None = None,
        call_timeout: float | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.provider = provider
        self.max_concurrency = max(1, max_concurrency or settings.sync_max_concurrency)
        self.call_timeout = call_timeout if call_timeout is not None else settings.stats_provider_timeout_seconds
        self.clock = clock

    async def sync_one(self, submission: Any, now: datetime) -> SyncOutcome:
        sid = str(submission.id)
        url = getattr(submission, "url", None)
        if not url:
            log.info("sync_skip_no_url", submission_id=sid)
            return Skipped(sid, "no_url")

        video_id = extract_video_id(url)
        if video_id is None:
            log.warning("sync_failed", submission_id=sid, reason="unrecognized_url", url=url)
            return Failed(sid, "unrecognized_url")

        try:
            if self.call_timeout and self.call_timeout > 0:
                stats = await asyncio.wait_for(self.provider.fetch_video_stats(url), timeout=self.call_timeout)
            else:
                stats = await self.provider.fetch_video_stats(url)
        except asyncio.TimeoutError:
            log.warning("sync_failed", submission_id=sid, reason="provider_timeout")
            return Failed(sid, "provider_timeout")
        except ExternalProviderError as e:
            log.warning("sync_failed", submission_id=sid, reason="provider_error", error=str(e))
            return Failed(sid, "provider_error")

        try:
            await self.store.upsert_submission_metrics(submission.id, stats, now, video_id=video_id)
        except (StorageError, NotFoundError) as e:
            log.warning("sync_failed", submission_id=sid, reason="storage_error", error=str(e))
            return Failed(sid, "storage_error")

        log.info("sync_updated", submission_id=sid, **stats.as_dict())
        return Updated(sid)

    async def _guarded(
        self,
        submission: Any,
        now: datetime,
        sem: asyncio.Semaphore,
        stop_at: float | None,
        cancel: asyncio.Event | None,
    ) -> SyncOutcome:
        sid = str(submission.id)
        async with sem:
            if cancel is not None and cancel.is_set():
                return Skipped(sid, "cancelled")
            if stop_at is not None and asyncio.get_running_loop().time() >= stop_at:
                return Skipped(sid, "deadline")
            try:
                return await self.sync_one(submission, now)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.exception("sync_failed", submission_id=sid, reason="unexpected", error=str(e))
                return Failed(sid, "unexpected")

    async def run(self, *, deadline: float | None = None, cancel: asyncio.Event | None = None) -> SyncRunSummary:
        """
        Run one sync batch.

        Args:
            deadline: seconds the whole run may take. Submissions not finished
                by then are counted as skipped with reason "deadline".
            cancel: once set, no further provider calls are started; the
                remaining submissions are counted as skipped ("cancelled").

        Raises:
            StorageError: listing the active submissions failed.
        """
        run_id = uuid.uuid4().hex[:12]
        structlog.contextvars.bind_contextvars(sync_run_id=run_id)
        try:
            submissions = list(await self.store.list_active_submissions())
            now = self.clock()
            log.info("sync_started", total=len(submissions), max_concurrency=self.max_concurrency)

            loop = asyncio.get_running_loop()
            stop_at = loop.time() + deadline if deadline and deadline > 0 else None
            sem = asyncio.Semaphore(self.max_concurrency)
            tasks = [
                asyncio.create_task(self._guarded(s, now, sem, stop_at, cancel))
                for s in submissions
            ]

            pending: set[asyncio.Task] = set()
            if tasks:
                timeout = max(0.0, stop_at - loop.time()) if stop_at is not None else None
                try:
                    _, pending = await asyncio.wait(tasks, timeout=timeout)
                except asyncio.CancelledError:
                    # The run itself was cancelled; no child may outlive it.
                    for t in tasks:
                        t.cancel()
                    await asyncio.gather(*tasks, return_exceptions=True)
                    log.warning("sync_cancelled", total=len(tasks))
                    raise
                for t in pending:
                    t.cancel()
                if pending:
                    await asyncio.gather(*pending, return_exceptions=True)

            outcomes: list[SyncOutcome] = []
            for s, t in zip(submissions, tasks):
                if t in pending or t.cancelled():
                    outcomes.append(Skipped(str(s.id), "deadline"))
                else:
                    outcomes.append(t.result())

            summary = summarize(outcomes)
            log.info("sync_complete", **summary.as_dict())
            return summary
        finally:
            structlog.contextvars.unbind_contextvars("sync_run_id")

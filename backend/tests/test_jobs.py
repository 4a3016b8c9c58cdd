from __future__ import annotations
import asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from conftest import FakeProvider, FakeRedis, make_contest, make_submission
from contestpulse.db import Base
from contestpulse.jobs import sync_metrics as job
from contestpulse.services import sync_lock
from contestpulse.services.metrics_sync import SyncRunSummary


def _maker(tmp_path, create_tables: bool):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'jobs.db'}", future=True)
    maker = async_sessionmaker(engine, expire_on_commit=False)

    async def _seed():
        if create_tables:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            contest = make_contest()
            async with maker() as session:
                session.add(contest)
                await session.flush()
                session.add_all([make_submission(contest.id), make_submission(contest.id, url=None)])
                await session.commit()
        await engine.dispose()

    asyncio.run(_seed())
    return engine, maker


def test_job_returns_summary_dict(tmp_path, monkeypatch):
    engine, maker = _maker(tmp_path, create_tables=True)
    monkeypatch.setattr(job, "SessionLocal", maker)
    monkeypatch.setattr(job.settings, "stats_provider_url", "")
    # No provider configured: the URL row fails, the URL-less row is skipped.
    assert job.sync_metrics() == {"success": True, "updated": 0, "failed": 1, "skipped": 1, "total": 2}
    asyncio.run(engine.dispose())


def test_job_reports_listing_failure(tmp_path, monkeypatch):
    engine, maker = _maker(tmp_path, create_tables=False)
    monkeypatch.setattr(job, "SessionLocal", maker)
    result = job.sync_metrics()
    assert result["success"] is False
    assert "failed to list active submissions" in result["error"]
    asyncio.run(engine.dispose())


def test_job_reports_unreachable_lock(monkeypatch):
    monkeypatch.setattr(job.settings, "sync_lock_enabled", True)
    monkeypatch.setattr(sync_lock, "_redis", lambda: FakeRedis(down=True))
    result = job.sync_metrics()
    assert result["success"] is False
    assert "sync lock unavailable" in result["error"]


def test_run_deadline_is_capped_by_lease_ttl(store, monkeypatch):
    seen = {}

    class Recording:
        def __init__(self, store, provider):
            pass

        async def run(self, *, deadline=None, cancel=None):
            seen["deadline"] = deadline
            return SyncRunSummary()

    monkeypatch.setattr(job, "MetricsSyncPipeline", Recording)
    monkeypatch.setattr(job.settings, "sync_lock_enabled", True)
    monkeypatch.setattr(job.settings, "sync_lock_ttl_seconds", 600)
    monkeypatch.setattr(sync_lock, "_redis", lambda: FakeRedis())

    monkeypatch.setattr(job.settings, "sync_deadline_seconds", 0)
    asyncio.run(job.run_sync(store, FakeProvider()))
    assert seen["deadline"] == 600

    monkeypatch.setattr(job.settings, "sync_deadline_seconds", 5000)
    asyncio.run(job.run_sync(store, FakeProvider()))
    assert seen["deadline"] == 600

    asyncio.run(job.run_sync(store, FakeProvider(), deadline=30))
    assert seen["deadline"] == 30

    monkeypatch.setattr(job.settings, "sync_lock_enabled", False)
    monkeypatch.setattr(job.settings, "sync_deadline_seconds", 0)
    asyncio.run(job.run_sync(store, FakeProvider()))
    assert seen["deadline"] is None

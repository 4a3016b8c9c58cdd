from __future__ import annotations
import uuid
from datetime import datetime
from typing import Protocol, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from contestpulse.db import SessionLocal
from contestpulse.errors import NotFoundError, StorageError
from contestpulse.models.contest import Contest
from contestpulse.models.submission import Submission
from contestpulse.services.stats_provider import VideoStats


class SubmissionStore(Protocol):
    async def list_active_submissions(self) -> Sequence[Submission]: ...

    async def upsert_submission_metrics(
        self, submission_id, metrics: VideoStats, synced_at: datetime, video_id: str | None = None,
    ) -> None: ...

    async def get_contest(self, contest_id) -> Contest: ...

    async def list_contest_submissions(self, contest_id) -> Sequence[Submission]: ...


def _as_uuid(value, what: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise NotFoundError(f"{what} not found: {value}")


class SqlSubmissionStore:
    """SubmissionStore backed by the contests/submissions tables."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self.sessionmaker = sessionmaker

    async def list_active_submissions(self) -> list[Submission]:
        try:
            async with self.sessionmaker() as session:
                rows = (await session.execute(
                    select(Submission).where(Submission.active.is_(True)).order_by(Submission.submitted_at.asc())
                )).scalars().all()
                return list(rows)
        except SQLAlchemyError as e:
            raise StorageError(f"failed to list active submissions: {e}") from e

    async def upsert_submission_metrics(
        self, submission_id, metrics: VideoStats, synced_at: datetime, video_id: str | None = None,
    ) -> None:
        """Replace the stored counters. `video_id`, when given, is recorded alongside."""
        sid = _as_uuid(submission_id, "Submission")
        values = dict(
            views=metrics.views,
            likes=metrics.likes,
            comments=metrics.comments,
            shares=metrics.shares,
            last_synced_at=synced_at,
        )
        if video_id is not None:
            values["video_id"] = video_id
        try:
            async with self.sessionmaker() as session:
                res = await session.execute(
                    update(Submission)
                    .where(Submission.id == sid)
                    .values(**values)
                )
                if res.rowcount == 0:
                    await session.rollback()
                    raise NotFoundError(f"Submission not found: {submission_id}")
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"failed to update metrics for {submission_id}: {e}") from e

    async def get_contest(self, contest_id) -> Contest:
        cid = _as_uuid(contest_id, "Contest")
        try:
            async with self.sessionmaker() as session:
                ch = await session.get(Contest, cid)
        except SQLAlchemyError as e:
            raise StorageError(f"failed to load contest {contest_id}: {e}") from e
        if not ch:
            raise NotFoundError(f"Contest not found: {contest_id}")
        return ch

    async def list_contest_submissions(self, contest_id) -> list[Submission]:
        cid = _as_uuid(contest_id, "Contest")
        try:
            async with self.sessionmaker() as session:
                rows = (await session.execute(
                    select(Submission).where(Submission.contest_id == cid, Submission.active.is_(True))
                )).scalars().all()
                return list(rows)
        except SQLAlchemyError as e:
            raise StorageError(f"failed to list submissions for contest {contest_id}: {e}") from e


def get_store() -> SubmissionStore:
    return SqlSubmissionStore(SessionLocal)

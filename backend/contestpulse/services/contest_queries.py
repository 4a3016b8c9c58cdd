from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from contestpulse.services.countdown import CountdownKind, Duration, get_countdown
from contestpulse.services.leaderboard import RankedEntry, rank_submissions
from contestpulse.services.status import Status, compute_status
from contestpulse.services.submission_store import SubmissionStore


@dataclass(frozen=True)
class ContestClock:
    """A contest as seen at one instant."""
    contest: Any
    status: Status
    countdown: tuple[CountdownKind, Duration] | None


async def get_contest_clock(store: SubmissionStore, contest_id, now: datetime) -> ContestClock:
    """Raises NotFoundError / ValidationError unchanged."""
    contest = await store.get_contest(contest_id)
    return ContestClock(
        contest=contest,
        status=compute_status(contest, now),
        countdown=get_countdown(contest, now),
    )


async def get_contest_status(store: SubmissionStore, contest_id, now: datetime) -> Status:
    return (await get_contest_clock(store, contest_id, now)).status


async def get_contest_countdown(store: SubmissionStore, contest_id, now: datetime) -> tuple[CountdownKind, Duration] | None:
    return (await get_contest_clock(store, contest_id, now)).countdown


async def get_leaderboard(
    store: SubmissionStore,
    contest_id,
    limit: int | None = None,
    previous_ranks: Mapping[str, int] | None = None,
) -> list[RankedEntry]:
    """Read-only ranked view of one contest's active submissions."""
    contest = await store.get_contest(contest_id)
    submissions = await store.list_contest_submissions(contest.id)
    return rank_submissions(
        submissions,
        num_winners=int(contest.num_winners or 0),
        min_views=int(contest.min_views or 0),
        previous_ranks=previous_ranks,
        prize_titles=contest.prize_titles,
        limit=limit,
    )

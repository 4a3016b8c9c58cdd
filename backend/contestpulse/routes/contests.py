from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query
from datetime import datetime, timezone as dt_tz
from uuid import UUID

from contestpulse.errors import NotFoundError, ValidationError
from contestpulse.schemas.contest import ContestStatusPublic, CountdownPublic, DurationPublic
from contestpulse.schemas.submission import LeaderboardEntryPublic, LeaderboardCompare
from contestpulse.services.contest_queries import ContestClock, get_contest_clock, get_leaderboard
from contestpulse.services.countdown import format_time_remaining
from contestpulse.services.leaderboard import RankedEntry
from contestpulse.services.status import status_label, to_instant
from contestpulse.services.submission_store import SubmissionStore, get_store

router = APIRouter(prefix="/contests", tags=["contests"])

def _now(now: datetime | None) -> datetime:
    return to_instant(now, "now") if now is not None else datetime.now(dt_tz.utc)

def _to_entry_public(e: RankedEntry) -> LeaderboardEntryPublic:
    s = e.submission
    return LeaderboardEntryPublic(
        submission_id=s.id,
        rank=e.rank,
        previous_rank=e.previous_rank,
        rank_change=e.rank_change,
        views=e.views,
        views_display=e.views_display,
        likes=int(s.likes or 0),
        comments=int(s.comments or 0),
        shares=int(s.shares or 0),
        is_winner=e.is_winner,
        prize_title=e.prize_title,
        username=s.username,
        full_name=s.full_name,
        title=s.title,
        url=s.url,
        thumbnail_url=s.thumbnail_url,
        last_synced_at=s.last_synced_at,
    )

async def _clock(store: SubmissionStore, contest_id: UUID, now: datetime | None) -> ContestClock:
    try:
        return await get_contest_clock(store, contest_id, _now(now))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Contest not found")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

@router.get("/{contest_id}/status", response_model=ContestStatusPublic)
async def contest_status(
    contest_id: UUID,
    now: datetime | None = Query(default=None, description="Evaluate at this instant (defaults to server time)"),
    store: SubmissionStore = Depends(get_store),
):
    clock = await _clock(store, contest_id, now)
    return ContestStatusPublic(
        contest_id=clock.contest.id,
        status=clock.status,
        label=status_label(clock.status),
        persisted_status=clock.contest.status,
    )

@router.get("/{contest_id}/countdown", response_model=CountdownPublic)
async def contest_countdown(
    contest_id: UUID,
    now: datetime | None = Query(default=None),
    store: SubmissionStore = Depends(get_store),
):
    clock = await _clock(store, contest_id, now)
    if clock.countdown is None:
        return CountdownPublic(contest_id=clock.contest.id, status=clock.status)
    kind, d = clock.countdown
    return CountdownPublic(
        contest_id=clock.contest.id,
        status=clock.status,
        kind=kind,
        duration=DurationPublic(days=d.days, hours=d.hours, minutes=d.minutes, seconds=d.seconds),
        display=format_time_remaining(d),
    )

@router.get("/{contest_id}/leaderboard", response_model=list[LeaderboardEntryPublic])
async def leaderboard(
    contest_id: UUID,
    limit: int = Query(default=100, ge=1, le=1000),
    store: SubmissionStore = Depends(get_store),
):
    try:
        entries = await get_leaderboard(store, contest_id, limit=limit)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Contest not found")
    return [_to_entry_public(e) for e in entries]

@router.post("/{contest_id}/leaderboard/compare", response_model=list[LeaderboardEntryPublic])
async def leaderboard_compare(
    contest_id: UUID,
    body: LeaderboardCompare,
    limit: int = Query(default=100, ge=1, le=1000),
    store: SubmissionStore = Depends(get_store),
):
    try:
        entries = await get_leaderboard(store, contest_id, limit=limit, previous_ranks=body.previous_ranks)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Contest not found")
    return [_to_entry_public(e) for e in entries]

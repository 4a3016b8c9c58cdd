from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Literal
from uuid import UUID
from datetime import datetime

RankChange = Literal["up", "down", "unchanged", "unknown"]


class LeaderboardEntryPublic(BaseModel):
    submission_id: UUID
    rank: int
    previous_rank: int | None = None
    rank_change: RankChange
    views: int
    views_display: str
    likes: int = 0
    comments: int = 0
    shares: int = 0
    is_winner: bool
    prize_title: str | None = None
    # passthrough display fields
    username: str | None = None
    full_name: str | None = None
    title: str | None = None
    url: str | None = None
    thumbnail_url: str | None = None
    last_synced_at: datetime | None = None


class LeaderboardCompare(BaseModel):
    previous_ranks: dict[str, int] = Field(default_factory=dict, description="submission_id -> rank from an earlier snapshot")

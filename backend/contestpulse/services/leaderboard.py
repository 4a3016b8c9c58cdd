from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Mapping

RankChange = Literal["up", "down", "unchanged", "unknown"]


@dataclass(frozen=True)
class RankedEntry:
    submission_id: str
    rank: int
    previous_rank: int | None
    rank_change: RankChange
    views: int
    views_display: str
    is_winner: bool
    prize_title: str | None
    submission: Any


def format_number(value: int | float) -> str:
    """
    Compact engagement counts.

    >>> format_number(950), format_number(1500), format_number(2_300_000)
    ('950', '1.5K', '2.3M')
    """
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return str(int(value))


def classify_rank_change(current: int, previous: int | None) -> RankChange:
    if previous is None:
        return "unknown"
    if current < previous:
        return "up"
    if current > previous:
        return "down"
    return "unchanged"


def is_winner(rank: int, views: int, num_winners: int, min_views: int = 0) -> bool:
    return rank <= num_winners and views >= min_views


def _prize_titles(raw: Any) -> dict[int, str]:
    # Stored as [{"rank": 1, "title": "Gold"}, ...]; anything malformed is ignored.
    out: dict[int, str] = {}
    for item in raw or []:
        if not isinstance(item, Mapping):
            continue
        rank, title = item.get("rank"), item.get("title")
        if isinstance(rank, int) and title:
            out[rank] = str(title)
    return out


def rank_submissions(
    submissions: Iterable[Any],
    *,
    num_winners: int,
    min_views: int = 0,
    previous_ranks: Mapping[str, int] | None = None,
    prize_titles: Any = None,
    limit: int | None = None,
) -> list[RankedEntry]:
    """
    Rank submissions by views, highest first.

    Equal view counts are ordered by submission id so the result never
    depends on input order. ``previous_ranks`` maps submission id (as str)
    to the rank from an earlier snapshot held by the caller. ``limit`` caps
    the returned list after ranking; ranks are unaffected by it.
    """
    previous_ranks = previous_ranks or {}
    titles = _prize_titles(prize_titles)
    ordered = sorted(submissions, key=lambda s: (-int(s.views or 0), str(s.id)))
    if limit is not None:
        ordered = ordered[: max(0, limit)]

    out: list[RankedEntry] = []
    for idx, s in enumerate(ordered):
        rank = idx + 1
        sid = str(s.id)
        views = int(s.views or 0)
        prev = previous_ranks.get(sid)
        winner = is_winner(rank, views, num_winners, min_views)
        out.append(
            RankedEntry(
                submission_id=sid,
                rank=rank,
                previous_rank=prev,
                rank_change=classify_rank_change(rank, prev),
                views=views,
                views_display=format_number(views),
                is_winner=winner,
                prize_title=titles.get(rank) if winner else None,
                submission=s,
            )
        )
    return out

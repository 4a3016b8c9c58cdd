from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Literal

from contestpulse.services.status import TimeComputed, compute_status, status_source, to_instant

CountdownKind = Literal["remaining", "until_start"]


@dataclass(frozen=True)
class Duration:
    days: int
    hours: int
    minutes: int
    seconds: int

    @property
    def total_seconds(self) -> int:
        return self.days * 86400 + self.hours * 3600 + self.minutes * 60 + self.seconds


ZERO = Duration(0, 0, 0, 0)


def decompose(delta: timedelta) -> Duration:
    """Floor a timedelta to whole seconds and split it; non-positive -> all zero."""
    total = delta // timedelta(seconds=1)
    if total <= 0:
        return ZERO
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    return Duration(days, hours, minutes, seconds)


def get_time_remaining(contest: Any, now: datetime) -> Duration | None:
    """Time left until the end; None unless the contest is currently active."""
    if compute_status(contest, now) != "active":
        return None
    return decompose(to_instant(contest.ends_at, "ends_at") - to_instant(now, "now"))


def get_time_until_start(contest: Any, now: datetime) -> Duration | None:
    # Independent of persisted status: a manually drafted contest still has a start.
    start = to_instant(contest.starts_at, "starts_at")
    now = to_instant(now, "now")
    if now >= start:
        return None
    return decompose(start - now)


def get_countdown(contest: Any, now: datetime) -> tuple[CountdownKind, Duration] | None:
    remaining = get_time_remaining(contest, now)
    if remaining is not None:
        return "remaining", remaining
    # A manual draft has no schedule to count down to.
    if isinstance(status_source(contest), TimeComputed) and compute_status(contest, now) == "draft":
        until = get_time_until_start(contest, now)
        if until is not None:
            return "until_start", until
    return None


def format_time_remaining(duration: Duration | None) -> str:
    """
    Render a duration with cascading precision.

    >>> format_time_remaining(Duration(1, 2, 3, 5))
    '1d 2h 3m'
    >>> format_time_remaining(Duration(0, 0, 3, 5))
    '3m 5s'
    """
    if duration is None:
        return ""
    d, h, m, s = duration.days, duration.hours, duration.minutes, duration.seconds
    if d > 0:
        return f"{d}d {h}h {m}m"
    if h > 0:
        return f"{h}h {m}m {s}s"
    if m > 0:
        return f"{m}m {s}s"
    return f"{s}s"

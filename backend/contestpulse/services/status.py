from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone as dt_tz
from typing import Any, Literal

from contestpulse.errors import ValidationError

Status = Literal["draft", "active", "ended", "archived"]
OverrideStatus = Literal["draft", "archived"]

OVERRIDE_STATUSES: frozenset[str] = frozenset({"draft", "archived"})

STATUS_LABELS: dict[str, str] = {
    "draft": "Draft",
    "active": "Active",
    "ended": "Ended",
    "archived": "Archived",
}


@dataclass(frozen=True)
class Override:
    """Persisted status that always wins over the time window."""
    status: OverrideStatus


@dataclass(frozen=True)
class TimeComputed:
    """Status is derived from the window; the persisted value is ignored."""
    starts_at: datetime
    ends_at: datetime


StatusSource = Override | TimeComputed


def to_instant(value: Any, field: str = "timestamp") -> datetime:
    """
    Normalize a timestamp to a timezone-aware UTC datetime.

    Accepts aware datetimes, naive datetimes (read as UTC, which is how
    SQLite hands back timezone=True columns) and ISO-8601 strings with a
    trailing ``Z`` or an explicit offset.

    Raises:
        ValidationError: if the value is missing or cannot be parsed.
    """
    if value is None:
        raise ValidationError(f"{field} is missing")
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(raw)
        except ValueError:
            raise ValidationError(f"{field} is not a valid ISO-8601 timestamp: {value!r}")
    if not isinstance(value, datetime):
        raise ValidationError(f"{field} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=dt_tz.utc)
    return value.astimezone(dt_tz.utc)


def status_source(contest: Any) -> StatusSource:
    """Tag a contest record as a manual override or a time-computed status."""
    persisted = getattr(contest, "status", None)
    if persisted in OVERRIDE_STATUSES:
        return Override(persisted)
    return TimeComputed(
        starts_at=to_instant(getattr(contest, "starts_at", None), "starts_at"),
        ends_at=to_instant(getattr(contest, "ends_at", None), "ends_at"),
    )


def resolve_status(source: StatusSource, now: datetime) -> Status:
    if isinstance(source, Override):
        return source.status
    now = to_instant(now, "now")
    if now < source.starts_at:
        return "draft"
    if source.starts_at <= now <= source.ends_at:
        return "active"
    return "ended"


def compute_status(contest: Any, now: datetime) -> Status:
    """
    Live lifecycle status of a contest at instant `now`.

    Only ``draft`` and ``archived`` are trusted from storage. A stored
    ``active`` or ``ended`` is recomputed from the window, so an ``active``
    contest past its end reports ``ended``. Both window bounds are inclusive.

    Examples:
        >>> from types import SimpleNamespace
        >>> c = SimpleNamespace(status="active", starts_at="2025-01-01T00:00:00Z", ends_at="2025-01-08T00:00:00Z")
        >>> compute_status(c, to_instant("2025-01-03T00:00:00Z"))
        'active'
        >>> compute_status(c, to_instant("2025-01-09T00:00:00Z"))
        'ended'
    """
    return resolve_status(status_source(contest), now)


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, "Unknown")


def is_contest_active(contest: Any, now: datetime) -> bool:
    return compute_status(contest, now) == "active"


def is_contest_ended(contest: Any, now: datetime) -> bool:
    return compute_status(contest, now) == "ended"


def validate_contest_dates(starts_at: Any, ends_at: Any, now: datetime) -> tuple[bool, str | None]:
    """Check a proposed contest window. Returns (is_valid, error_message)."""
    try:
        start = to_instant(starts_at, "starts_at")
        end = to_instant(ends_at, "ends_at")
    except ValidationError:
        return False, "Invalid date format"
    if start >= end:
        return False, "End date must be after start date"
    if end <= to_instant(now, "now"):
        return False, "End date must be in the future"
    return True, None

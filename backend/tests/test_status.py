from __future__ import annotations
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
import pytest

from contestpulse.errors import ValidationError
from contestpulse.services.status import (
    Override,
    TimeComputed,
    compute_status,
    is_contest_active,
    is_contest_ended,
    status_label,
    status_source,
    to_instant,
    validate_contest_dates,
)

START = datetime(2025, 1, 1, tzinfo=timezone.utc)
END = datetime(2025, 1, 8, tzinfo=timezone.utc)


def _contest(status: str, start=START, end=END):
    return SimpleNamespace(status=status, starts_at=start, ends_at=end)


@pytest.mark.parametrize("persisted", ["draft", "archived"])
@pytest.mark.parametrize("now", [
    START - timedelta(days=3),
    START,
    START + timedelta(days=2),
    END,
    END + timedelta(days=30),
])
def test_draft_and_archived_always_win(persisted, now):
    assert compute_status(_contest(persisted), now) == persisted


@pytest.mark.parametrize("persisted", ["active", "ended"])
@pytest.mark.parametrize("now,expected", [
    (START - timedelta(seconds=1), "draft"),
    (START, "active"),                      # start is inclusive
    (START + timedelta(days=3), "active"),
    (END, "active"),                        # end is inclusive
    (END + timedelta(seconds=1), "ended"),
])
def test_active_and_ended_are_recomputed_from_window(persisted, now, expected):
    assert compute_status(_contest(persisted), now) == expected


def test_persisted_active_past_end_reports_ended():
    """A contest nobody flipped to 'ended' must still read as ended."""
    c = _contest("active")
    assert compute_status(c, END + timedelta(minutes=1)) == "ended"
    assert is_contest_ended(c, END + timedelta(minutes=1))
    assert not is_contest_active(c, END + timedelta(minutes=1))


def test_unknown_persisted_value_is_time_computed():
    assert compute_status(_contest("paused"), START + timedelta(hours=1)) == "active"


def test_status_source_tags_overrides_without_touching_dates():
    # Dates are not even parsed for an override.
    src = status_source(SimpleNamespace(status="archived", starts_at=None, ends_at="garbage"))
    assert src == Override("archived")
    assert isinstance(status_source(_contest("active")), TimeComputed)


def test_offsets_are_compared_as_instants():
    """Same instant written in a different offset must not shift the window."""
    c = _contest("active", start="2025-01-01T05:00:00+05:00", end="2025-01-07T19:00:00-05:00")
    # 2025-01-01T00:00Z == start
    assert compute_status(c, START) == "active"
    assert compute_status(c, START - timedelta(microseconds=1)) == "draft"
    assert compute_status(c, END) == "active"
    assert compute_status(c, END + timedelta(seconds=1)) == "ended"


def test_iso_strings_with_z_suffix():
    c = _contest("active", start="2025-01-01T00:00:00Z", end="2025-01-08T00:00:00Z")
    assert compute_status(c, to_instant("2025-01-03T00:00:00Z")) == "active"


def test_naive_datetimes_are_read_as_utc():
    c = _contest("active", start=START.replace(tzinfo=None), end=END.replace(tzinfo=None))
    assert compute_status(c, START + timedelta(hours=1)) == "active"


@pytest.mark.parametrize("start,end", [
    (None, END),
    (START, None),
    ("not-a-date", END),
    (START, 12345),
])
def test_malformed_timestamps_raise_validation_error(start, end):
    with pytest.raises(ValidationError):
        compute_status(_contest("active", start=start, end=end), START)


def test_status_labels():
    assert [status_label(s) for s in ("draft", "active", "ended", "archived")] == ["Draft", "Active", "Ended", "Archived"]
    assert status_label("weird") == "Unknown"


def test_validate_contest_dates():
    now = START
    assert validate_contest_dates(START, END, now) == (True, None)
    assert validate_contest_dates("nope", END, now) == (False, "Invalid date format")
    assert validate_contest_dates(END, START, now) == (False, "End date must be after start date")
    assert validate_contest_dates(START, START, now) == (False, "End date must be after start date")
    assert validate_contest_dates(START - timedelta(days=10), START - timedelta(days=1), now) == (
        False, "End date must be in the future"
    )

from __future__ import annotations
import asyncio
import uuid
from datetime import datetime, timezone
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from contestpulse.errors import ExternalProviderError, NotFoundError, StorageError
from contestpulse.models.contest import Contest
from contestpulse.models.submission import Submission
from contestpulse.services.stats_provider import VideoStats


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class InMemoryStore:
    """Dict-backed SubmissionStore used by pipeline and route tests."""

    def __init__(self):
        self.contests: dict[str, Contest] = {}
        self.submissions: dict[str, Submission] = {}
        self.fail_listing = False
        self.fail_writes: set[str] = set()

    def add_contest(self, contest: Contest) -> Contest:
        self.contests[str(contest.id)] = contest
        return contest

    def add_submission(self, submission: Submission) -> Submission:
        self.submissions[str(submission.id)] = submission
        return submission

    def snapshot(self) -> dict:
        return {
            sid: (s.views, s.likes, s.comments, s.shares, s.last_synced_at)
            for sid, s in self.submissions.items()
        }

    async def list_active_submissions(self):
        if self.fail_listing:
            raise StorageError("database unavailable")
        return [s for s in self.submissions.values() if s.active]

    async def upsert_submission_metrics(self, submission_id, metrics: VideoStats, synced_at, video_id=None):
        sid = str(submission_id)
        if sid in self.fail_writes:
            raise StorageError(f"write failed for {sid}")
        s = self.submissions.get(sid)
        if s is None:
            raise NotFoundError(f"Submission not found: {sid}")
        s.views, s.likes, s.comments, s.shares = metrics.views, metrics.likes, metrics.comments, metrics.shares
        s.last_synced_at = synced_at
        if video_id is not None:
            s.video_id = video_id

    async def get_contest(self, contest_id):
        c = self.contests.get(str(contest_id))
        if c is None:
            raise NotFoundError(f"Contest not found: {contest_id}")
        return c

    async def list_contest_submissions(self, contest_id):
        return [
            s for s in self.submissions.values()
            if str(s.contest_id) == str(contest_id) and s.active
        ]


class FakeProvider:
    """StatsProvider double: canned stats per URL, optional failures and latency."""

    def __init__(self, stats_by_url=None, fail_urls=(), delay: float = 0.0, default=None, on_call=None):
        self.stats_by_url = dict(stats_by_url or {})
        self.fail_urls = set(fail_urls)
        self.delay = delay
        self.default = default or VideoStats(views=100, likes=10, comments=2, shares=1)
        self.on_call = on_call
        self.calls: list[str] = []

    async def fetch_video_stats(self, url: str) -> VideoStats:
        self.calls.append(url)
        if self.on_call is not None:
            self.on_call(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if url in self.fail_urls:
            raise ExternalProviderError(f"provider failed for {url}")
        return self.stats_by_url.get(url, self.default)


def make_contest(**kw) -> Contest:
    fields = dict(
        id=uuid.uuid4(),
        name="Summer Dance Challenge",
        starts_at=utc(2025, 1, 1),
        ends_at=utc(2025, 1, 8),
        status="active",
        num_winners=3,
        min_views=0,
        prize_per_winner=0,
        prize_titles=None,
    )
    fields.update(kw)
    return Contest(**fields)


def make_submission(contest_id=None, **kw) -> Submission:
    fields = dict(
        id=uuid.uuid4(),
        contest_id=contest_id or uuid.uuid4(),
        url=f"https://www.tiktok.com/@dancer/video/{uuid.uuid4().int % 10**19}",
        video_id=None,
        username="dancer",
        full_name="Dance Person",
        title="My entry",
        thumbnail_url=None,
        views=0,
        likes=0,
        comments=0,
        shares=0,
        last_synced_at=None,
        active=True,
    )
    fields.update(kw)
    return Submission(**fields)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


class FakeRedis:
    """Just enough of redis.Redis for the sync lease: SET NX EX and the release script."""

    def __init__(self, down: bool = False):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.down = down

    def set(self, key, value, nx=False, ex=None):
        if self.down:
            raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")
        if nx and key in self.data:
            return None
        self.data[key] = value
        self.ttls[key] = ex
        return True

    def eval(self, script, numkeys, key, token):
        if self.data.get(key) == token:
            del self.data[key]
            return 1
        return 0

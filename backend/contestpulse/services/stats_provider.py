from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Protocol

import httpx
import structlog

from contestpulse.config import settings
from contestpulse.errors import ExternalProviderError

log = structlog.get_logger()

SCRAPE_PATH = "/api/v1/tiktok/scrape-video"


@dataclass(frozen=True)
class VideoStats:
    views: int
    likes: int
    comments: int
    shares: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class StatsProvider(Protocol):
    async def fetch_video_stats(self, url: str) -> VideoStats: ...


def _count(stats: dict, key: str) -> int:
    raw = stats.get(key) or 0
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ExternalProviderError(f"stat {key!r} is not a number: {raw!r}")


def parse_stats_payload(payload: Any) -> VideoStats:
    """Read ``data.video.stats`` from a scrape-video response; missing counters are 0."""
    try:
        stats = payload["data"]["video"]["stats"]
    except (KeyError, TypeError):
        raise ExternalProviderError("unexpected response format from scrape-video endpoint")
    if not isinstance(stats, dict):
        raise ExternalProviderError("unexpected response format from scrape-video endpoint")
    return VideoStats(
        views=_count(stats, "views"),
        likes=_count(stats, "likes"),
        comments=_count(stats, "comments"),
        shares=_count(stats, "shares"),
    )


class HttpStatsProvider:
    """
    Client for the scrape-video endpoint of the stats backend.

    Every failure mode (unconfigured base URL, transport error, timeout,
    non-2xx status, non-JSON or malformed body) surfaces as
    ExternalProviderError so callers handle exactly one exception type.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.stats_provider_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.stats_provider_timeout_seconds
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "HttpStatsProvider":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch_video_stats(self, url: str) -> VideoStats:
        if not self.base_url:
            raise ExternalProviderError("STATS_PROVIDER_URL is not configured")
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)

        api_url = f"{self.base_url}{SCRAPE_PATH}"
        try:
            r = await self._client.post(api_url, json={"videoUrl": url}, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise ExternalProviderError(f"stats provider timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ExternalProviderError(f"stats provider request failed: {e}") from e

        if r.status_code < 200 or r.status_code >= 300:
            raise ExternalProviderError(f"stats provider returned {r.status_code}: {r.text[:200]}")
        try:
            payload = r.json()
        except ValueError as e:
            raise ExternalProviderError("stats provider returned invalid JSON") from e

        stats = parse_stats_payload(payload)
        log.debug("stats_fetched", url=url, **stats.as_dict())
        return stats

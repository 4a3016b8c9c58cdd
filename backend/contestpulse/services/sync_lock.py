from __future__ import annotations
import uuid
from contextlib import contextmanager
from typing import Iterator

from redis import Redis
from redis.exceptions import RedisError
import structlog

from contestpulse.config import settings

log = structlog.get_logger()

LOCK_KEY = "contestpulse:metrics-sync:lease"

# Only the holder's token may delete the key.
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class SyncAlreadyRunning(Exception):
    pass


class SyncLockUnavailable(Exception):
    """Redis could not be reached to take the lease."""


def _redis() -> Redis:
    return Redis.from_url(settings.redis_url)


@contextmanager
def sync_lease(client: Redis | None = None, ttl_seconds: int | None = None, enabled: bool | None = None) -> Iterator[None]:
    """
    Hold a Redis lease for the duration of a sync run.

    Raises SyncAlreadyRunning when another run holds it and SyncLockUnavailable
    when Redis cannot be reached. A no-op unless
    SYNC_LOCK_ENABLED is set (or `enabled=True` is passed).
    """
    if not (settings.sync_lock_enabled if enabled is None else enabled):
        yield
        return

    client = client or _redis()
    token = uuid.uuid4().hex
    ttl = ttl_seconds or settings.sync_lock_ttl_seconds
    try:
        acquired = client.set(LOCK_KEY, token, nx=True, ex=ttl)
    except RedisError as e:
        log.error("sync_lease_unavailable", error=str(e))
        raise SyncLockUnavailable(f"sync lock unavailable: {e}") from e
    if not acquired:
        raise SyncAlreadyRunning("sync already running")
    try:
        yield
    finally:
        try:
            client.eval(_RELEASE_SCRIPT, 1, LOCK_KEY, token)
        except RedisError as e:
            # The TTL frees the lease eventually.
            log.warning("sync_lease_release_failed", error=str(e))

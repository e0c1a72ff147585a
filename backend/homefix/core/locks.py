# backend/homefix/core/locks.py
"""
Redis mutexes for booking transitions and rating recomputation.

Locks fail open: when Redis is not configured or unreachable the caller
proceeds, and the version-checked UPDATE on bookings remains the
authoritative guard against lost updates. A lock that is held elsewhere
is reported to the caller as not acquired. Each holder stores its own token
and release deletes the key only while that token is still there, so a
holder that outlived its TTL never drops a lock someone else now owns.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
import time
from typing import Iterator, Optional

from redis import Redis
import ulid

from ..monitoring.prometheus_metrics import prometheus_metrics
from .config import settings

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()
_POLL_INTERVAL_S = 0.05

_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


def booking_lock_key(booking_id: str) -> str:
    return f"booking:{booking_id}:mutex"


def rating_lock_key(projection: str, key_id: str) -> str:
    return f"rating:{projection}:{key_id}"


def _namespaced_key(key: str) -> str:
    return f"{settings.redis_namespace}:lock:{key}"


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    if not settings.redis_url:
        return None
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            client.ping()
        except Exception as exc:
            logger.warning("lock_sync_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


def new_lock_token() -> str:
    return str(ulid.ULID())


def acquire_lock_sync(key: str, ttl_s: int, scope: str, token: Optional[str] = None) -> bool:
    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_lock(scope, "acquire", "redis_unavailable")
        logger.debug("lock_sync_redis_unavailable", extra={"lock_key": key})
        return True
    try:
        acquired = bool(client.set(_namespaced_key(key), token or new_lock_token(), nx=True, ex=ttl_s))
    except Exception as exc:
        prometheus_metrics.record_lock(scope, "acquire", "error")
        logger.warning(
            "lock_sync_acquire_failed",
            extra={"lock_key": key, "error": str(exc), "error_type": type(exc).__name__},
        )
        return True
    prometheus_metrics.record_lock(scope, "acquire", "success" if acquired else "blocked")
    return acquired


def release_lock_sync(key: str, scope: str, token: str) -> None:
    client = _get_sync_redis()
    if client is None:
        return
    try:
        deleted = client.eval(_RELEASE_SCRIPT, 1, _namespaced_key(key), token)
        prometheus_metrics.record_lock(scope, "release", "success" if deleted else "not_owner")
        if not deleted:
            logger.warning("lock_sync_release_skipped", extra={"lock_key": key, "scope": scope})
    except Exception as exc:
        prometheus_metrics.record_lock(scope, "release", "error")
        logger.warning(
            "lock_sync_release_failed",
            extra={"lock_key": key, "error": str(exc), "error_type": type(exc).__name__},
        )


def _acquire_with_wait(key: str, ttl_s: int, scope: str, wait_s: float, token: str) -> bool:
    deadline = time.monotonic() + wait_s
    while True:
        if acquire_lock_sync(key, ttl_s=ttl_s, scope=scope, token=token):
            return True
        if time.monotonic() >= deadline:
            return False
        time.sleep(_POLL_INTERVAL_S)


@contextmanager
def keyed_lock_sync(key: str, ttl_s: int, scope: str, wait_s: float = 0.0) -> Iterator[bool]:
    token = new_lock_token()
    if wait_s > 0:
        acquired = _acquire_with_wait(key, ttl_s, scope, wait_s, token)
    else:
        acquired = acquire_lock_sync(key, ttl_s=ttl_s, scope=scope, token=token)
    try:
        yield acquired
    finally:
        if acquired:
            release_lock_sync(key, scope=scope, token=token)


@contextmanager
def booking_lock_sync(booking_id: str, ttl_s: Optional[int] = None) -> Iterator[bool]:
    with keyed_lock_sync(
        booking_lock_key(booking_id), ttl_s or settings.booking_lock_ttl_s, scope="booking"
    ) as acquired:
        yield acquired


@contextmanager
def rating_lock_sync(
    projection: str, key_id: str, ttl_s: Optional[int] = None, wait_s: float = 2.0
) -> Iterator[bool]:
    with keyed_lock_sync(
        rating_lock_key(projection, key_id),
        ttl_s or settings.rating_lock_ttl_s,
        scope="rating",
        wait_s=wait_s,
    ) as acquired:
        yield acquired

"""
Per-mentor booking serialization backed by Redis ``SET NX EX``.

Each holder stores a random token and releases with a compare-and-delete
script, so an expired holder can never remove a lock someone else took.

The lock fails open: when Redis is disabled or unreachable the caller
proceeds and relies on the row lock and the partial unique index on
active sessions.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import secrets
import threading
import time
from typing import Iterator, Optional

from redis import Redis

from .config import settings
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()

_POLL_INTERVAL_S = 0.05

RELEASE_LUA = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
end
return 0
"""


def _lock_key(mentor_id: str) -> str:
    return f"{settings.booking_lock_namespace}:lock:mentor:{mentor_id}:booking"


def new_lock_token() -> str:
    return secrets.token_hex(16)


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=1,
            )
            client.ping()
        except Exception as exc:
            logger.warning("mentor_booking_lock_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


def acquire_mentor_lock(
    mentor_id: str,
    token: str,
    ttl_s: Optional[int] = None,
    wait_s: Optional[float] = None,
) -> bool:
    """
    Try to take the mentor's booking lock as ``token``, polling for up to ``wait_s``.

    Returns False only when another holder kept the lock for the whole wait.
    """
    if not settings.booking_lock_enabled:
        prometheus_metrics.record_booking_lock("acquire", "disabled")
        return True

    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_booking_lock("acquire", "redis_unavailable")
        return True

    ttl = ttl_s if ttl_s is not None else settings.booking_lock_ttl_seconds
    wait = wait_s if wait_s is not None else settings.booking_lock_wait_seconds
    deadline = time.monotonic() + wait
    key = _lock_key(mentor_id)
    try:
        while True:
            if client.set(key, token, nx=True, ex=ttl):
                prometheus_metrics.record_booking_lock("acquire", "success")
                return True
            if time.monotonic() >= deadline:
                prometheus_metrics.record_booking_lock("acquire", "blocked")
                logger.info("mentor_booking_lock_blocked", extra={"mentor_id": mentor_id})
                return False
            time.sleep(_POLL_INTERVAL_S)
    except Exception as exc:
        prometheus_metrics.record_booking_lock("acquire", "error")
        logger.warning(
            "mentor_booking_lock_failed",
            extra={
                "mentor_id": mentor_id,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )
        return True


def release_mentor_lock(mentor_id: str, token: str) -> None:
    """Delete the lock only if it still holds ``token``."""
    if not settings.booking_lock_enabled:
        return
    client = _get_sync_redis()
    if client is None:
        return
    try:
        deleted = client.eval(RELEASE_LUA, 1, _lock_key(mentor_id), token)
        prometheus_metrics.record_booking_lock("release", "success" if deleted else "not_owner")
        if not deleted:
            logger.warning("mentor_booking_lock_expired", extra={"mentor_id": mentor_id})
    except Exception as exc:
        prometheus_metrics.record_booking_lock("release", "error")
        logger.warning(
            "mentor_booking_lock_release_failed",
            extra={
                "mentor_id": mentor_id,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )


@contextmanager
def mentor_booking_lock(
    mentor_id: str,
    ttl_s: Optional[int] = None,
    wait_s: Optional[float] = None,
) -> Iterator[bool]:
    token = new_lock_token()
    acquired = acquire_mentor_lock(mentor_id, token, ttl_s=ttl_s, wait_s=wait_s)
    try:
        yield acquired
    finally:
        if acquired:
            release_mentor_lock(mentor_id, token)

"""
Redis client for caching analytics and serializing balance mutations.
Gracefully degrades to in-process behaviour if Redis is unavailable.
"""

import json
import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from app.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

_redis_client = None

# Fallback per-customer locks when Redis is disabled (single process only)
_local_locks: dict[str, threading.Lock] = {}
_local_locks_guard = threading.Lock()


def get_redis_client():
    """
    Lazy-initialize Redis client singleton.
    Returns None if Redis is disabled or unavailable.
    """
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            import redis
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=2,
            )
            _redis_client.ping()
            logger.info("Redis connected successfully")
        except Exception as e:
            logger.warning(f"Redis unavailable, caching disabled: {e}")
            _redis_client = None

    return _redis_client


def cache_set(key: str, value: Any, ttl: int = 300) -> bool:
    """Cache a value with TTL (default 5 minutes). Returns True if cached."""
    client = get_redis_client()
    if client is None:
        return False
    try:
        client.setex(key, ttl, json.dumps(value))
        return True
    except Exception as e:
        logger.warning(f"Redis cache_set failed: {e}")
        return False


def cache_get(key: str) -> Optional[Any]:
    """Retrieve a cached value. Returns None if not found or Redis unavailable."""
    client = get_redis_client()
    if client is None:
        return None
    try:
        data = client.get(key)
        return json.loads(data) if data else None
    except Exception as e:
        logger.warning(f"Redis cache_get failed: {e}")
        return None


def cache_delete(key: str) -> None:
    """Drop a cached value if present."""
    client = get_redis_client()
    if client is None:
        return
    try:
        client.delete(key)
    except Exception as e:
        logger.warning(f"Redis cache_delete failed: {e}")


def _local_lock(name: str) -> threading.Lock:
    with _local_locks_guard:
        lock = _local_locks.get(name)
        if lock is None:
            lock = threading.Lock()
            _local_locks[name] = lock
        return lock


@contextmanager
def customer_lock(customer_id: str) -> Iterator[None]:
    """
    Serialize balance mutations for one customer.

    Uses a Redis lock when Redis is enabled so that several API workers
    share it; otherwise falls back to a per-process lock.
    """
    name = f"lock:customer:{customer_id}"
    client = get_redis_client()

    if client is not None:
        with client.lock(
            name,
            timeout=settings.LOCK_TIMEOUT_SECONDS,
            blocking_timeout=settings.LOCK_TIMEOUT_SECONDS,
        ):
            yield
        return

    with _local_lock(name):
        yield

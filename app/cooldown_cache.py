"""
Resend cooldown cache
Time-ordered key/value slots with a pluggable backend:
- memory: process-local, each server instance has its own cooldowns
- redis: shared by every instance behind the load balancer
"""

import math
import time
import logging
import threading
from typing import Callable, Dict, Optional

import redis

logger = logging.getLogger(__name__)


class MemoryCooldownBackend:
    """Process-local backend. Callers on another instance do not see these slots."""

    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._expires: Dict[str, float] = {}
        self._lock = threading.Lock()

    def acquire(self, key: str, seconds: int) -> int:
        """
        Take the slot for `seconds` unless it is still held.

        Returns:
            0 when acquired, otherwise the remaining seconds (rounded up)
        """
        with self._lock:
            now = self._clock()
            expires_at = self._expires.get(key)
            if expires_at is not None and expires_at > now:
                return max(1, math.ceil(expires_at - now))
            self._expires[key] = now + seconds
            self._purge(now)
            return 0

    def release(self, key: str) -> None:
        with self._lock:
            self._expires.pop(key, None)

    def remaining(self, key: str) -> int:
        with self._lock:
            expires_at = self._expires.get(key)
            if expires_at is None:
                return 0
            return max(0, math.ceil(expires_at - self._clock()))

    def _purge(self, now: float) -> None:
        for stale in [k for k, exp in self._expires.items() if exp <= now]:
            del self._expires[stale]


class RedisCooldownBackend:
    """Shared backend: SET NX EX makes check-and-take atomic across instances."""

    name = "redis"

    def __init__(self, client):
        self.client = client

    def acquire(self, key: str, seconds: int) -> int:
        if self.client.set(key, "1", nx=True, ex=seconds):
            logger.debug(f"Cooldown SET: {key} (TTL: {seconds}s)")
            return 0
        ttl = self.client.ttl(key)
        return max(1, int(ttl)) if ttl and ttl > 0 else 1

    def release(self, key: str) -> None:
        self.client.delete(key)

    def remaining(self, key: str) -> int:
        ttl = self.client.ttl(key)
        return max(0, int(ttl)) if ttl else 0


class CooldownCache:
    """Cooldown slots keyed by tuples of strings, e.g. (identifier, phone)."""

    def __init__(self, backend, prefix: str = "portal:cooldown"):
        self.backend = backend
        self.prefix = prefix

    @property
    def backend_name(self) -> str:
        return self.backend.name

    def make_key(self, *parts) -> str:
        return ":".join([self.prefix] + [str(p) for p in parts])

    def acquire(self, parts, seconds: int) -> int:
        """0 if the caller may proceed, else seconds left. A 0s cooldown never refuses."""
        if seconds <= 0:
            return 0
        return self.backend.acquire(self.make_key(*parts), seconds)

    def release(self, parts) -> None:
        try:
            self.backend.release(self.make_key(*parts))
        except redis.RedisError as e:
            logger.warning(f"Cooldown release error for {parts}: {e}")

    def remaining(self, parts) -> int:
        return self.backend.remaining(self.make_key(*parts))


def create_cooldown_cache(settings, redis_client: Optional["redis.Redis"] = None) -> CooldownCache:
    """
    Build the cooldown cache from the `cooldown` settings section.

    A redis backend that cannot be reached at startup degrades to the
    memory backend, which only enforces the cooldown per instance.
    """
    section = settings.get("cooldown", {})
    backend_name = section.get("backend", "memory")

    if backend_name == "redis":
        redis_url = section.get("redis_url", "redis://localhost:6379/0")
        try:
            client = redis_client or redis.from_url(redis_url, decode_responses=True)
            client.ping()
            logger.info(f"Redis cooldown cache initialized at {redis_url}")
            return CooldownCache(RedisCooldownBackend(client))
        except redis.RedisError as e:
            logger.warning(f"Redis cooldown cache unavailable ({e}). Falling back to per-process memory cache.")

    return CooldownCache(MemoryCooldownBackend())

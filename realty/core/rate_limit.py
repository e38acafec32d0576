"""
Fixed-window request limiter for public endpoints.

The limiter is advisory, not a security boundary. The in-memory store only
counts requests seen by this process; the Redis store shares counts between
instances. Route handlers receive a ``RateLimiter`` through dependency
injection, so the backing store can be swapped without touching call sites.
"""

import random
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import Request
from redis import Redis

from realty.core.config import settings
from realty.core.logging import get_logger
from realty.core.security import now_ms

logger = get_logger(__name__)

UNKNOWN_CLIENT = "unknown"

# Roughly one call in a thousand prunes expired in-memory entries
SWEEP_PROBABILITY = 0.001


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single increment-and-check."""

    allowed: bool
    remaining: int
    reset_at: int  # epoch ms

    def headers(self, max_requests: int) -> dict[str, str]:
        """Standard X-RateLimit-* response headers."""
        reset = datetime.fromtimestamp(self.reset_at / 1000, tz=timezone.utc)
        return {
            "X-RateLimit-Limit": str(max_requests),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": reset.isoformat(),
        }


class RateLimitStore(ABC):
    """Increment-and-check capability keyed by client identifier."""

    @abstractmethod
    def hit(self, identifier: str, window_ms: int, max_requests: int, now: int) -> RateLimitResult:
        """Record one request for ``identifier`` and decide whether to allow it."""


@dataclass
class _Entry:
    count: int
    reset_at: int


class InMemoryRateLimitStore(RateLimitStore):
    """Process-local counters. Lost on restart."""

    def __init__(self, sweep_probability: float = SWEEP_PROBABILITY,
                 rng: Callable[[], float] = random.random) -> None:
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()
        self._sweep_probability = sweep_probability
        self._rng = rng

    def __len__(self) -> int:
        return len(self._entries)

    def hit(self, identifier: str, window_ms: int, max_requests: int, now: int) -> RateLimitResult:
        with self._lock:
            if self._rng() < self._sweep_probability:
                self._sweep(now)

            entry = self._entries.get(identifier)
            if entry is None or entry.reset_at < now:
                entry = _Entry(count=1, reset_at=now + window_ms)
                self._entries[identifier] = entry
                return RateLimitResult(True, max_requests - 1, entry.reset_at)

            if entry.count >= max_requests:
                return RateLimitResult(False, 0, entry.reset_at)

            entry.count += 1
            return RateLimitResult(True, max_requests - entry.count, entry.reset_at)

    def _sweep(self, now: int) -> None:
        expired = [key for key, entry in self._entries.items() if entry.reset_at < now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Pruned {len(expired)} expired rate-limit entries")


class RedisRateLimitStore(RateLimitStore):
    """Counters shared between instances through Redis key expiry."""

    def __init__(self, redis_conn: Redis, key_prefix: str = "ratelimit:") -> None:
        self._redis = redis_conn
        self._prefix = key_prefix

    def hit(self, identifier: str, window_ms: int, max_requests: int, now: int) -> RateLimitResult:
        key = f"{self._prefix}{identifier}"
        # INCR and PTTL run in one MULTI/EXEC so no other client interleaves
        pipe = self._redis.pipeline(transaction=True)
        pipe.incr(key)
        pipe.pttl(key)
        count, ttl = pipe.execute()
        count, ttl = int(count), int(ttl)

        # -1: INCR just created the key, or an earlier expiry was never set
        if ttl < 0:
            self._redis.pexpire(key, window_ms)
            ttl = window_ms

        reset_at = now + ttl
        if count > max_requests:
            return RateLimitResult(False, 0, reset_at)
        return RateLimitResult(True, max_requests - count, reset_at)


class RateLimiter:
    """Entry point used by route handlers."""

    def __init__(self, store: RateLimitStore, clock: Callable[[], int] = now_ms) -> None:
        self.store = store
        self._clock = clock

    def check(self, identifier: str, window_ms: int = 60_000, max_requests: int = 10) -> RateLimitResult:
        """
        Count one request against ``identifier``'s current window.

        Args:
            identifier: Client key, usually the caller's IP address
            window_ms: Window length in milliseconds
            max_requests: Requests allowed per window

        Returns:
            Whether the request is allowed, how many remain, and when the
            window resets
        """
        result = self.store.hit(identifier, window_ms, max_requests, self._clock())
        if not result.allowed:
            logger.warning(f"Rate limit exceeded for client {identifier}")
        return result


def get_client_identifier(request: Request) -> str:
    """
    Derive the rate-limit key for a request.

    Uses the first ``x-forwarded-for`` hop, then ``x-real-ip``, then a
    shared sentinel.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return UNKNOWN_CLIENT


_default_limiter: Optional[RateLimiter] = None
_default_limiter_lock = threading.Lock()


def build_rate_limiter() -> RateLimiter:
    """Create a limiter backed by the store selected in settings."""
    if settings.RATE_LIMIT_BACKEND == "redis":
        logger.info(f"Using Redis rate-limit store at {settings.REDIS_URL}")
        return RateLimiter(RedisRateLimitStore(Redis.from_url(settings.REDIS_URL)))
    return RateLimiter(InMemoryRateLimitStore())


def get_rate_limiter() -> RateLimiter:
    """FastAPI dependency returning the process-wide limiter."""
    global _default_limiter
    if _default_limiter is None:
        # Sync routes run on a thread pool; only one thread may build the store
        with _default_limiter_lock:
            if _default_limiter is None:
                _default_limiter = build_rate_limiter()
    return _default_limiter


def check_rate_limit(identifier: str, window_ms: int = 60_000, max_requests: int = 10) -> RateLimitResult:
    """Check ``identifier`` against the process-wide limiter."""
    return get_rate_limiter().check(identifier, window_ms=window_ms, max_requests=max_requests)

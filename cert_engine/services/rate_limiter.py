"""Token-bucket rate limiting.

Two callers use this today:

  GET  /v1/certificates/verify/{code}   keyed by client IP.  Codes carry
                                        ~60 bits, but there is no reason to
                                        let anyone sweep the space freely.
  POST /v1/certificates/{tier}/claim    keyed by subject.  A claim does a
                                        full aggregation run plus writes.

A bucket holds `capacity` tokens and refills at `refill_rate` per second;
each request spends one.  Only (tokens, last_refill) is stored per key.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    limit: int
    retry_after: float  # seconds; 0 when allowed


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """capacity is the burst size, refill_rate the sustained tokens/second."""

    capacity: int = 60
    refill_rate: float = 1.0


VERIFY_LIMIT = RateLimitConfig(capacity=30, refill_rate=0.5)
CLAIM_LIMIT = RateLimitConfig(capacity=5, refill_rate=0.1)


class RateLimiter(Protocol):
    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult: ...


class InMemoryRateLimiter:
    """Per-process buckets.  Each API replica counts separately."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._buckets: dict[str, tuple[float, float]] = {}

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        now = time.monotonic()
        with self._lock:
            tokens, last_refill = self._buckets.get(key, (config.capacity, now))
            tokens = min(
                config.capacity, tokens + (now - last_refill) * config.refill_rate
            )

            if tokens >= 1:
                tokens -= 1
                self._buckets[key] = (tokens, now)
                return RateLimitResult(
                    allowed=True,
                    remaining=int(tokens),
                    limit=config.capacity,
                    retry_after=0,
                )

            self._buckets[key] = (tokens, now)
            return RateLimitResult(
                allowed=False,
                remaining=0,
                limit=config.capacity,
                retry_after=(1 - tokens) / config.refill_rate,
            )

    def clear(self) -> None:
        with self._lock:
            self._buckets.clear()


class RedisRateLimiter:
    """Buckets shared by every replica.

    Refill, spend and write-back run as one Lua script so two concurrent
    requests cannot both spend the same token.
    """

    # KEYS[1] bucket key; ARGV capacity, refill_rate, now (seconds)
    # returns {allowed 0/1, remaining, retry_after_ms}
    _LUA_SCRIPT = """
    local key = KEYS[1]
    local capacity = tonumber(ARGV[1])
    local refill_rate = tonumber(ARGV[2])
    local now = tonumber(ARGV[3])
    local ttl = math.ceil(capacity / refill_rate) + 60

    local bucket = redis.call('HMGET', key, 'tokens', 'last_refill')
    local tokens = tonumber(bucket[1]) or capacity
    local last_refill = tonumber(bucket[2]) or now

    tokens = math.min(capacity, tokens + (now - last_refill) * refill_rate)

    local allowed = 0
    local retry_after_ms = 0
    if tokens >= 1 then
        tokens = tokens - 1
        allowed = 1
    else
        retry_after_ms = math.ceil((1 - tokens) / refill_rate * 1000)
    end

    redis.call('HSET', key, 'tokens', tokens, 'last_refill', now)
    redis.call('EXPIRE', key, ttl)
    return {allowed, math.floor(tokens), retry_after_ms}
    """

    _PREFIX = "ratelimit:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client
        self._script = redis_client.register_script(self._LUA_SCRIPT)

    async def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        allowed, remaining, retry_after_ms = await self._script(
            keys=[f"{self._PREFIX}{key}"],
            args=[config.capacity, config.refill_rate, time.time()],
        )
        return RateLimitResult(
            allowed=bool(allowed),
            remaining=max(int(remaining), 0),
            limit=config.capacity,
            retry_after=retry_after_ms / 1000,
        )

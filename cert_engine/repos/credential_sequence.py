"""Year-bucketed credential number sequence.

Credential numbers read RATIO-2026-00042: the last part is a counter shared
by EVERY subject and reset each calendar year.  It must come from a single
atomic fetch-and-increment.  Counting the claimant's own credentials, or
reading MAX(number)+1, hands the same number to two concurrent claims.

Three backends, same Protocol:

  InMemoryCredentialSequence  — per-process, lock-guarded (dev/tests)
  RedisCredentialSequence     — INCR on credential_seq:{year}; atomic across
                                every API instance sharing the Redis
  PgCredentialSequence        — upsert ... RETURNING on credential_sequences
                                (see repos/pg_credential_repo.py); rolls back
                                with the claim transaction, so no gaps

A number consumed by a claim that later fails is simply skipped with the
in-memory and Redis backends.  Numbers stay unique, which is all a verifier
relies on.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable


@runtime_checkable
class CredentialSequence(Protocol):
    async def next_value(self, year: int) -> int:
        """Atomically increment the counter for `year` and return the new value."""
        ...


class InMemoryCredentialSequence:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values: dict[int, int] = {}

    async def next_value(self, year: int) -> int:
        with self._lock:
            value = self._values.get(year, 0) + 1
            self._values[year] = value
            return value

    def clear(self) -> None:
        with self._lock:
            self._values.clear()


class RedisCredentialSequence:
    _PREFIX = "credential_seq:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def next_value(self, year: int) -> int:
        # INCR creates the key at 0 first, so the first number of a year is 1
        return int(await self._redis.incr(f"{self._PREFIX}{year}"))

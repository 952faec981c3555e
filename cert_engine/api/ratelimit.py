"""Rate limiting as a route dependency.

A dependency rather than middleware so only the routes that declare it pay
for it; /health and /metrics are never limited.

Keys:
  user:<sub>  when the request carries a bearer token with a subject
  ip:<addr>   otherwise

The subject is read without verifying the signature.  A forged token just
gets its own bucket; authentication itself happens in require_user.
"""

from __future__ import annotations

import logging

import jwt as pyjwt
from fastapi import HTTPException, Request, status

from cert_engine.core.metrics import RATE_LIMIT_HITS
from cert_engine.db.redis import redis_pool
from cert_engine.services.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitConfig,
    RateLimiter,
    RedisRateLimiter,
)

logger = logging.getLogger(__name__)

if redis_pool is not None:
    rate_limiter: RateLimiter = RedisRateLimiter(redis_pool)
else:
    rate_limiter = InMemoryRateLimiter()


def require_rate_limit(config: RateLimitConfig, *, by: str = "auto"):
    """Dependency factory.  `by` is "auto" (user, else IP) or "ip"."""

    async def _check(request: Request) -> None:
        key = _build_key(request, by)
        result = await rate_limiter.check(key, config)

        request.state.rate_limit_headers = {
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
        }

        if not result.allowed:
            key_type = key.split(":", 1)[0]
            RATE_LIMIT_HITS.labels(key_type=key_type).inc()
            logger.warning(
                "Rate limit exceeded key_type=%s path=%s", key_type, request.url.path
            )
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded",
                headers={
                    "Retry-After": str(int(result.retry_after) + 1),
                    "X-RateLimit-Limit": str(result.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

    return _check


def _build_key(request: Request, by: str) -> str:
    if by == "auto":
        auth_header = request.headers.get("authorization", "")
        if auth_header.startswith("Bearer "):
            try:
                claims = pyjwt.decode(
                    auth_header[7:], options={"verify_signature": False}
                )
            except pyjwt.InvalidTokenError:
                claims = {}
            sub = claims.get("sub")
            if sub:
                return f"user:{sub}"

    client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"

"""
Rate Limiting Module
====================

Sliding-window limiters guarding the verification endpoint.

Backends:
- memory: single process, bounded key map
- redis: shared across processes

Usage:
    from shared.ratelimit import get_rate_limiter

    limiter = get_rate_limiter()
    if not await limiter.allow("203.0.113.7", limit=10, window_ms=60_000):
        ...
"""

from shared.config import RateLimitBackend, settings
from shared.logging import get_logger
from shared.ratelimit.limiter import InMemoryRateLimiter, RateLimiter
from shared.ratelimit.redis import RedisRateLimiter


logger = get_logger(__name__)

_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """
    Get the process-wide limiter for the configured backend.

    Returns:
        RateLimiter instance
    """
    global _limiter

    if _limiter is None:
        backend = settings.rate_limit.backend

        if backend == RateLimitBackend.MEMORY:
            _limiter = InMemoryRateLimiter(max_keys=settings.rate_limit.max_keys)
        elif backend == RateLimitBackend.REDIS:
            from shared.database.redis import RedisClient

            _limiter = RedisRateLimiter(
                RedisClient.get_client(),
                key_prefix=settings.rate_limit.redis_key_prefix,
            )
        else:
            raise ValueError(f"Unknown rate limit backend: {backend}")

        logger.info("rate_limiter_initialized", backend=_limiter.backend)

    return _limiter


def set_rate_limiter(limiter: RateLimiter) -> None:
    """
    Set a custom limiter.

    Args:
        limiter: RateLimiter instance
    """
    global _limiter
    _limiter = limiter
    logger.info("rate_limiter_set", backend=limiter.backend)


def reset_rate_limiter() -> None:
    """Reset the limiter to be re-initialized."""
    global _limiter
    _limiter = None


__all__ = [
    "RateLimiter",
    "InMemoryRateLimiter",
    "RedisRateLimiter",
    "get_rate_limiter",
    "set_rate_limiter",
    "reset_rate_limiter",
]

"""
Redis Rate Limiter
==================

Sliding window kept in a Redis sorted set so every relay process shares
the same counts. Prune, count and append run in one Lua script, so
concurrent callers cannot both take the last slot.

Version: 0.1.0
"""

import time
import uuid

from redis.asyncio import Redis
from redis.exceptions import RedisError

from shared.logging import get_logger
from shared.ratelimit.limiter import RateLimiter


logger = get_logger(__name__)


SLIDING_WINDOW_SCRIPT = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])
redis.call('ZREMRANGEBYSCORE', key, '-inf', now - window)
if redis.call('ZCARD', key) >= limit then
    return 0
end
redis.call('ZADD', key, now, ARGV[4])
redis.call('PEXPIRE', key, window)
return 1
"""


class RedisRateLimiter(RateLimiter):
    """
    Multi-process limiter backed by Redis.

    Redis failures let the request through: the limiter is abuse
    hardening, not an access control.
    """

    def __init__(
        self,
        client: Redis,  # type: ignore[type-arg]
        key_prefix: str = "ratelimit:verify",
    ) -> None:
        self._client = client
        self.key_prefix = key_prefix

    @property
    def backend(self) -> str:
        return "redis"

    def _key(self, client_key: str) -> str:
        return f"{self.key_prefix}:{client_key}"

    async def allow(self, client_key: str, limit: int, window_ms: int) -> bool:
        # Wall clock: windows must line up across hosts.
        now_ms = int(time.time() * 1000)
        member = f"{now_ms}-{uuid.uuid4().hex}"

        try:
            result = await self._client.eval(
                SLIDING_WINDOW_SCRIPT,
                1,
                self._key(client_key),
                now_ms,
                window_ms,
                limit,
                member,
            )
        except RedisError as e:
            logger.error(
                "rate_limit_backend_error",
                backend=self.backend,
                error=str(e),
            )
            return True

        allowed = int(result) == 1
        if not allowed:
            logger.warning(
                "rate_limit_exceeded",
                client=client_key,
                limit=limit,
                window_ms=window_ms,
                backend=self.backend,
            )
        return allowed

"""Sliding window request limiter backed by Redis sorted sets."""

import math
import time
import uuid
from typing import Callable

import redis.asyncio as redis
from pydantic import BaseModel
from redis.exceptions import RedisError

from aidreams.utils.logger import get_logger

logger = get_logger(__name__)


def ip_cache_key(ip_address: str) -> str:
    return f"rate_limit:ip:{ip_address}"


class RateLimitResult(BaseModel):
    is_allowed: bool
    current_count: int
    limit: int
    window_seconds: int
    retry_after: int | None = None


class RateLimiter:
    """Counts requests per key over a sliding window.

    Each accepted request is a sorted-set member scored by its timestamp.
    Members older than the window are trimmed on every check, so the set
    size is the number of requests in the last ``window_seconds``. Rejected
    requests are removed again and do not extend the block.
    """

    def __init__(
        self, redis_client: redis.Redis, clock: Callable[[], float] = time.time
    ):
        self.redis_client = redis_client
        self.clock = clock

    async def is_allowed(
        self, key: str, limit: int, window_seconds: int
    ) -> RateLimitResult:
        now = self.clock()
        member = f"{now}:{uuid.uuid4().hex}"

        try:
            pipe = self.redis_client.pipeline()
            pipe.zremrangebyscore(key, 0, now - window_seconds)
            pipe.zcard(key)
            pipe.zadd(key, {member: now})
            pipe.expire(key, window_seconds + 1)
            results = await pipe.execute()
            current_count = results[1] + 1

            if current_count <= limit:
                return RateLimitResult(
                    is_allowed=True,
                    current_count=current_count,
                    limit=limit,
                    window_seconds=window_seconds,
                )

            await self.redis_client.zrem(key, member)
            oldest = await self.redis_client.zrange(key, 0, 0, withscores=True)
        except RedisError as e:
            # Fail open when Redis is unreachable
            logger.error("Rate limiter unavailable, allowing request", error=str(e))
            return RateLimitResult(
                is_allowed=True,
                current_count=0,
                limit=limit,
                window_seconds=window_seconds,
            )

        retry_after = window_seconds
        if oldest:
            retry_after = max(1, math.ceil(oldest[0][1] + window_seconds - now))
        return RateLimitResult(
            is_allowed=False,
            current_count=current_count - 1,
            limit=limit,
            window_seconds=window_seconds,
            retry_after=retry_after,
        )

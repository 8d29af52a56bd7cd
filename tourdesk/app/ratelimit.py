"""Rate limiting utilities."""

from datetime import datetime
from functools import lru_cache

import redis

from tourdesk.app.config import get_settings
from tourdesk.app.db.context import RequestContext
from tourdesk.app.db.inmemory import InMemoryRateLimiter
from tourdesk.app.db.repositories import RateLimiter, RetryAfter

PRICING_BUCKET = "pricing"
CRUD_BUCKET = "crud"


def make_rate_limit_key(ctx: RequestContext, bucket: str) -> str:
    """Create rate limit key from context and bucket.

    Args:
        ctx: Request context
        bucket: Bucket name (e.g., "pricing", "crud")

    Returns:
        Rate limit key
    """
    return f"{ctx.org_id}:{ctx.user_id}:{bucket}"


class RedisRateLimiter:
    """Redis-based rate limiter using INCR + EXPIRE pattern."""

    def __init__(self, redis_client: redis.Redis, max_requests: int, window_seconds: int = 60) -> None:
        """Initialize rate limiter.

        Args:
            redis_client: Redis client
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default 60)
        """
        self._redis = redis_client
        self._max_requests = max_requests
        self._window_seconds = window_seconds

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available.

        Args:
            key: Rate limit key
            now: Current timestamp

        Returns:
            RetryAfter if over quota, None if allowed
        """
        window_start = int(now.timestamp() / self._window_seconds) * self._window_seconds
        redis_key = f"ratelimit:{key}:{window_start}"

        count = self._redis.incr(redis_key)
        if count == 1:
            self._redis.expire(redis_key, self._window_seconds)

        if count > self._max_requests:
            ttl = self._redis.ttl(redis_key)
            return RetryAfter(seconds=max(1, ttl))

        return None


@lru_cache
def get_rate_limiters() -> dict[str, RateLimiter]:
    """Build one limiter per bucket from settings.

    Redis-backed when REDIS_URL is set, process-local otherwise.
    """
    settings = get_settings()
    quotas = {
        PRICING_BUCKET: settings.pricing_ops_per_min,
        CRUD_BUCKET: settings.crud_ops_per_min,
    }

    if settings.redis_url:
        client = redis.from_url(settings.redis_url, decode_responses=True)
        return {bucket: RedisRateLimiter(client, quota) for bucket, quota in quotas.items()}

    return {bucket: InMemoryRateLimiter(quota) for bucket, quota in quotas.items()}

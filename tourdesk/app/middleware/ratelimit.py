"""Rate limiting for HTTP requests."""

from datetime import datetime
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from tourdesk.app.api.auth import get_current_context
from tourdesk.app.db.context import RequestContext
from tourdesk.app.db.repositories import RateLimiter
from tourdesk.app.ratelimit import (
    CRUD_BUCKET,
    PRICING_BUCKET,
    get_rate_limiters,
    make_rate_limit_key,
)


class RateLimitMiddleware:
    """Maps request paths to buckets and enforces per-bucket quotas."""

    def __init__(self, limiters: dict[str, RateLimiter], bucket_map: dict[str, str]) -> None:
        """Initialize rate limit middleware.

        Args:
            limiters: Rate limiter per bucket name
            bucket_map: Mapping from path patterns to bucket names; first match wins
        """
        self._limiters = limiters
        self._bucket_map = bucket_map

    def check_rate_limit(
        self, path: str, ctx: RequestContext, now: datetime | None = None
    ) -> tuple[bool, int]:
        """Check if request is allowed under rate limit.

        Args:
            path: Request path
            ctx: Request context
            now: Current time (for testing)

        Returns:
            Tuple of (allowed, retry_after_seconds)
        """
        if now is None:
            now = datetime.now()

        bucket = self._get_bucket(path)
        limiter = self._limiters.get(bucket) if bucket else None
        if bucket is None or limiter is None:
            return (True, 0)

        retry_after = limiter.check_quota(make_rate_limit_key(ctx, bucket), now)
        if retry_after is None:
            return (True, 0)

        return (False, retry_after.seconds)

    def _get_bucket(self, path: str) -> str | None:
        for pattern, bucket in self._bucket_map.items():
            if pattern in path:
                return bucket

        return None


def create_default_bucket_map() -> dict[str, str]:
    """Create default bucket mapping.

    Returns:
        Dictionary mapping path patterns to bucket names
    """
    return {
        "/calculate": PRICING_BUCKET,
        "/tours": CRUD_BUCKET,
        "/rates": CRUD_BUCKET,
        "/b2b": CRUD_BUCKET,
    }


async def enforce_rate_limit(
    request: Request,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
) -> None:
    """FastAPI dependency rejecting requests over quota with 429.

    Raises:
        HTTPException: 429 with a Retry-After header
    """
    middleware = RateLimitMiddleware(get_rate_limiters(), create_default_bucket_map())
    allowed, retry_after = middleware.check_rate_limit(request.url.path, ctx)

    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded",
            headers={"Retry-After": str(retry_after)},
        )

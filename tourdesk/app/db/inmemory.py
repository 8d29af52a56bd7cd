"""In-memory implementations of repository interfaces."""

import uuid
from datetime import date, datetime, timedelta

from tourdesk.app.db.context import RequestContext
from tourdesk.app.db.repositories import RateFilters, RetryAfter
from tourdesk.app.errors import OverlappingRatesError
from tourdesk.app.models.common import RateCategory
from tourdesk.app.models.rates import RATE_MODELS, RateBase
from tourdesk.app.pricing.rates import rate_scope, windows_overlap


class InMemoryRateRepository:
    """In-memory implementation of RateRepository."""

    def __init__(self) -> None:
        self._rates: dict[uuid.UUID, tuple[uuid.UUID, RateBase]] = {}

    def _visible(self, ctx: RequestContext) -> list[RateBase]:
        # Enforce tenancy
        return [rate for org_id, rate in self._rates.values() if org_id == ctx.org_id]

    async def list_rates(
        self, category: RateCategory, ctx: RequestContext, filters: RateFilters | None = None
    ) -> list[RateBase]:
        """List rates of one category."""
        filters = filters or RateFilters()
        model = RATE_MODELS[category]

        rates = [
            rate
            for rate in self._visible(ctx)
            if isinstance(rate, model)
            and (not filters.city or rate.city == filters.city)
            and (not filters.service_code or rate.service_code == filters.service_code)
            and (filters.include_inactive or rate.is_active)
        ]
        return sorted(rates, key=lambda r: (r.service_code, r.valid_from or date.min))

    async def get_rates_by_ids(
        self, rate_ids: set[uuid.UUID], ctx: RequestContext
    ) -> dict[uuid.UUID, RateBase]:
        """Load rates referenced by a tour or a B2B variation."""
        return {
            rate.id: rate
            for rate in self._visible(ctx)
            if rate.id is not None and rate.id in rate_ids
        }

    async def create_rate(self, rate: RateBase, ctx: RequestContext) -> RateBase:
        """Add a rate, refusing windows that overlap an active rate in the same scope."""
        if rate.is_active:
            clashes = [
                other
                for other in self._visible(ctx)
                if other.is_active
                and rate_scope(other) == rate_scope(rate)
                and windows_overlap(rate, other)
            ]
            if clashes:
                raise OverlappingRatesError(
                    f"Rate window overlaps {len(clashes)} active rate(s) for "
                    f"'{rate.service_code}' in '{rate.city}'",
                    rate_ids=[str(other.id) for other in clashes],
                )

        stored = rate.model_copy(update={"id": rate.id or uuid.uuid4()})
        self._rates[stored.id] = (ctx.org_id, stored)
        return stored

    async def deactivate_rate(
        self, category: RateCategory, rate_id: uuid.UUID, ctx: RequestContext
    ) -> bool:
        """Soft-delete a rate."""
        entry = self._rates.get(rate_id)
        if entry is None:
            return False

        org_id, rate = entry
        if org_id != ctx.org_id or not isinstance(rate, RATE_MODELS[category]):
            return False

        self._rates[rate_id] = (org_id, rate.model_copy(update={"is_active": False}))
        return True


class InMemoryRateLimiter:
    """In-memory implementation of RateLimiter using fixed window."""

    def __init__(self, max_requests: int, window_seconds: int = 60) -> None:
        """Initialize rate limiter.

        Args:
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default 60)
        """
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._windows: dict[str, tuple[datetime, int]] = {}

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available."""
        window = self._windows.get(key)
        window_length = timedelta(seconds=self._window_seconds)

        if window is None or now >= window[0] + window_length:
            self._windows[key] = (now, 1)
            return None

        window_start, count = window
        if count >= self._max_requests:
            seconds_remaining = int((window_start + window_length - now).total_seconds())
            return RetryAfter(seconds=max(1, seconds_remaining))

        self._windows[key] = (window_start, count + 1)
        return None

"""Tour assembly helpers: tour codes and rate hydration of stored tours."""

import logging
import random
import re
import uuid
from datetime import date, timedelta
from typing import TypeVar

from tourdesk.app.db.context import RequestContext
from tourdesk.app.db.repositories import RateFilters, RateRepository
from tourdesk.app.errors import PricingError
from tourdesk.app.models.common import RateCategory
from tourdesk.app.models.rates import (
    AccommodationRate,
    EntranceFee,
    GuideRate,
    MealRate,
    RateBase,
    ServiceFee,
    TransportationRate,
)
from tourdesk.app.models.tour import Tour, TourDay
from tourdesk.app.pricing.rates import resolve_rate
from tourdesk.app.utils.metrics import PrometheusPricingMetrics

logger = logging.getLogger(__name__)

_metrics = PrometheusPricingMetrics()

RateT = TypeVar("RateT", bound=RateBase)

_CATEGORY_BY_MODEL: dict[type[RateBase], RateCategory] = {
    AccommodationRate: RateCategory.accommodation,
    MealRate: RateCategory.meal,
    GuideRate: RateCategory.guide,
    EntranceFee: RateCategory.entrance,
    TransportationRate: RateCategory.transportation,
    ServiceFee: RateCategory.service,
}


def generate_tour_code(tour_name: str, duration_days: int) -> str:
    """Build a human-readable tour code, e.g. ``TOUR-CLASSI-5D-0427``."""
    slug = re.sub(r"[^A-Z0-9]", "", tour_name.upper())[:6] or "CUSTOM"
    return f"TOUR-{slug}-{duration_days}D-{random.randint(0, 9999):04d}"


def collect_rate_ids(tour: Tour) -> set[uuid.UUID]:
    """IDs of every rate referenced but not embedded in the tour."""
    ids: set[uuid.UUID] = set()

    for day in tour.days:
        pairs: list[tuple[uuid.UUID | None, RateBase | None]] = [
            (day.accommodation_id, day.accommodation),
            (day.lunch_meal_id, day.lunch_meal),
            (day.dinner_meal_id, day.dinner_meal),
            (day.guide_id, day.guide),
        ]
        pairs.extend((a.entrance_id, a.entrance) for a in day.activities)
        pairs.extend((a.transportation_id, a.transportation) for a in day.activities)
        pairs.extend((s.service_id, s.service) for s in day.additional_services)

        ids.update(rate_id for rate_id, inline in pairs if rate_id is not None and inline is None)

    return ids


def embedded_rates(tour: Tour) -> list[tuple[str, RateBase]]:
    """Field path and rate of every rate embedded inline in the tour."""
    found: list[tuple[str, RateBase]] = []

    for i, day in enumerate(tour.days):
        prefix = f"days.{i}"
        for name in ("accommodation", "lunch_meal", "dinner_meal", "guide"):
            rate = getattr(day, name)
            if rate is not None:
                found.append((f"{prefix}.{name}", rate))
        for j, activity in enumerate(day.activities):
            if activity.entrance is not None:
                found.append((f"{prefix}.activities.{j}.entrance", activity.entrance))
            if activity.transportation is not None:
                found.append((f"{prefix}.activities.{j}.transportation", activity.transportation))
        for j, selected in enumerate(day.additional_services):
            if selected.service is not None:
                found.append((f"{prefix}.additional_services.{j}.service", selected.service))

    return found


async def ensure_embedded_rates_stored(
    tour: Tour, rate_repo: RateRepository, ctx: RequestContext
) -> None:
    """Reject inline rates a saved tour could not point back to.

    Saved tours keep rate IDs only, so each inline rate must already be in
    the caller's catalogue.

    Raises:
        PricingError: If an inline rate has no ID or its ID is not in the catalogue
    """
    embedded = embedded_rates(tour)
    ids = {rate.id for _, rate in embedded if rate.id is not None}
    stored = await rate_repo.get_rates_by_ids(ids, ctx)

    details = []
    for field, rate in embedded:
        if rate.id is None:
            details.append({"field": field, "message": "Inline rate has no id"})
        elif rate.id not in stored:
            details.append({"field": field, "message": f"Rate {rate.id} is not in the catalogue"})

    if details:
        raise PricingError(
            "Inline rates must be added to the catalogue before the tour is saved", details
        )


class TourHydrator:
    """Replaces rate references on a stored tour with catalogue rates.

    With a travel date, each reference is re-resolved to the rate of the
    same service, city and tier valid on that day, so a tour saved against
    last season's prices is quoted at this season's.
    """

    def __init__(
        self, rate_repo: RateRepository, ctx: RequestContext, travel_date: date | None = None
    ) -> None:
        self._rate_repo = rate_repo
        self._ctx = ctx
        self._travel_date = travel_date
        self._by_id: dict[uuid.UUID, RateBase] = {}
        self._candidates: dict[tuple[RateCategory, str, str], list[RateBase]] = {}

    async def hydrate(self, tour: Tour) -> Tour:
        self._by_id = await self._rate_repo.get_rates_by_ids(collect_rate_ids(tour), self._ctx)
        days = [await self._hydrate_day(day) for day in tour.days]
        return tour.model_copy(update={"days": days})

    async def _hydrate_day(self, day: TourDay) -> TourDay:
        on_date = None
        if self._travel_date is not None:
            on_date = self._travel_date + timedelta(days=day.day_number - 1)

        activities = [
            activity.model_copy(
                update={
                    "entrance": await self._pick(
                        activity.entrance_id, activity.entrance, EntranceFee, on_date
                    ),
                    "transportation": await self._pick(
                        activity.transportation_id,
                        activity.transportation,
                        TransportationRate,
                        on_date,
                    ),
                }
            )
            for activity in day.activities
        ]
        services = [
            selected.model_copy(
                update={
                    "service": await self._pick(
                        selected.service_id, selected.service, ServiceFee, on_date
                    )
                }
            )
            for selected in day.additional_services
        ]

        return day.model_copy(
            update={
                "accommodation": await self._pick(
                    day.accommodation_id, day.accommodation, AccommodationRate, on_date
                ),
                "lunch_meal": await self._pick(day.lunch_meal_id, day.lunch_meal, MealRate, on_date),
                "dinner_meal": await self._pick(
                    day.dinner_meal_id, day.dinner_meal, MealRate, on_date
                ),
                "guide": await self._pick(day.guide_id, day.guide, GuideRate, on_date),
                "activities": activities,
                "additional_services": services,
            }
        )

    async def _pick(
        self,
        rate_id: uuid.UUID | None,
        inline: RateT | None,
        model: type[RateT],
        on_date: date | None,
    ) -> RateT | None:
        if inline is not None:
            return inline
        if rate_id is None:
            return None

        rate = self._by_id.get(rate_id)
        if not isinstance(rate, model):
            logger.warning(
                f"Rate {rate_id} referenced by tour not found as {model.__name__}; priced at 0"
            )
            _metrics.inc_unresolved("tour")
            return None

        if on_date is None:
            return rate

        candidates = await self._candidates_for(rate)
        resolved = resolve_rate(
            candidates,
            service_code=rate.service_code,
            city=rate.city,
            on_date=on_date,
            tier=rate.tier,
            exact_tier=True,
        )
        if resolved is None:
            logger.warning(
                f"No {model.__name__} for '{rate.service_code}' in '{rate.city}' "
                f"valid on {on_date}; priced at 0"
            )
            _metrics.inc_unresolved("tour")
        return resolved

    async def _candidates_for(self, rate: RateBase) -> list[RateBase]:
        category = _CATEGORY_BY_MODEL[type(rate)]
        key = (category, rate.service_code, rate.city)
        if key not in self._candidates:
            self._candidates[key] = await self._rate_repo.list_rates(
                category,
                self._ctx,
                RateFilters(city=rate.city, service_code=rate.service_code),
            )
        return self._candidates[key]


async def hydrate_tour(
    tour: Tour,
    rate_repo: RateRepository,
    ctx: RequestContext,
    travel_date: date | None = None,
) -> Tour:
    """Load the catalogue rates a stored tour references.

    Args:
        tour: Tour whose days carry rate IDs
        rate_repo: Catalogue repository
        ctx: Request context (enforces tenancy)
        travel_date: Date of day 1; when given, rates are re-resolved per day

    Returns:
        Copy of the tour with rate objects embedded. References that cannot be
        resolved are left empty and contribute zero to pricing.

    Raises:
        OverlappingRatesError: If several active rates match a reference on its date
    """
    return await TourHydrator(rate_repo, ctx, travel_date).hydrate(tour)

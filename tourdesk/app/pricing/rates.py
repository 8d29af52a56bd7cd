"""Rate resolution: passport column selection and validity-window lookup."""

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal
from typing import TypeVar

from tourdesk.app.errors import OverlappingRatesError
from tourdesk.app.models.common import Tier
from tourdesk.app.models.rates import RateBase, TransportationRate

logger = logging.getLogger(__name__)

RateT = TypeVar("RateT", bound=RateBase)


def select_rate_column(rate: RateBase, is_euro_passport: bool) -> Decimal:
    """Return the EUR or non-EUR price column of a rate.

    This is the only place the passport flag is turned into a price, so a
    single calculation can never mix columns.
    """
    return rate.base_rate_eur if is_euro_passport else rate.base_rate_non_eur


def is_valid_on(rate: RateBase, day: date) -> bool:
    """Check whether day falls inside the rate's validity window (open ends allowed)."""
    if rate.valid_from is not None and day < rate.valid_from:
        return False
    if rate.valid_to is not None and day > rate.valid_to:
        return False
    return True


def windows_overlap(a: RateBase, b: RateBase) -> bool:
    """Check whether two validity windows share at least one day."""
    a_start = a.valid_from or date.min
    a_end = a.valid_to or date.max
    b_start = b.valid_from or date.min
    b_end = b.valid_to or date.max
    return a_start <= b_end and b_start <= a_end


def rate_scope(rate: RateBase) -> tuple[str, str, str, Tier | None]:
    """Scope inside which at most one active rate may be valid per day."""
    category = getattr(rate, "category", "")
    return (str(getattr(category, "value", category)), rate.service_code, rate.city, rate.tier)


def resolve_rate(
    candidates: Iterable[RateT],
    *,
    service_code: str | None = None,
    city: str | None = None,
    on_date: date | None = None,
    tier: Tier | None = None,
    exact_tier: bool = False,
) -> RateT | None:
    """Pick the single applicable rate among candidates.

    Args:
        candidates: Rate rows to choose from
        service_code: Exact service code to match (optional)
        city: Exact city to match (optional)
        on_date: Date that must fall inside the validity window (optional)
        tier: Tier to match (optional)
        exact_tier: Match tier exactly, so None only matches untiered rates

    Returns:
        The matching rate, or None when nothing applies

    Raises:
        OverlappingRatesError: If more than one active rate matches
    """
    matches = [
        rate
        for rate in candidates
        if rate.is_active
        and (service_code is None or rate.service_code == service_code)
        and (city is None or rate.city == city)
        and (rate.tier == tier if exact_tier else (tier is None or rate.tier == tier))
        and (on_date is None or is_valid_on(rate, on_date))
    ]

    if not matches:
        return None

    if len(matches) > 1:
        rate_ids = [str(rate.id) for rate in matches]
        logger.warning(
            f"Overlapping active rates for {service_code or '*'} in {city or '*'} "
            f"on {on_date or 'any date'}: {rate_ids}"
        )
        raise OverlappingRatesError(
            f"{len(matches)} active rates match service '{service_code or '*'}' "
            f"in '{city or '*'}' on {on_date or 'any date'}; fix the validity windows",
            rate_ids=rate_ids,
        )

    return matches[0]


def find_overlapping_rates(rates: Sequence[RateT]) -> list[tuple[RateT, RateT]]:
    """List pairs of active rates in the same scope whose windows overlap."""
    by_scope: dict[tuple[str, str, str, Tier | None], list[RateT]] = defaultdict(list)
    for rate in rates:
        if rate.is_active:
            by_scope[rate_scope(rate)].append(rate)

    conflicts: list[tuple[RateT, RateT]] = []
    for group in by_scope.values():
        for i, first in enumerate(group):
            for second in group[i + 1 :]:
                if windows_overlap(first, second):
                    conflicts.append((first, second))
    return conflicts


def select_vehicle(
    rates: Sequence[TransportationRate], pax: int
) -> TransportationRate | None:
    """Pick the first vehicle whose capacity fits pax, else the largest one."""
    if not rates:
        return None

    ordered = sorted(rates, key=lambda r: r.capacity_min)
    for rate in ordered:
        if rate.capacity_min <= pax <= rate.capacity_max:
            return rate
    return ordered[-1]


def suggest_vehicle_type(pax: int) -> str:
    """Suggest a vehicle class for a group size."""
    if pax <= 2:
        return "Sedan"
    if pax <= 8:
        return "Minivan"
    if pax <= 14:
        return "Van"
    return "Bus"

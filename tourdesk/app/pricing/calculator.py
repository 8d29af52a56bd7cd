"""Tour pricing calculator.

Aggregates per-day costs across accommodation, meals, guide, activities and
additional services, then rolls them up into trip totals. Absent services
contribute zero: tours are priced while still being edited.
"""

import math
from decimal import Decimal

from tourdesk.app.errors import PricingError
from tourdesk.app.models.common import BoardBasis, RateType
from tourdesk.app.models.pricing import ZERO, DailyPricing, TourPricing, TourPricingBreakdown
from tourdesk.app.models.tour import SelectedService, Tour, TourDay, TourDayActivity
from tourdesk.app.pricing.quote import round_money
from tourdesk.app.pricing.rates import select_rate_column

DEFAULT_ROOM_OCCUPANCY = 2


def calculate_tour_pricing(
    tour: Tour,
    pax: int,
    is_euro_passport: bool,
    *,
    room_occupancy: int = DEFAULT_ROOM_OCCUPANCY,
    currency: str = "EUR",
) -> TourPricingBreakdown:
    """Calculate the cost breakdown of a tour.

    Args:
        tour: Tour with hydrated rate objects on its days
        pax: Number of travellers (> 0)
        is_euro_passport: Use EUR columns when True, non-EUR columns otherwise
        room_occupancy: Travellers per room
        currency: Currency label of the result

    Returns:
        Per-day breakdown plus trip totals

    Raises:
        PricingError: If pax is not positive
    """
    if pax <= 0:
        raise PricingError("Number of passengers must be greater than 0")

    totals = TourPricing(tour_id=tour.id, pax=pax, is_euro_passport=is_euro_passport)
    daily_breakdown: list[DailyPricing] = []

    for day in tour.days:
        day_pricing = calculate_day_pricing(
            day, pax, is_euro_passport, room_occupancy=room_occupancy
        )
        daily_breakdown.append(day_pricing)

        totals.total_accommodation += day_pricing.accommodation
        totals.total_meals += day_pricing.meals
        totals.total_guides += day_pricing.guide
        totals.total_transportation += day_pricing.transportation
        totals.total_entrances += day_pricing.entrances
        totals.total_additional_services += day_pricing.additional_services

    grand_total = (
        totals.total_accommodation
        + totals.total_meals
        + totals.total_guides
        + totals.total_transportation
        + totals.total_entrances
        + totals.total_additional_services
    )
    totals.grand_total = round_money(grand_total)
    totals.per_person_total = round_money(grand_total / pax)

    for field in (
        "total_accommodation",
        "total_meals",
        "total_guides",
        "total_transportation",
        "total_entrances",
        "total_additional_services",
    ):
        setattr(totals, field, round_money(getattr(totals, field)))

    return TourPricingBreakdown(
        daily_breakdown=daily_breakdown,
        totals=totals,
        per_person=totals.per_person_total,
        currency=currency,
    )


def calculate_day_pricing(
    day: TourDay,
    pax: int,
    is_euro_passport: bool,
    *,
    room_occupancy: int = DEFAULT_ROOM_OCCUPANCY,
) -> DailyPricing:
    """Calculate the cost of a single day."""
    pricing = DailyPricing(day_number=day.day_number, city=day.city)

    # Accommodation is charged per room
    if day.accommodation is not None:
        rooms = rooms_needed(pax, room_occupancy)
        pricing.accommodation = rooms * select_rate_column(day.accommodation, is_euro_passport)

    pricing.meals = calculate_meal_costs(day, pax, is_euro_passport)

    # Private guides are flat per group; shared plans are per person
    if day.guide_required and day.guide is not None:
        guide_rate = select_rate_column(day.guide, is_euro_passport)
        if day.guide.rate_type == RateType.per_person:
            pricing.guide = pax * guide_rate
        else:
            pricing.guide = guide_rate

    if day.activities:
        pricing.entrances, pricing.transportation = calculate_activity_costs(
            day.activities, pax, is_euro_passport
        )

    if day.additional_services:
        pricing.additional_services = calculate_additional_services_costs(
            day.additional_services, pax, is_euro_passport
        )

    pricing.daily_total = (
        pricing.accommodation
        + pricing.meals
        + pricing.guide
        + pricing.transportation
        + pricing.entrances
        + pricing.additional_services
    )
    return pricing


def rooms_needed(pax: int, occupancy: int = DEFAULT_ROOM_OCCUPANCY) -> int:
    """Rooms required for pax travellers at the given occupancy."""
    return math.ceil(pax / occupancy)


def calculate_meal_costs(day: TourDay, pax: int, is_euro_passport: bool) -> Decimal:
    """Lunch and dinner, per person. Breakfast comes with the board basis."""
    meal_cost = ZERO
    for meal in (day.lunch_meal, day.dinner_meal):
        if meal is not None:
            meal_cost += pax * select_rate_column(meal, is_euro_passport)
    return meal_cost


def calculate_activity_costs(
    activities: list[TourDayActivity], pax: int, is_euro_passport: bool
) -> tuple[Decimal, Decimal]:
    """Return (entrances, transportation) for a day's activities.

    Entrance fees are per person; each transportation leg is a private
    vehicle charged once.
    """
    entrances = ZERO
    transportation = ZERO

    for activity in activities:
        if activity.entrance is not None:
            entrances += pax * select_rate_column(activity.entrance, is_euro_passport)
        if activity.transportation is not None:
            transportation += select_rate_column(activity.transportation, is_euro_passport)

    return entrances, transportation


def calculate_additional_services_costs(
    services: list[SelectedService], pax: int, is_euro_passport: bool
) -> Decimal:
    """Price additional services according to their rate type."""
    total = ZERO

    for selected in services:
        if selected.service is None:
            continue

        rate = select_rate_column(selected.service, is_euro_passport)
        rate_type = selected.service.rate_type
        if rate_type == RateType.per_person:
            total += pax * rate
        elif rate_type in (RateType.per_group, RateType.per_day):
            total += rate
        elif rate_type == RateType.per_vehicle:
            total += (selected.quantity or 1) * rate

    return total


def get_meals_included(board_basis: BoardBasis | None) -> dict[str, bool]:
    """Meals covered by a hotel board basis."""
    if board_basis == BoardBasis.BB:
        return {"breakfast": True, "lunch": False, "dinner": False}
    if board_basis == BoardBasis.HB:
        return {"breakfast": True, "lunch": False, "dinner": True}
    if board_basis in (BoardBasis.FB, BoardBasis.AI):
        return {"breakfast": True, "lunch": True, "dinner": True}
    return {"breakfast": False, "lunch": False, "dinner": False}

"""Unit tests for the tour pricing calculator."""

import uuid
from decimal import Decimal

import pytest

from tourdesk.app.errors import PricingError
from tourdesk.app.models.common import BoardBasis, RateType
from tourdesk.app.models.rates import (
    AccommodationRate,
    EntranceFee,
    GuideRate,
    MealRate,
    ServiceFee,
    TransportationRate,
)
from tourdesk.app.models.tour import SelectedService, Tour, TourDay, TourDayActivity
from tourdesk.app.pricing.calculator import (
    calculate_day_pricing,
    calculate_tour_pricing,
    get_meals_included,
    rooms_needed,
)


def full_day(
    day_number: int,
    hotel: AccommodationRate,
    lunch: MealRate,
    dinner: MealRate,
    guide: GuideRate,
    entrance: EntranceFee,
    vehicle: TransportationRate,
    tips: ServiceFee,
) -> TourDay:
    return TourDay(
        day_number=day_number,
        city="Cairo",
        accommodation=hotel,
        lunch_meal=lunch,
        dinner_meal=dinner,
        guide_required=True,
        guide=guide,
        activities=[TourDayActivity(entrance=entrance, transportation=vehicle)],
        additional_services=[SelectedService(service=tips)],
    )


def test_zero_days_prices_to_zero() -> None:
    """A tour without days costs nothing rather than failing."""
    result = calculate_tour_pricing(Tour(tour_name="Empty"), pax=4, is_euro_passport=True)

    assert result.daily_breakdown == []
    assert result.totals.grand_total == Decimal("0.00")
    assert result.totals.per_person_total == Decimal("0.00")
    assert result.per_person == Decimal("0.00")


@pytest.mark.parametrize("pax", [0, -3])
def test_non_positive_pax_is_rejected(pax: int) -> None:
    with pytest.raises(PricingError, match="greater than 0"):
        calculate_tour_pricing(Tour(), pax=pax, is_euro_passport=True)


def test_full_day_euro_passport(hotel, lunch, dinner, guide, entrance, vehicle, tips) -> None:
    """Each category follows its own multiplier."""
    day = full_day(1, hotel, lunch, dinner, guide, entrance, vehicle, tips)

    pricing = calculate_day_pricing(day, pax=3, is_euro_passport=True)

    assert pricing.accommodation == Decimal("200")  # 2 rooms x 100
    assert pricing.meals == Decimal("135")  # 3 x (15 + 30)
    assert pricing.guide == Decimal("60")  # per group
    assert pricing.entrances == Decimal("60")  # 3 x 20
    assert pricing.transportation == Decimal("80")  # flat per leg
    assert pricing.additional_services == Decimal("15")  # 3 x 5
    assert pricing.daily_total == Decimal("550")


def test_non_euro_passport_uses_only_non_euro_column(
    hotel, lunch, dinner, guide, entrance, vehicle, tips
) -> None:
    day = full_day(1, hotel, lunch, dinner, guide, entrance, vehicle, tips)

    pricing = calculate_day_pricing(day, pax=2, is_euro_passport=False)

    assert pricing.accommodation == Decimal("120")
    assert pricing.meals == Decimal("108")  # 2 x (18 + 36)
    assert pricing.guide == Decimal("70")
    assert pricing.entrances == Decimal("50")
    assert pricing.transportation == Decimal("90")
    assert pricing.additional_services == Decimal("12")


def test_totals_are_sum_of_days(hotel, lunch, dinner, guide, entrance, vehicle, tips) -> None:
    tour = Tour(
        tour_name="Cairo Classic",
        duration_days=2,
        cities=["Cairo"],
        days=[
            full_day(1, hotel, lunch, dinner, guide, entrance, vehicle, tips),
            TourDay(day_number=2, city="Cairo", accommodation=hotel),
        ],
    )

    result = calculate_tour_pricing(tour, pax=3, is_euro_passport=True)

    assert len(result.daily_breakdown) == 2
    assert result.totals.total_accommodation == Decimal("400.00")
    assert result.totals.grand_total == sum(d.daily_total for d in result.daily_breakdown)
    assert result.totals.grand_total == Decimal("750.00")
    assert result.totals.per_person_total == Decimal("250.00")


@pytest.mark.parametrize("pax", [1, 2, 3, 7, 10])
def test_per_person_is_grand_total_over_pax(
    pax: int, hotel, lunch, dinner, guide, entrance, vehicle, tips
) -> None:
    tour = Tour(days=[full_day(1, hotel, lunch, dinner, guide, entrance, vehicle, tips)])

    result = calculate_tour_pricing(tour, pax=pax, is_euro_passport=True)

    expected = (result.totals.grand_total / pax).quantize(Decimal("0.01"))
    assert abs(result.totals.per_person_total - expected) <= Decimal("0.01")


def test_guide_not_required_is_free(guide) -> None:
    day = TourDay(day_number=1, guide_required=False, guide=guide)

    assert calculate_day_pricing(day, pax=4, is_euro_passport=True).guide == Decimal("0")


def test_per_person_guide_scales_with_pax(guide) -> None:
    shared = guide.model_copy(update={"rate_type": RateType.per_person})
    day = TourDay(day_number=1, guide_required=True, guide=shared)

    assert calculate_day_pricing(day, pax=4, is_euro_passport=True).guide == Decimal("240")


def test_missing_references_contribute_zero() -> None:
    """IDs without hydrated rates are priced at zero."""
    day = TourDay(
        day_number=1,
        accommodation_id=uuid.uuid4(),
        lunch_meal_id=uuid.uuid4(),
        guide_required=True,
        guide_id=uuid.uuid4(),
        activities=[TourDayActivity(entrance_id=uuid.uuid4())],
        additional_services=[SelectedService(service_id=uuid.uuid4())],
    )

    pricing = calculate_day_pricing(day, pax=2, is_euro_passport=True)

    assert pricing.daily_total == Decimal("0")


def test_additional_service_rate_types(tips) -> None:
    per_vehicle = tips.model_copy(update={"rate_type": RateType.per_vehicle})
    per_group = tips.model_copy(update={"rate_type": RateType.per_group})
    per_day = tips.model_copy(update={"rate_type": RateType.per_day})
    day = TourDay(
        day_number=1,
        additional_services=[
            SelectedService(service=tips),
            SelectedService(service=per_vehicle, quantity=3),
            SelectedService(service=per_group),
            SelectedService(service=per_day),
        ],
    )

    pricing = calculate_day_pricing(day, pax=4, is_euro_passport=True)

    # 4x5 + 3x5 + 5 + 5
    assert pricing.additional_services == Decimal("45")


def test_room_occupancy_override(hotel) -> None:
    day = TourDay(day_number=1, accommodation=hotel)

    single = calculate_day_pricing(day, pax=3, is_euro_passport=True, room_occupancy=1)

    assert single.accommodation == Decimal("300")


@pytest.mark.parametrize(("pax", "rooms"), [(1, 1), (2, 1), (3, 2), (4, 2), (9, 5)])
def test_rooms_needed(pax: int, rooms: int) -> None:
    assert rooms_needed(pax) == rooms


def test_meals_included_by_board_basis() -> None:
    assert get_meals_included(BoardBasis.BB) == {"breakfast": True, "lunch": False, "dinner": False}
    assert get_meals_included(BoardBasis.HB)["dinner"] is True
    assert get_meals_included(BoardBasis.FB)["lunch"] is True
    assert get_meals_included(None) == {"breakfast": False, "lunch": False, "dinner": False}


def test_rounding_is_half_up_to_cents(lunch) -> None:
    odd = lunch.model_copy(update={"base_rate_eur": Decimal("10.005")})
    tour = Tour(days=[TourDay(day_number=1, lunch_meal=odd)])

    result = calculate_tour_pricing(tour, pax=1, is_euro_passport=True)

    assert result.totals.grand_total == Decimal("10.01")

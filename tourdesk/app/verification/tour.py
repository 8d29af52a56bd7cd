"""Tour validation.

Not run before pricing: a tour is priced on every edit while it is still
incomplete. Validation is an explicit step before a tour is finalised.
"""

from tourdesk.app.models.tour import Tour
from tourdesk.app.models.validation import TourValidation
from tourdesk.app.pricing.calculator import get_meals_included


def validate_tour(tour: Tour) -> TourValidation:
    """Check a tour for missing mandatory data.

    Args:
        tour: Tour to check

    Returns:
        TourValidation with blocking errors and advisory warnings
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not tour.tour_name or not tour.tour_name.strip():
        errors.append("Tour name is required")

    if tour.duration_days <= 0:
        errors.append("Duration must be at least 1 day")

    if not tour.cities:
        errors.append("At least one city is required")

    if not tour.days:
        errors.append("Tour must have at least one day planned")

    # Days may legitimately be fewer than duration_days while the tour is being filled in
    for day in tour.days:
        if tour.duration_days > 0 and day.day_number > tour.duration_days:
            warnings.append(
                f"Day {day.day_number} is beyond the tour duration of {tour.duration_days} days"
            )

        if day.accommodation is None:
            continue

        included = get_meals_included(day.accommodation.board_basis)
        if day.lunch_meal is not None and included["lunch"]:
            warnings.append(
                f"Day {day.day_number}: lunch is booked but already included in the board basis"
            )
        if day.dinner_meal is not None and included["dinner"]:
            warnings.append(
                f"Day {day.day_number}: dinner is booked but already included in the board basis"
            )

    return TourValidation(valid=not errors, errors=errors, warnings=warnings)

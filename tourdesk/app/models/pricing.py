"""Pricing result models - derived, never authoritative until saved."""

import uuid
from decimal import Decimal

from pydantic import BaseModel, Field

ZERO = Decimal("0")


class DailyPricing(BaseModel):
    """Cost breakdown for one day."""

    day_number: int
    city: str
    accommodation: Decimal = ZERO
    meals: Decimal = ZERO
    guide: Decimal = ZERO
    transportation: Decimal = ZERO
    entrances: Decimal = ZERO
    additional_services: Decimal = ZERO
    daily_total: Decimal = ZERO


class TourPricing(BaseModel):
    """Trip-level totals by category."""

    tour_id: uuid.UUID | None = None
    pax: int
    is_euro_passport: bool
    total_accommodation: Decimal = ZERO
    total_meals: Decimal = ZERO
    total_guides: Decimal = ZERO
    total_transportation: Decimal = ZERO
    total_entrances: Decimal = ZERO
    total_additional_services: Decimal = ZERO
    grand_total: Decimal = ZERO
    per_person_total: Decimal = ZERO


class TourPricingBreakdown(BaseModel):
    """Full result of a tour calculation."""

    daily_breakdown: list[DailyPricing] = Field(default_factory=list)
    totals: TourPricing
    per_person: Decimal = ZERO
    currency: str = "EUR"


class Quote(BaseModel):
    """Sell price derived from a cost total and a margin."""

    cost_price: Decimal
    margin_percent: Decimal
    margin_amount: Decimal
    selling_price: Decimal
    price_per_person: Decimal
    currency: str = "EUR"

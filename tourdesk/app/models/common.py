"""Common types and enums shared across all models."""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class RateCategory(str, Enum):
    """Catalogue category of a rate row."""

    accommodation = "accommodation"
    meal = "meal"
    guide = "guide"
    entrance = "entrance"
    transportation = "transportation"
    service = "service"


class Tier(str, Enum):
    """Pricing/quality level used to pick among rates of one service."""

    budget = "budget"
    standard = "standard"
    premium = "premium"
    luxury = "luxury"


class BoardBasis(str, Enum):
    """Hotel board basis."""

    BB = "BB"  # Bed & Breakfast
    HB = "HB"  # Half Board (breakfast + dinner)
    FB = "FB"  # Full Board
    AI = "AI"  # All Inclusive


class TourType(str, Enum):
    """Tour product line."""

    classic = "classic"
    luxury = "luxury"
    budget = "budget"
    custom = "custom"


class MealType(str, Enum):
    """Meal slot."""

    breakfast = "Breakfast"
    lunch = "Lunch"
    dinner = "Dinner"


class RateType(str, Enum):
    """How a unit rate scales with the group."""

    per_person = "per_person"
    per_group = "per_group"
    per_vehicle = "per_vehicle"
    per_day = "per_day"


class QuantityMode(str, Enum):
    """Quantity multiplier applied to B2B service lines."""

    per_pax = "per_pax"
    per_group = "per_group"
    per_day = "per_day"
    per_night = "per_night"
    fixed = "fixed"


class Season(str, Enum):
    """Travel season derived from the travel month."""

    low = "low"
    high = "high"
    peak = "peak"


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope returned by every JSON endpoint."""

    success: bool = True
    data: T
    message: str | None = None


class ErrorResponse(BaseModel):
    """Failure envelope."""

    success: bool = False
    error: str
    details: list[dict[str, Any]] = Field(default_factory=list)

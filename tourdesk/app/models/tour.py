"""Tour structure models - what the tour builder assembles."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from tourdesk.app.models.common import TourType
from tourdesk.app.models.rates import (
    AccommodationRate,
    EntranceFee,
    GuideRate,
    MealRate,
    ServiceFee,
    TransportationRate,
)


class TourDayActivity(BaseModel):
    """Single activity: an entrance fee and/or a transportation leg."""

    id: uuid.UUID | None = None
    activity_order: int = Field(default=1, ge=0)
    entrance_id: uuid.UUID | None = None
    entrance: EntranceFee | None = None
    transportation_id: uuid.UUID | None = None
    transportation: TransportationRate | None = None
    activity_notes: str | None = None


class SelectedService(BaseModel):
    """Additional service booked on a day."""

    service_id: uuid.UUID | None = None
    service: ServiceFee | None = None
    quantity: int | None = Field(default=None, ge=1)


class TourDay(BaseModel):
    """One day of the tour.

    Every service can be given by reference (``*_id``), inline (hydrated
    rate object), or both. Pricing only reads the hydrated objects.
    """

    id: uuid.UUID | None = None
    day_number: int = Field(..., ge=1)
    city: str = ""
    accommodation_id: uuid.UUID | None = None
    accommodation: AccommodationRate | None = None
    breakfast_included: bool = False
    lunch_meal_id: uuid.UUID | None = None
    lunch_meal: MealRate | None = None
    dinner_meal_id: uuid.UUID | None = None
    dinner_meal: MealRate | None = None
    guide_required: bool = False
    guide_id: uuid.UUID | None = None
    guide: GuideRate | None = None
    notes: str | None = None
    activities: list[TourDayActivity] = Field(default_factory=list)
    additional_services: list[SelectedService] = Field(default_factory=list)


class Tour(BaseModel):
    """Tour being built or loaded from storage."""

    id: uuid.UUID | None = None
    tour_code: str = ""
    tour_name: str = ""
    duration_days: int = 0
    cities: list[str] = Field(default_factory=list)
    tour_type: TourType = TourType.classic
    is_template: bool = False
    description: str | None = None
    created_at: datetime | None = None
    days: list[TourDay] = Field(default_factory=list)


class TourSummary(BaseModel):
    """Listing row for saved tours."""

    id: uuid.UUID
    tour_code: str
    tour_name: str
    duration_days: int
    cities: list[str]
    tour_type: TourType
    is_template: bool
    created_at: datetime | None

"""Rate catalogue models - one row per priced service and validity window."""

import uuid
from datetime import date
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from tourdesk.app.models.common import BoardBasis, MealType, RateCategory, RateType, Tier


class RateBase(BaseModel):
    """Fields shared by every rate category.

    A rate carries two mutually exclusive price columns: one for EU passport
    holders and one for everyone else. They are not related by an exchange rate.
    """

    id: uuid.UUID | None = None
    service_code: str = ""
    name: str = ""
    city: str = ""
    tier: Tier | None = None
    base_rate_eur: Decimal = Field(default=Decimal("0"), ge=0)
    base_rate_non_eur: Decimal = Field(default=Decimal("0"), ge=0)
    valid_from: date | None = None
    valid_to: date | None = None
    is_active: bool = True

    @field_validator("valid_to")
    @classmethod
    def validate_window(cls, v: date | None, info: ValidationInfo) -> date | None:
        """Ensure valid_to >= valid_from."""
        start = info.data.get("valid_from")
        if v is not None and start is not None and v < start:
            raise ValueError("valid_to must be >= valid_from")
        return v


class AccommodationRate(RateBase):
    """Nightly room rate."""

    category: Literal["accommodation"] = "accommodation"
    property_type: str = ""
    star_rating: int | None = Field(default=None, ge=1, le=5)
    room_type: str = ""
    board_basis: BoardBasis | None = None


class MealRate(RateBase):
    """Per-person restaurant meal."""

    category: Literal["meal"] = "meal"
    meal_type: MealType = MealType.lunch
    cuisine_type: str = ""


class GuideRate(RateBase):
    """Guide day rate; private guides are per_group, shared plans per_person."""

    category: Literal["guide"] = "guide"
    guide_language: str = ""
    rate_type: RateType = RateType.per_group


class EntranceFee(RateBase):
    """Per-person entrance ticket."""

    category: Literal["entrance"] = "entrance"
    fee_type: str = ""
    child_discount_percent: Decimal | None = Field(default=None, ge=0, le=100)


class TransportationRate(RateBase):
    """Private vehicle hire, priced per vehicle."""

    category: Literal["transportation"] = "transportation"
    vehicle_type: str = ""
    service_type: str = ""
    capacity_min: int = Field(default=1, ge=1)
    capacity_max: int = Field(default=99, ge=1)


class ServiceFee(RateBase):
    """Miscellaneous service (tips, water, airport assistance...)."""

    category: Literal["service"] = "service"
    service_category: str = ""
    rate_type: RateType = RateType.per_person


AnyRate = Annotated[
    AccommodationRate | MealRate | GuideRate | EntranceFee | TransportationRate | ServiceFee,
    Field(discriminator="category"),
]

RATE_MODELS: dict[RateCategory, type[RateBase]] = {
    RateCategory.accommodation: AccommodationRate,
    RateCategory.meal: MealRate,
    RateCategory.guide: GuideRate,
    RateCategory.entrance: EntranceFee,
    RateCategory.transportation: TransportationRate,
    RateCategory.service: ServiceFee,
}

# Fields stored in dedicated columns; everything else goes to the JSON details column.
COMMON_RATE_FIELDS = frozenset(RateBase.model_fields) | {"category"}

"""B2B partner pricing models."""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from tourdesk.app.models.common import QuantityMode, RateCategory, Season


class PricingModel(str, Enum):
    """How a B2B pricing rule turns group size into a price."""

    per_unit = "per_unit"
    tiered = "tiered"
    per_person = "per_person"


class PackageType(str, Enum):
    """Transport package families."""

    cruise_sightseeing = "cruise_sightseeing"
    cruise_transfer = "cruise_transfer"


class Partner(BaseModel):
    """Reseller with negotiated pricing."""

    id: uuid.UUID | None = None
    name: str = Field(..., min_length=1, max_length=255)
    contact_email: str | None = None
    default_margin_percent: Decimal | None = Field(default=None, ge=0)
    is_active: bool = True


class PartnerOverride(BaseModel):
    """Partner margin override for one tour variation."""

    variation_code: str = Field(..., min_length=1)
    margin_percent_override: Decimal = Field(..., ge=0)
    is_active: bool = True


class PricingTier(BaseModel):
    """One tier of a pricing rule; max_pax None means unbounded."""

    max_pax: int | None = Field(default=None, ge=1)
    rate_eur: Decimal = Field(..., ge=0)
    label: str | None = None


class PricingRule(BaseModel):
    """Group-size dependent pricing for an activity (boats, shows...)."""

    id: uuid.UUID | None = None
    service_name: str = Field(..., min_length=1)
    pricing_model: PricingModel = PricingModel.per_person
    unit_type: str = "unit"
    tiers: list[PricingTier] = Field(..., min_length=1)
    is_active: bool = True


class PackageVehicle(BaseModel):
    """Vehicle option inside a transport package."""

    vehicle: str
    capacity: int = Field(..., ge=1)
    rate_eur: Decimal | None = Field(default=None, ge=0)


class TransportPackage(BaseModel):
    """Fixed-price transport bundle between two cities."""

    id: uuid.UUID | None = None
    package_type: PackageType
    origin_city: str
    destination_city: str
    vehicles: list[PackageVehicle] = Field(..., min_length=1)
    is_active: bool = True


class VariationService(BaseModel):
    """Service line of a tour variation being priced for a partner."""

    id: str | None = None
    service_name: str = ""
    service_category: str = ""
    rate_type: RateCategory | None = Field(
        default=None, description="Catalogue category rate_id must belong to"
    )
    rate_id: uuid.UUID | None = None
    quantity_mode: QuantityMode = QuantityMode.per_pax
    quantity_value: int = Field(default=1, ge=1)
    cost_per_unit: Decimal | None = Field(default=None, ge=0)
    is_optional: bool = False
    day_number: int | None = None
    origin_city: str | None = None
    destination_city: str | None = None


class CalculatedService(BaseModel):
    """Priced service line."""

    service_id: str | None
    service_name: str
    service_category: str
    rate_source: str
    quantity_mode: QuantityMode
    quantity: int
    unit_cost: Decimal
    line_total: Decimal
    is_optional: bool
    day_number: int | None
    pricing_note: str | None = None


class B2BPriceResult(BaseModel):
    """Partner quote for a tour variation.

    Optional lines are always listed; they count towards optional_total and
    total_cost only when optionals were requested.
    """

    variation_code: str | None
    num_pax: int
    travel_date: date
    season: Season
    is_eur_passport: bool
    services: list[CalculatedService]
    optional_services: list[CalculatedService]
    subtotal_cost: Decimal
    optional_total: Decimal
    total_cost: Decimal
    margin_percent: Decimal
    margin_amount: Decimal
    selling_price: Decimal
    price_per_person: Decimal
    currency: str = "EUR"

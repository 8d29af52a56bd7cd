"""Models package - re-exports for convenience."""

from tourdesk.app.models.b2b import (
    B2BPriceResult,
    CalculatedService,
    PackageType,
    PackageVehicle,
    Partner,
    PartnerOverride,
    PricingModel,
    PricingRule,
    PricingTier,
    TransportPackage,
    VariationService,
)
from tourdesk.app.models.common import (
    ApiResponse,
    BoardBasis,
    ErrorResponse,
    MealType,
    QuantityMode,
    RateCategory,
    RateType,
    Season,
    Tier,
    TourType,
)
from tourdesk.app.models.pricing import DailyPricing, Quote, TourPricing, TourPricingBreakdown
from tourdesk.app.models.rates import (
    RATE_MODELS,
    AccommodationRate,
    AnyRate,
    EntranceFee,
    GuideRate,
    MealRate,
    RateBase,
    ServiceFee,
    TransportationRate,
)
from tourdesk.app.models.tour import SelectedService, Tour, TourDay, TourDayActivity, TourSummary
from tourdesk.app.models.validation import TourValidation

__all__ = [
    # Common
    "ApiResponse",
    "ErrorResponse",
    "BoardBasis",
    "MealType",
    "QuantityMode",
    "RateCategory",
    "RateType",
    "Season",
    "Tier",
    "TourType",
    # Rates
    "RATE_MODELS",
    "AnyRate",
    "RateBase",
    "AccommodationRate",
    "MealRate",
    "GuideRate",
    "EntranceFee",
    "TransportationRate",
    "ServiceFee",
    # Tour
    "Tour",
    "TourDay",
    "TourDayActivity",
    "SelectedService",
    "TourSummary",
    "TourValidation",
    # Pricing
    "DailyPricing",
    "TourPricing",
    "TourPricingBreakdown",
    "Quote",
    # B2B
    "Partner",
    "PartnerOverride",
    "PricingModel",
    "PricingRule",
    "PricingTier",
    "PackageType",
    "PackageVehicle",
    "TransportPackage",
    "VariationService",
    "CalculatedService",
    "B2BPriceResult",
]

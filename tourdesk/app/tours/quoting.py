"""Instrumented tour pricing: calculator plus margin, with metrics and logs."""

import time
from decimal import Decimal

from pydantic import BaseModel

from tourdesk.app.config import get_settings
from tourdesk.app.db.context import RequestContext
from tourdesk.app.errors import PricingError
from tourdesk.app.models.pricing import Quote, TourPricingBreakdown
from tourdesk.app.models.tour import Tour
from tourdesk.app.pricing.calculator import calculate_tour_pricing
from tourdesk.app.pricing.quote import apply_margin
from tourdesk.app.utils.logging import StructuredPricingLogger
from tourdesk.app.utils.metrics import PrometheusPricingMetrics

_metrics = PrometheusPricingMetrics()
_log = StructuredPricingLogger()


class PricedTour(BaseModel):
    """Cost breakdown plus the margin quote built on it."""

    pricing: TourPricingBreakdown
    quote: Quote


def price_tour(
    tour: Tour,
    pax: int,
    is_euro_passport: bool,
    ctx: RequestContext,
    *,
    margin_percent: Decimal | None = None,
    kind: str = "tour",
) -> PricedTour:
    """Price a hydrated tour and apply the margin.

    Args:
        tour: Tour with rate objects embedded
        pax: Number of travellers
        is_euro_passport: Passport column to use
        ctx: Request context (for logs)
        margin_percent: Markup on cost; defaults to the configured margin
        kind: Label for metrics and logs

    Returns:
        PricedTour

    Raises:
        PricingError: If pax is out of range or the margin is negative
    """
    settings = get_settings()
    start = time.perf_counter()

    try:
        if pax > settings.max_pax:
            raise PricingError(f"Number of passengers cannot exceed {settings.max_pax}")

        pricing = calculate_tour_pricing(
            tour,
            pax,
            is_euro_passport,
            room_occupancy=settings.room_occupancy,
            currency=settings.currency,
        )
        margin = settings.default_margin_percent if margin_percent is None else margin_percent
        quote = apply_margin(pricing.totals.grand_total, margin, pax, settings.currency)
    except PricingError as e:
        latency_ms = (time.perf_counter() - start) * 1000
        _metrics.record_calculation(kind, "error", latency_ms)
        _log.log_calculation(ctx, kind, "error", latency_ms, pax=pax, error_reason=e.message)
        raise

    latency_ms = (time.perf_counter() - start) * 1000
    _metrics.record_calculation(kind, "success", latency_ms)
    _log.log_calculation(
        ctx, kind, "success", latency_ms, pax=pax, grand_total=pricing.totals.grand_total
    )
    return PricedTour(pricing=pricing, quote=quote)

"""B2B partner endpoints - partners, pricing rules, transport packages, quotes."""

import time
import uuid
from datetime import date
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from tourdesk.app.api.auth import get_current_context
from tourdesk.app.api.deps import get_b2b_repository, get_rate_repository
from tourdesk.app.config import get_settings
from tourdesk.app.db.context import RequestContext
from tourdesk.app.db.repositories import PartnerRecord
from tourdesk.app.db.sql_repositories import SqlB2BRepository, SqlRateRepository
from tourdesk.app.errors import NotFoundError, PricingError
from tourdesk.app.middleware.ratelimit import enforce_rate_limit
from tourdesk.app.models.b2b import (
    B2BPriceResult,
    Partner,
    PartnerOverride,
    PricingRule,
    TransportPackage,
    VariationService,
)
from tourdesk.app.models.common import ApiResponse
from tourdesk.app.pricing.b2b import calculate_b2b_price, resolve_effective_margin
from tourdesk.app.utils.logging import StructuredPricingLogger
from tourdesk.app.utils.metrics import PrometheusPricingMetrics

router = APIRouter(prefix="/b2b", tags=["b2b"], dependencies=[Depends(enforce_rate_limit)])

_metrics = PrometheusPricingMetrics()
_log = StructuredPricingLogger()


class PartnerResponse(BaseModel):
    """Partner with its variation overrides."""

    partner: Partner
    overrides: list[PartnerOverride]

    @classmethod
    def from_record(cls, record: PartnerRecord) -> "PartnerResponse":
        return cls(partner=record.partner, overrides=record.overrides)


class B2BPriceRequest(BaseModel):
    """Request body for POST /b2b/calculate-price."""

    services: list[VariationService] = Field(..., min_length=1)
    num_pax: int = Field(..., ge=1)
    duration_days: int = Field(1, ge=1)
    travel_date: date
    is_eur_passport: bool = True
    margin_percent: Decimal | None = Field(None, ge=0)
    partner_id: uuid.UUID | None = None
    variation_code: str | None = None
    include_optionals: bool = False


@router.get("/partners", response_model=ApiResponse[list[PartnerResponse]])
async def list_partners(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    repo: Annotated[SqlB2BRepository, Depends(get_b2b_repository)],
) -> ApiResponse[list[PartnerResponse]]:
    """List partners with their overrides."""
    return ApiResponse(
        data=[PartnerResponse.from_record(record) for record in await repo.list_partners(ctx)]
    )


@router.post(
    "/partners", response_model=ApiResponse[Partner], status_code=status.HTTP_201_CREATED
)
async def create_partner(
    partner: Partner,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    repo: Annotated[SqlB2BRepository, Depends(get_b2b_repository)],
) -> ApiResponse[Partner]:
    """Create a partner."""
    return ApiResponse(data=await repo.create_partner(partner, ctx), message="Partner created")


@router.put("/partners/{partner_id}/overrides", response_model=ApiResponse[PartnerResponse])
async def set_partner_overrides(
    partner_id: uuid.UUID,
    overrides: list[PartnerOverride],
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    repo: Annotated[SqlB2BRepository, Depends(get_b2b_repository)],
) -> ApiResponse[PartnerResponse]:
    """Replace a partner's per-variation margin overrides."""
    record = await repo.set_overrides(partner_id, overrides, ctx)
    if record is None:
        raise NotFoundError(f"Partner {partner_id} not found")
    return ApiResponse(data=PartnerResponse.from_record(record))


@router.get("/pricing-rules", response_model=ApiResponse[list[PricingRule]])
async def list_pricing_rules(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    repo: Annotated[SqlB2BRepository, Depends(get_b2b_repository)],
) -> ApiResponse[list[PricingRule]]:
    """List active group-size pricing rules."""
    return ApiResponse(data=await repo.list_pricing_rules(ctx))


@router.post(
    "/pricing-rules",
    response_model=ApiResponse[PricingRule],
    status_code=status.HTTP_201_CREATED,
)
async def create_pricing_rule(
    rule: PricingRule,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    repo: Annotated[SqlB2BRepository, Depends(get_b2b_repository)],
) -> ApiResponse[PricingRule]:
    """Create a group-size pricing rule."""
    return ApiResponse(data=await repo.create_pricing_rule(rule, ctx))


@router.get("/transport-packages", response_model=ApiResponse[list[TransportPackage]])
async def list_transport_packages(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    repo: Annotated[SqlB2BRepository, Depends(get_b2b_repository)],
) -> ApiResponse[list[TransportPackage]]:
    """List active transport packages."""
    return ApiResponse(data=await repo.list_transport_packages(ctx))


@router.post(
    "/transport-packages",
    response_model=ApiResponse[TransportPackage],
    status_code=status.HTTP_201_CREATED,
)
async def create_transport_package(
    package: TransportPackage,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    repo: Annotated[SqlB2BRepository, Depends(get_b2b_repository)],
) -> ApiResponse[TransportPackage]:
    """Create a transport package."""
    return ApiResponse(data=await repo.create_transport_package(package, ctx))


@router.post("/calculate-price", response_model=ApiResponse[B2BPriceResult])
async def calculate_price(
    request: B2BPriceRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    repo: Annotated[SqlB2BRepository, Depends(get_b2b_repository)],
    rates: Annotated[SqlRateRepository, Depends(get_rate_repository)],
) -> ApiResponse[B2BPriceResult]:
    """Price a tour variation for a partner.

    Margin precedence: partner override for the variation, then the
    partner's default, then the request, then the configured default.
    """
    settings = get_settings()

    partner: PartnerRecord | None = None
    if request.partner_id is not None:
        partner = await repo.get_partner(request.partner_id, ctx)
        if partner is None:
            raise NotFoundError(f"Partner {request.partner_id} not found")

    requested = (
        request.margin_percent
        if request.margin_percent is not None
        else settings.default_margin_percent
    )
    margin = resolve_effective_margin(
        requested,
        partner.partner if partner else None,
        partner.overrides if partner else (),
        request.variation_code,
    )

    rate_ids = {service.rate_id for service in request.services if service.rate_id is not None}
    catalogue = await rates.get_rates_by_ids(rate_ids, ctx)

    start = time.perf_counter()
    try:
        result = calculate_b2b_price(
            request.services,
            num_pax=request.num_pax,
            duration_days=request.duration_days,
            travel_date=request.travel_date,
            is_eur_passport=request.is_eur_passport,
            margin_percent=margin,
            include_optionals=request.include_optionals,
            variation_code=request.variation_code,
            rules=await repo.list_pricing_rules(ctx),
            packages=await repo.list_transport_packages(ctx),
            rates=catalogue,
            currency=settings.currency,
        )
    except PricingError as e:
        latency_ms = (time.perf_counter() - start) * 1000
        _metrics.record_calculation("b2b", "error", latency_ms)
        _log.log_calculation(ctx, "b2b", "error", latency_ms, error_reason=e.message)
        raise

    latency_ms = (time.perf_counter() - start) * 1000
    _metrics.record_calculation("b2b", "success", latency_ms)
    _metrics.inc_unresolved("b2b", len(rate_ids - catalogue.keys()))
    _log.log_calculation(
        ctx,
        "b2b",
        "success",
        latency_ms,
        pax=request.num_pax,
        grand_total=result.selling_price,
    )
    return ApiResponse(data=result)

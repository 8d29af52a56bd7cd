"""Rate catalogue endpoints."""

import uuid
from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from tourdesk.app.api.auth import get_current_context
from tourdesk.app.api.deps import get_rate_repository
from tourdesk.app.db.context import RequestContext
from tourdesk.app.db.repositories import RateFilters
from tourdesk.app.db.sql_repositories import SqlRateRepository
from tourdesk.app.errors import NotFoundError
from tourdesk.app.middleware.ratelimit import enforce_rate_limit
from tourdesk.app.models.common import ApiResponse, RateCategory, Tier
from tourdesk.app.models.rates import RATE_MODELS, AnyRate, RateBase, TransportationRate
from tourdesk.app.pricing.rates import (
    find_overlapping_rates,
    resolve_rate,
    select_vehicle,
    suggest_vehicle_type,
)
from tourdesk.app.utils.metrics import PrometheusPricingMetrics

router = APIRouter(prefix="/rates", tags=["rates"], dependencies=[Depends(enforce_rate_limit)])

_metrics = PrometheusPricingMetrics()


class RateConflict(BaseModel):
    """Two active rates of the same scope with overlapping windows."""

    service_code: str
    city: str
    tier: Tier | None
    rate_ids: list[uuid.UUID | None]


class VehicleChoice(BaseModel):
    """Vehicle picked for a group size."""

    suggested_type: str
    rate: TransportationRate | None


def parse_rate(category: RateCategory, body: dict[str, Any]) -> RateBase:
    """Validate a request body against the model of a rate category.

    Raises:
        RequestValidationError: If the body does not fit the category
    """
    try:
        return RATE_MODELS[category].model_validate({**body, "category": category.value})
    except ValidationError as e:
        raise RequestValidationError(
            [{**error, "loc": ("body", *error["loc"])} for error in e.errors()]
        ) from e


@router.get("/transportation/select-vehicle", response_model=ApiResponse[VehicleChoice])
async def pick_vehicle(
    pax: Annotated[int, Query(ge=1)],
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    rates: Annotated[SqlRateRepository, Depends(get_rate_repository)],
    city: str | None = None,
    on_date: Annotated[date | None, Query(alias="date")] = None,
) -> ApiResponse[VehicleChoice]:
    """Pick the transportation rate whose capacity fits the group."""
    candidates = [
        rate
        for rate in await rates.list_rates(
            RateCategory.transportation, ctx, RateFilters(city=city)
        )
        if isinstance(rate, TransportationRate)
        and (on_date is None or rate.valid_from is None or rate.valid_from <= on_date)
        and (on_date is None or rate.valid_to is None or on_date <= rate.valid_to)
    ]
    return ApiResponse(
        data=VehicleChoice(
            suggested_type=suggest_vehicle_type(pax), rate=select_vehicle(candidates, pax)
        )
    )


@router.get("/{category}", response_model=ApiResponse[list[AnyRate]])
async def list_rates(
    category: RateCategory,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    rates: Annotated[SqlRateRepository, Depends(get_rate_repository)],
    city: str | None = None,
    service_code: str | None = None,
    include_inactive: bool = False,
) -> ApiResponse[list[Any]]:
    """List catalogue rates of one category."""
    filters = RateFilters(city=city, service_code=service_code, include_inactive=include_inactive)
    return ApiResponse(data=await rates.list_rates(category, ctx, filters))


@router.post(
    "/{category}", response_model=ApiResponse[AnyRate], status_code=status.HTTP_201_CREATED
)
async def create_rate(
    category: RateCategory,
    body: Annotated[dict[str, Any], Body()],
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    rates: Annotated[SqlRateRepository, Depends(get_rate_repository)],
) -> ApiResponse[Any]:
    """Add a rate; rejected with 409 when its window overlaps an active rate."""
    rate = parse_rate(category, body)
    return ApiResponse(data=await rates.create_rate(rate, ctx), message="Rate created")


@router.delete("/{category}/{rate_id}", response_model=ApiResponse[dict[str, bool]])
async def deactivate_rate(
    category: RateCategory,
    rate_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    rates: Annotated[SqlRateRepository, Depends(get_rate_repository)],
) -> ApiResponse[dict[str, bool]]:
    """Deactivate a rate (soft delete; saved tours may still reference it)."""
    if not await rates.deactivate_rate(category, rate_id, ctx):
        raise NotFoundError(f"Rate {rate_id} not found in {category.value}")
    return ApiResponse(data={"deactivated": True})


@router.get("/{category}/resolve", response_model=ApiResponse[AnyRate])
async def resolve(
    category: RateCategory,
    service_code: str,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    rates: Annotated[SqlRateRepository, Depends(get_rate_repository)],
    city: str | None = None,
    on_date: Annotated[date | None, Query(alias="date")] = None,
    tier: Tier | None = None,
) -> ApiResponse[Any]:
    """Find the single active rate for a service on a date.

    Returns 404 when nothing applies and 409 when several rates overlap.
    """
    candidates = await rates.list_rates(
        category, ctx, RateFilters(city=city, service_code=service_code)
    )
    rate = resolve_rate(
        candidates, service_code=service_code, city=city, on_date=on_date, tier=tier
    )
    if rate is None:
        raise NotFoundError(
            f"No active {category.value} rate for '{service_code}'"
            + (f" on {on_date}" if on_date else "")
        )
    return ApiResponse(data=rate)


@router.get("/{category}/conflicts", response_model=ApiResponse[list[RateConflict]])
async def list_conflicts(
    category: RateCategory,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    rates: Annotated[SqlRateRepository, Depends(get_rate_repository)],
) -> ApiResponse[list[RateConflict]]:
    """Audit the catalogue for active rates with overlapping windows."""
    conflicts = find_overlapping_rates(await rates.list_rates(category, ctx))
    if conflicts:
        _metrics.inc_rate_conflict(category.value, "audit")

    return ApiResponse(
        data=[
            RateConflict(
                service_code=first.service_code,
                city=first.city,
                tier=first.tier,
                rate_ids=[first.id, second.id],
            )
            for first, second in conflicts
        ]
    )

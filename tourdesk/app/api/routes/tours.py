"""Tour endpoints - pricing, validation and storage of built tours."""

import uuid
from datetime import date
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from tourdesk.app.api.auth import get_current_context
from tourdesk.app.api.deps import get_rate_repository, get_tour_repository
from tourdesk.app.db.context import RequestContext
from tourdesk.app.db.sql_repositories import SqlRateRepository, SqlTourRepository
from tourdesk.app.errors import NotFoundError
from tourdesk.app.middleware.ratelimit import enforce_rate_limit
from tourdesk.app.models.common import ApiResponse
from tourdesk.app.models.pricing import TourPricing
from tourdesk.app.models.tour import Tour, TourSummary
from tourdesk.app.models.validation import TourValidation
from tourdesk.app.tours.builder import (
    ensure_embedded_rates_stored,
    generate_tour_code,
    hydrate_tour,
)
from tourdesk.app.tours.quoting import PricedTour, price_tour
from tourdesk.app.verification.tour import validate_tour

router = APIRouter(
    prefix="/tours", tags=["tours"], dependencies=[Depends(enforce_rate_limit)]
)


class PricingOptions(BaseModel):
    """Pricing parameters shared by the calculate endpoints."""

    pax: int = Field(..., description="Number of travellers")
    is_euro_passport: bool = True
    travel_date: date | None = Field(
        None, description="Date of day 1; rates are re-resolved per day when set"
    )
    margin_percent: Decimal | None = Field(None, description="Defaults to the configured margin")


class CalculateTourRequest(PricingOptions):
    """Request body for POST /tours/calculate."""

    tour: Tour


class SaveTourRequest(BaseModel):
    """Request body for POST /tours/save."""

    tour: Tour
    pax: int | None = Field(None, description="Store a pricing snapshot for this group size")
    is_euro_passport: bool = True
    travel_date: date | None = None


class SaveTourResponse(BaseModel):
    """Response for POST /tours/save."""

    tour_id: uuid.UUID
    tour_code: str
    pricing: PricedTour | None = None


class TourDetail(BaseModel):
    """Response for GET /tours/{tour_id}."""

    tour: Tour
    latest_pricing: TourPricing | None = None


@router.post("/calculate", response_model=ApiResponse[PricedTour])
async def calculate_tour(
    request: CalculateTourRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    rates: Annotated[SqlRateRepository, Depends(get_rate_repository)],
) -> ApiResponse[PricedTour]:
    """Price a tour sent inline.

    Rates can be embedded on each day or referenced by ID; referenced rates
    are loaded from the catalogue first.
    """
    tour = await hydrate_tour(request.tour, rates, ctx, request.travel_date)
    priced = price_tour(
        tour,
        request.pax,
        request.is_euro_passport,
        ctx,
        margin_percent=request.margin_percent,
        kind="tour",
    )
    return ApiResponse(data=priced)


@router.post("/validate", response_model=ApiResponse[TourValidation])
async def validate(tour: Tour) -> ApiResponse[TourValidation]:
    """Check a tour for missing mandatory data."""
    return ApiResponse(data=validate_tour(tour))


@router.post(
    "/save", response_model=ApiResponse[SaveTourResponse], status_code=status.HTTP_201_CREATED
)
async def save_tour(
    request: SaveTourRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    rates: Annotated[SqlRateRepository, Depends(get_rate_repository)],
    tours: Annotated[SqlTourRepository, Depends(get_tour_repository)],
) -> ApiResponse[SaveTourResponse]:
    """Save a tour with all of its days in one transaction.

    When pax is given the tour is priced first and the snapshot is stored
    in the same transaction. Inline rates are stored as references, so they must already be in the
    catalogue.
    """
    tour = request.tour
    await ensure_embedded_rates_stored(tour, rates, ctx)
    if not tour.tour_code:
        tour = tour.model_copy(
            update={"tour_code": generate_tour_code(tour.tour_name, tour.duration_days)}
        )

    priced: PricedTour | None = None
    if request.pax is not None:
        hydrated = await hydrate_tour(tour, rates, ctx, request.travel_date)
        priced = price_tour(hydrated, request.pax, request.is_euro_passport, ctx, kind="save")

    tour_id = await tours.save_tour(
        tour,
        ctx,
        pricing=priced.pricing if priced else None,
        pax=request.pax,
        is_euro_passport=request.is_euro_passport,
    )

    return ApiResponse(
        data=SaveTourResponse(tour_id=tour_id, tour_code=tour.tour_code, pricing=priced),
        message="Tour saved",
    )


@router.get("", response_model=ApiResponse[list[TourSummary]])
async def list_tours(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    tours: Annotated[SqlTourRepository, Depends(get_tour_repository)],
    templates_only: bool = False,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> ApiResponse[list[TourSummary]]:
    """List saved tours, newest first."""
    return ApiResponse(data=await tours.list_tours(ctx, templates_only=templates_only, limit=limit))


@router.get("/{tour_id}", response_model=ApiResponse[TourDetail])
async def get_tour(
    tour_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    tours: Annotated[SqlTourRepository, Depends(get_tour_repository)],
) -> ApiResponse[TourDetail]:
    """Get a saved tour with its latest pricing snapshot."""
    tour = await tours.get_tour(tour_id, ctx)
    if tour is None:
        raise NotFoundError(f"Tour {tour_id} not found")

    latest = await tours.get_latest_pricing(tour_id, ctx)
    return ApiResponse(data=TourDetail(tour=tour, latest_pricing=latest))


@router.delete("/{tour_id}", response_model=ApiResponse[dict[str, bool]])
async def delete_tour(
    tour_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    tours: Annotated[SqlTourRepository, Depends(get_tour_repository)],
) -> ApiResponse[dict[str, bool]]:
    """Delete a saved tour and its days."""
    if not await tours.delete_tour(tour_id, ctx):
        raise NotFoundError(f"Tour {tour_id} not found")
    return ApiResponse(data={"deleted": True})


@router.post("/{tour_id}/calculate", response_model=ApiResponse[PricedTour])
async def calculate_saved_tour(
    tour_id: uuid.UUID,
    request: PricingOptions,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    rates: Annotated[SqlRateRepository, Depends(get_rate_repository)],
    tours: Annotated[SqlTourRepository, Depends(get_tour_repository)],
) -> ApiResponse[PricedTour]:
    """Price a saved tour against the current catalogue."""
    stored = await tours.get_tour(tour_id, ctx)
    if stored is None:
        raise NotFoundError(f"Tour {tour_id} not found")

    tour = await hydrate_tour(stored, rates, ctx, request.travel_date)
    priced = price_tour(
        tour,
        request.pax,
        request.is_euro_passport,
        ctx,
        margin_percent=request.margin_percent,
        kind="stored_tour",
    )
    return ApiResponse(data=priced)

"""Tenancy-safe query helpers."""

from sqlalchemy import Select, select
from sqlalchemy.orm import selectinload

from tourdesk.app.db.context import RequestContext
from tourdesk.app.db.models import (
    B2BPartnerRow,
    B2BPricingRuleRow,
    B2BTransportPackageRow,
    ServiceRate,
    TourDayRow,
    TourRow,
)


def select_rates(ctx: RequestContext) -> Select[tuple[ServiceRate]]:
    """Select service_rate rows of the caller's org."""
    return select(ServiceRate).where(ServiceRate.org_id == ctx.org_id)


def select_tours(ctx: RequestContext) -> Select[tuple[TourRow]]:
    """Select tour rows of the caller's org."""
    return select(TourRow).where(TourRow.org_id == ctx.org_id)


def select_tours_with_days(ctx: RequestContext) -> Select[tuple[TourRow]]:
    """Select tours with days, activities and services eagerly loaded.

    Async sessions cannot lazy-load, so the whole tree is fetched up front.
    """
    return select_tours(ctx).options(
        selectinload(TourRow.days).selectinload(TourDayRow.activities),
        selectinload(TourRow.days).selectinload(TourDayRow.services),
        selectinload(TourRow.pricing_snapshots),
    )


def select_partners(ctx: RequestContext) -> Select[tuple[B2BPartnerRow]]:
    """Select partners of the caller's org with their overrides."""
    return (
        select(B2BPartnerRow)
        .where(B2BPartnerRow.org_id == ctx.org_id)
        .options(selectinload(B2BPartnerRow.overrides))
    )


def select_pricing_rules(ctx: RequestContext) -> Select[tuple[B2BPricingRuleRow]]:
    """Select B2B pricing rules of the caller's org."""
    return select(B2BPricingRuleRow).where(B2BPricingRuleRow.org_id == ctx.org_id)


def select_transport_packages(ctx: RequestContext) -> Select[tuple[B2BTransportPackageRow]]:
    """Select transport packages of the caller's org."""
    return select(B2BTransportPackageRow).where(B2BTransportPackageRow.org_id == ctx.org_id)

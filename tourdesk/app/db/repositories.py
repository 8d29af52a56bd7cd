"""Repository protocol interfaces for data access."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from tourdesk.app.db.context import RequestContext
from tourdesk.app.models.b2b import Partner, PartnerOverride, PricingRule, TransportPackage
from tourdesk.app.models.common import RateCategory
from tourdesk.app.models.pricing import TourPricing, TourPricingBreakdown
from tourdesk.app.models.rates import RateBase
from tourdesk.app.models.tour import Tour, TourSummary


@dataclass
class RateFilters:
    """Optional filters for catalogue listing."""

    city: str | None = None
    service_code: str | None = None
    include_inactive: bool = False


@dataclass
class PartnerRecord:
    """Partner with its active variation overrides."""

    partner: Partner
    overrides: list[PartnerOverride]


class RateRepository(Protocol):
    """Repository for the rate catalogue."""

    async def list_rates(
        self, category: RateCategory, ctx: RequestContext, filters: RateFilters | None = None
    ) -> list[RateBase]:
        """List rates of one category.

        Args:
            category: Rate category
            ctx: Request context (enforces tenancy)
            filters: Optional city / service code filters

        Returns:
            Rates ordered by service code then validity start
        """
        ...

    async def get_rates_by_ids(
        self, rate_ids: set[UUID], ctx: RequestContext
    ) -> dict[UUID, RateBase]:
        """Load rates referenced by a tour or a B2B variation.

        Args:
            rate_ids: Rate IDs
            ctx: Request context (enforces tenancy)

        Returns:
            Mapping of found IDs to rates; unknown IDs are absent
        """
        ...

    async def create_rate(self, rate: RateBase, ctx: RequestContext) -> RateBase:
        """Add a rate to the catalogue.

        Raises:
            OverlappingRatesError: If an active rate with the same scope
                already covers part of the validity window
        """
        ...

    async def deactivate_rate(
        self, category: RateCategory, rate_id: UUID, ctx: RequestContext
    ) -> bool:
        """Soft-delete a rate.

        Returns:
            True if the rate existed in the caller's org
        """
        ...


class TourRepository(Protocol):
    """Repository for saved tours."""

    async def save_tour(
        self,
        tour: Tour,
        ctx: RequestContext,
        pricing: TourPricingBreakdown | None = None,
        pax: int | None = None,
        is_euro_passport: bool = True,
    ) -> UUID:
        """Persist a tour with all of its days in one transaction.

        Args:
            tour: Tour to save
            ctx: Request context
            pricing: Optional pricing snapshot stored with the tour
            pax: Group size the snapshot was computed for
            is_euro_passport: Passport column the snapshot was computed with

        Returns:
            Tour ID
        """
        ...

    async def get_tour(self, tour_id: UUID, ctx: RequestContext) -> Tour | None:
        """Get a tour with its days by ID (rate references not hydrated)."""
        ...

    async def get_latest_pricing(
        self, tour_id: UUID, ctx: RequestContext
    ) -> TourPricing | None:
        """Get the most recent pricing snapshot stored with a tour."""
        ...

    async def list_tours(
        self, ctx: RequestContext, *, templates_only: bool = False, limit: int = 50
    ) -> list[TourSummary]:
        """List tours, newest first."""
        ...

    async def delete_tour(self, tour_id: UUID, ctx: RequestContext) -> bool:
        """Delete a tour and everything below it.

        Returns:
            True if the tour existed in the caller's org
        """
        ...


class B2BRepository(Protocol):
    """Repository for partners, pricing rules and transport packages."""

    async def list_partners(self, ctx: RequestContext) -> list[PartnerRecord]:
        """List partners with their overrides."""
        ...

    async def get_partner(self, partner_id: UUID, ctx: RequestContext) -> PartnerRecord | None:
        """Get a partner by ID."""
        ...

    async def create_partner(self, partner: Partner, ctx: RequestContext) -> Partner:
        """Create a partner."""
        ...

    async def set_overrides(
        self, partner_id: UUID, overrides: list[PartnerOverride], ctx: RequestContext
    ) -> PartnerRecord | None:
        """Replace a partner's variation overrides.

        Returns:
            Updated partner, or None if the partner does not exist
        """
        ...

    async def list_pricing_rules(self, ctx: RequestContext) -> list[PricingRule]:
        """List active pricing rules."""
        ...

    async def create_pricing_rule(self, rule: PricingRule, ctx: RequestContext) -> PricingRule:
        """Create a pricing rule."""
        ...

    async def list_transport_packages(self, ctx: RequestContext) -> list[TransportPackage]:
        """List active transport packages."""
        ...

    async def create_transport_package(
        self, package: TransportPackage, ctx: RequestContext
    ) -> TransportPackage:
        """Create a transport package."""
        ...


@dataclass
class RetryAfter:
    """Rate limit retry-after information."""

    seconds: int


class RateLimiter(Protocol):
    """Rate limiter interface."""

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available.

        Args:
            key: Rate limit key
            now: Current timestamp

        Returns:
            RetryAfter if over quota, None if allowed
        """
        ...

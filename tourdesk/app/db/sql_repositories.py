"""SQL implementations of repository interfaces."""

import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.app.db.context import RequestContext
from tourdesk.app.db.models import (
    B2BPartnerPricingRow,
    B2BPartnerRow,
    B2BPricingRuleRow,
    B2BTransportPackageRow,
    ServiceRate,
    TourDayActivityRow,
    TourDayRow,
    TourDayServiceRow,
    TourPricingRow,
    TourRow,
)
from tourdesk.app.db.queries import (
    select_partners,
    select_pricing_rules,
    select_rates,
    select_tours,
    select_tours_with_days,
    select_transport_packages,
)
from tourdesk.app.db.repositories import PartnerRecord, RateFilters
from tourdesk.app.errors import ConflictError, OverlappingRatesError
from tourdesk.app.models.b2b import Partner, PartnerOverride, PricingRule, TransportPackage
from tourdesk.app.models.common import RateCategory
from tourdesk.app.models.pricing import TourPricing, TourPricingBreakdown
from tourdesk.app.models.rates import COMMON_RATE_FIELDS, RATE_MODELS, RateBase
from tourdesk.app.models.tour import SelectedService, Tour, TourDay, TourDayActivity, TourSummary
from tourdesk.app.pricing.rates import windows_overlap
from tourdesk.app.tours.builder import generate_tour_code

logger = logging.getLogger(__name__)


def rate_from_row(row: ServiceRate) -> RateBase:
    """Build the category-specific rate model from a catalogue row."""
    model = RATE_MODELS[RateCategory(row.category)]
    return model.model_validate(
        {
            **row.details,
            "id": row.id,
            "service_code": row.service_code,
            "name": row.name,
            "city": row.city,
            "tier": row.tier,
            "base_rate_eur": row.base_rate_eur,
            "base_rate_non_eur": row.base_rate_non_eur,
            "valid_from": row.valid_from,
            "valid_to": row.valid_to,
            "is_active": row.is_active,
        }
    )


def rate_details(rate: RateBase) -> dict[str, Any]:
    """Category-specific attributes of a rate, JSON-ready."""
    data = rate.model_dump(mode="json")
    return {key: value for key, value in data.items() if key not in COMMON_RATE_FIELDS}


def category_of(rate: RateBase) -> RateCategory:
    """Category of a concrete rate model."""
    for category, model in RATE_MODELS.items():
        if isinstance(rate, model):
            return category
    raise ValueError(f"Unsupported rate model: {type(rate).__name__}")


class SqlRateRepository:
    """SQL implementation of RateRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_rates(
        self, category: RateCategory, ctx: RequestContext, filters: RateFilters | None = None
    ) -> list[RateBase]:
        """List rates of one category."""
        filters = filters or RateFilters()
        stmt = select_rates(ctx).where(ServiceRate.category == category.value)

        if filters.city:
            stmt = stmt.where(ServiceRate.city == filters.city)
        if filters.service_code:
            stmt = stmt.where(ServiceRate.service_code == filters.service_code)
        if not filters.include_inactive:
            stmt = stmt.where(ServiceRate.is_active.is_(True))

        stmt = stmt.order_by(ServiceRate.service_code, ServiceRate.valid_from)
        rows = (await self._session.scalars(stmt)).all()
        return [rate_from_row(row) for row in rows]

    async def get_rates_by_ids(
        self, rate_ids: set[uuid.UUID], ctx: RequestContext
    ) -> dict[uuid.UUID, RateBase]:
        """Load rates referenced by a tour or a B2B variation."""
        if not rate_ids:
            return {}

        stmt = select_rates(ctx).where(ServiceRate.id.in_(rate_ids))
        rows = (await self._session.scalars(stmt)).all()
        return {row.id: rate_from_row(row) for row in rows}

    async def create_rate(self, rate: RateBase, ctx: RequestContext) -> RateBase:
        """Add a rate, refusing windows that overlap an active rate in the same scope."""
        category = category_of(rate)
        tier = rate.tier.value if rate.tier is not None else None

        if rate.is_active:
            stmt = select_rates(ctx).where(
                ServiceRate.category == category.value,
                ServiceRate.service_code == rate.service_code,
                ServiceRate.city == rate.city,
                ServiceRate.is_active.is_(True),
                ServiceRate.tier.is_(None) if tier is None else ServiceRate.tier == tier,
            )
            existing = [rate_from_row(row) for row in (await self._session.scalars(stmt)).all()]
            clashes = [other for other in existing if windows_overlap(rate, other)]
            if clashes:
                raise OverlappingRatesError(
                    f"Rate window overlaps {len(clashes)} active rate(s) for "
                    f"'{rate.service_code}' in '{rate.city}'",
                    rate_ids=[str(other.id) for other in clashes],
                )

        row = ServiceRate(
            id=rate.id or uuid.uuid4(),
            org_id=ctx.org_id,
            category=category.value,
            service_code=rate.service_code,
            name=rate.name,
            city=rate.city,
            tier=tier,
            base_rate_eur=rate.base_rate_eur,
            base_rate_non_eur=rate.base_rate_non_eur,
            valid_from=rate.valid_from,
            valid_to=rate.valid_to,
            is_active=rate.is_active,
            details=rate_details(rate),
        )
        self._session.add(row)
        try:
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise ConflictError(f"Rate {row.id} already exists") from e

        return rate.model_copy(update={"id": row.id})

    async def deactivate_rate(
        self, category: RateCategory, rate_id: uuid.UUID, ctx: RequestContext
    ) -> bool:
        """Soft-delete a rate."""
        stmt = select_rates(ctx).where(
            ServiceRate.id == rate_id, ServiceRate.category == category.value
        )
        row = (await self._session.scalars(stmt)).first()
        if row is None:
            return False

        row.is_active = False
        await self._session.commit()
        return True


class SqlTourRepository:
    """SQL implementation of TourRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save_tour(
        self,
        tour: Tour,
        ctx: RequestContext,
        pricing: TourPricingBreakdown | None = None,
        pax: int | None = None,
        is_euro_passport: bool = True,
    ) -> uuid.UUID:
        """Persist a tour tree in one transaction.

        IDs are generated client-side so the whole tree is added at once and
        committed once. Saving an existing tour ID replaces it.
        """
        tour_id = tour.id or uuid.uuid4()
        row = TourRow(
            id=tour_id,
            org_id=ctx.org_id,
            created_by=ctx.user_id,
            tour_code=tour.tour_code or generate_tour_code(tour.tour_name, tour.duration_days),
            tour_name=tour.tour_name,
            duration_days=tour.duration_days,
            cities=list(tour.cities),
            tour_type=tour.tour_type.value,
            is_template=tour.is_template,
            description=tour.description,
            days=[self._day_row(day) for day in tour.days],
        )

        if pricing is not None:
            row.pricing_snapshots.append(
                self._pricing_row(pricing, pax or pricing.totals.pax, is_euro_passport)
            )

        try:
            if tour.id is not None:
                stmt = select_tours_with_days(ctx).where(TourRow.id == tour.id)
                existing = (await self._session.scalars(stmt)).first()
                if existing is not None:
                    await self._session.delete(existing)
                    await self._session.flush()

            self._session.add(row)
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            logger.warning(f"Tour save rolled back for org {ctx.org_id}: {e.orig}")
            raise ConflictError(
                f"Tour could not be saved: code '{row.tour_code}' or id {tour_id} already in use"
            ) from e
        except Exception:
            await self._session.rollback()
            raise

        logger.info(
            f"Saved tour {row.tour_code} with {len(tour.days)} days",
            extra={"structured": {"tour_id": str(tour_id), "org_id": str(ctx.org_id)}},
        )
        return tour_id

    def _day_row(self, day: TourDay) -> TourDayRow:
        return TourDayRow(
            id=uuid.uuid4(),
            day_number=day.day_number,
            city=day.city,
            accommodation_id=day.accommodation_id or _rate_id(day.accommodation),
            breakfast_included=day.breakfast_included,
            lunch_meal_id=day.lunch_meal_id or _rate_id(day.lunch_meal),
            dinner_meal_id=day.dinner_meal_id or _rate_id(day.dinner_meal),
            guide_required=day.guide_required,
            guide_id=day.guide_id or _rate_id(day.guide),
            notes=day.notes,
            activities=[
                TourDayActivityRow(
                    id=uuid.uuid4(),
                    activity_order=activity.activity_order,
                    entrance_id=activity.entrance_id or _rate_id(activity.entrance),
                    transportation_id=activity.transportation_id
                    or _rate_id(activity.transportation),
                    activity_notes=activity.activity_notes,
                )
                for activity in day.activities
            ],
            services=[
                TourDayServiceRow(
                    id=uuid.uuid4(),
                    service_id=selected.service_id or _rate_id(selected.service),
                    quantity=selected.quantity,
                )
                for selected in day.additional_services
                if (selected.service_id or _rate_id(selected.service)) is not None
            ],
        )

    def _pricing_row(
        self, pricing: TourPricingBreakdown, pax: int, is_euro_passport: bool
    ) -> TourPricingRow:
        totals = pricing.totals
        return TourPricingRow(
            id=uuid.uuid4(),
            pax=pax,
            is_euro_passport=is_euro_passport,
            total_accommodation=totals.total_accommodation,
            total_meals=totals.total_meals,
            total_guides=totals.total_guides,
            total_transportation=totals.total_transportation,
            total_entrances=totals.total_entrances,
            total_additional_services=totals.total_additional_services,
            grand_total=totals.grand_total,
            per_person_total=totals.per_person_total,
            breakdown=pricing.model_dump(mode="json"),
        )

    async def get_tour(self, tour_id: uuid.UUID, ctx: RequestContext) -> Tour | None:
        """Get a tour with its days by ID."""
        stmt = (
            select_tours_with_days(ctx)
            .where(TourRow.id == tour_id)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.scalars(stmt)).first()
        if row is None:
            return None

        return Tour(
            id=row.id,
            tour_code=row.tour_code,
            tour_name=row.tour_name,
            duration_days=row.duration_days,
            cities=list(row.cities),
            tour_type=row.tour_type,
            is_template=row.is_template,
            description=row.description,
            created_at=row.created_at,
            days=[
                TourDay(
                    id=day.id,
                    day_number=day.day_number,
                    city=day.city,
                    accommodation_id=day.accommodation_id,
                    breakfast_included=day.breakfast_included,
                    lunch_meal_id=day.lunch_meal_id,
                    dinner_meal_id=day.dinner_meal_id,
                    guide_required=day.guide_required,
                    guide_id=day.guide_id,
                    notes=day.notes,
                    activities=[
                        TourDayActivity(
                            id=activity.id,
                            activity_order=activity.activity_order,
                            entrance_id=activity.entrance_id,
                            transportation_id=activity.transportation_id,
                            activity_notes=activity.activity_notes,
                        )
                        for activity in day.activities
                    ],
                    additional_services=[
                        SelectedService(service_id=service.service_id, quantity=service.quantity)
                        for service in day.services
                    ],
                )
                for day in row.days
            ],
        )

    async def get_latest_pricing(
        self, tour_id: uuid.UUID, ctx: RequestContext
    ) -> TourPricing | None:
        """Get the most recent pricing snapshot stored with a tour."""
        stmt = (
            select(TourPricingRow)
            .join(TourRow, TourPricingRow.tour_id == TourRow.id)
            .where(TourRow.id == tour_id, TourRow.org_id == ctx.org_id)
            .order_by(TourPricingRow.calculated_at.desc())
        )
        snapshot = (await self._session.scalars(stmt)).first()
        if snapshot is None:
            return None

        return TourPricing(
            tour_id=tour_id,
            pax=snapshot.pax,
            is_euro_passport=snapshot.is_euro_passport,
            total_accommodation=snapshot.total_accommodation,
            total_meals=snapshot.total_meals,
            total_guides=snapshot.total_guides,
            total_transportation=snapshot.total_transportation,
            total_entrances=snapshot.total_entrances,
            total_additional_services=snapshot.total_additional_services,
            grand_total=snapshot.grand_total,
            per_person_total=snapshot.per_person_total,
        )

    async def list_tours(
        self, ctx: RequestContext, *, templates_only: bool = False, limit: int = 50
    ) -> list[TourSummary]:
        """List tours, newest first."""
        stmt = select_tours(ctx)
        if templates_only:
            stmt = stmt.where(TourRow.is_template.is_(True))
        stmt = stmt.order_by(TourRow.created_at.desc()).limit(limit)

        rows = (await self._session.scalars(stmt)).all()
        return [
            TourSummary(
                id=row.id,
                tour_code=row.tour_code,
                tour_name=row.tour_name,
                duration_days=row.duration_days,
                cities=list(row.cities),
                tour_type=row.tour_type,
                is_template=row.is_template,
                created_at=row.created_at,
            )
            for row in rows
        ]

    async def delete_tour(self, tour_id: uuid.UUID, ctx: RequestContext) -> bool:
        """Delete a tour and everything below it."""
        stmt = select_tours_with_days(ctx).where(TourRow.id == tour_id)
        row = (await self._session.scalars(stmt)).first()
        if row is None:
            return False

        await self._session.delete(row)
        await self._session.commit()
        return True


def _rate_id(rate: RateBase | None) -> uuid.UUID | None:
    return rate.id if rate is not None else None


class SqlB2BRepository:
    """SQL implementation of B2BRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def _partner_record(row: B2BPartnerRow) -> PartnerRecord:
        return PartnerRecord(
            partner=Partner(
                id=row.id,
                name=row.name,
                contact_email=row.contact_email,
                default_margin_percent=row.default_margin_percent,
                is_active=row.is_active,
            ),
            overrides=[
                PartnerOverride(
                    variation_code=override.variation_code,
                    margin_percent_override=override.margin_percent_override,
                    is_active=override.is_active,
                )
                for override in row.overrides
            ],
        )

    async def list_partners(self, ctx: RequestContext) -> list[PartnerRecord]:
        """List partners with their overrides."""
        stmt = select_partners(ctx).order_by(B2BPartnerRow.name)
        rows = (await self._session.scalars(stmt)).all()
        return [self._partner_record(row) for row in rows]

    async def get_partner(
        self, partner_id: uuid.UUID, ctx: RequestContext
    ) -> PartnerRecord | None:
        """Get a partner by ID."""
        stmt = select_partners(ctx).where(B2BPartnerRow.id == partner_id)
        row = (await self._session.scalars(stmt)).first()
        return self._partner_record(row) if row is not None else None

    async def create_partner(self, partner: Partner, ctx: RequestContext) -> Partner:
        """Create a partner."""
        row = B2BPartnerRow(
            id=partner.id or uuid.uuid4(),
            org_id=ctx.org_id,
            name=partner.name,
            contact_email=partner.contact_email,
            default_margin_percent=partner.default_margin_percent,
            is_active=partner.is_active,
        )
        self._session.add(row)
        await self._session.commit()
        return partner.model_copy(update={"id": row.id})

    async def set_overrides(
        self, partner_id: uuid.UUID, overrides: list[PartnerOverride], ctx: RequestContext
    ) -> PartnerRecord | None:
        """Replace a partner's variation overrides."""
        stmt = select_partners(ctx).where(B2BPartnerRow.id == partner_id)
        row = (await self._session.scalars(stmt)).first()
        if row is None:
            return None

        row.overrides.clear()
        await self._session.flush()
        row.overrides.extend(
            B2BPartnerPricingRow(
                id=uuid.uuid4(),
                variation_code=override.variation_code,
                margin_percent_override=override.margin_percent_override,
                is_active=override.is_active,
            )
            for override in overrides
        )
        try:
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise ConflictError("Duplicate variation code in partner overrides") from e

        return PartnerRecord(
            partner=self._partner_record(row).partner, overrides=list(overrides)
        )

    async def list_pricing_rules(self, ctx: RequestContext) -> list[PricingRule]:
        """List active pricing rules."""
        stmt = (
            select_pricing_rules(ctx)
            .where(B2BPricingRuleRow.is_active.is_(True))
            .order_by(B2BPricingRuleRow.service_name)
        )
        rows = (await self._session.scalars(stmt)).all()
        return [
            PricingRule(
                id=row.id,
                service_name=row.service_name,
                pricing_model=row.pricing_model,
                unit_type=row.unit_type,
                tiers=row.tiers,
                is_active=row.is_active,
            )
            for row in rows
        ]

    async def create_pricing_rule(self, rule: PricingRule, ctx: RequestContext) -> PricingRule:
        """Create a pricing rule."""
        data = rule.model_dump(mode="json")
        row = B2BPricingRuleRow(
            id=rule.id or uuid.uuid4(),
            org_id=ctx.org_id,
            service_name=rule.service_name,
            pricing_model=rule.pricing_model.value,
            unit_type=rule.unit_type,
            tiers=data["tiers"],
            is_active=rule.is_active,
        )
        self._session.add(row)
        await self._session.commit()
        return rule.model_copy(update={"id": row.id})

    async def list_transport_packages(self, ctx: RequestContext) -> list[TransportPackage]:
        """List active transport packages."""
        stmt = select_transport_packages(ctx).where(B2BTransportPackageRow.is_active.is_(True))
        rows = (await self._session.scalars(stmt)).all()
        return [
            TransportPackage(
                id=row.id,
                package_type=row.package_type,
                origin_city=row.origin_city,
                destination_city=row.destination_city,
                vehicles=row.vehicles,
                is_active=row.is_active,
            )
            for row in rows
        ]

    async def create_transport_package(
        self, package: TransportPackage, ctx: RequestContext
    ) -> TransportPackage:
        """Create a transport package."""
        data = package.model_dump(mode="json")
        row = B2BTransportPackageRow(
            id=package.id or uuid.uuid4(),
            org_id=ctx.org_id,
            package_type=package.package_type.value,
            origin_city=package.origin_city,
            destination_city=package.destination_city,
            vehicles=data["vehicles"],
            is_active=package.is_active,
        )
        self._session.add(row)
        await self._session.commit()
        return package.model_copy(update={"id": row.id})

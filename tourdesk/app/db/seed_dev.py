"""Dev seeding: a small Cairo / Luxor catalogue for the stub-auth dev org."""

import asyncio
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.app.api.auth import DEV_ORG_ID, DEV_USER_ID
from tourdesk.app.db.context import RequestContext
from tourdesk.app.db.engine import get_async_engine
from tourdesk.app.db.models import ServiceRate
from tourdesk.app.db.sql_repositories import SqlB2BRepository, SqlRateRepository
from tourdesk.app.models.b2b import (
    PackageType,
    PackageVehicle,
    PricingModel,
    PricingRule,
    PricingTier,
    TransportPackage,
)
from tourdesk.app.models.common import BoardBasis, MealType, RateType, Tier
from tourdesk.app.models.rates import (
    AccommodationRate,
    EntranceFee,
    GuideRate,
    MealRate,
    RateBase,
    ServiceFee,
    TransportationRate,
)

SEASON_START = date(2026, 1, 1)
SEASON_END = date(2026, 12, 31)


def dev_catalogue() -> list[RateBase]:
    """Rates seeded for local development."""
    window = {"valid_from": SEASON_START, "valid_to": SEASON_END}
    return [
        AccommodationRate(
            service_code="HTL-CAI-NILE",
            name="Nile View Hotel - Double",
            city="Cairo",
            tier=Tier.standard,
            base_rate_eur=Decimal("95"),
            base_rate_non_eur=Decimal("110"),
            property_type="hotel",
            star_rating=4,
            room_type="double",
            board_basis=BoardBasis.BB,
            **window,
        ),
        AccommodationRate(
            service_code="HTL-LXR-WINTER",
            name="Winter Palace - Double",
            city="Luxor",
            tier=Tier.luxury,
            base_rate_eur=Decimal("180"),
            base_rate_non_eur=Decimal("210"),
            property_type="hotel",
            star_rating=5,
            room_type="double",
            board_basis=BoardBasis.HB,
            **window,
        ),
        MealRate(
            service_code="MEAL-CAI-LUNCH",
            name="Khan el-Khalili lunch",
            city="Cairo",
            base_rate_eur=Decimal("18"),
            base_rate_non_eur=Decimal("22"),
            meal_type=MealType.lunch,
            cuisine_type="Egyptian",
            **window,
        ),
        MealRate(
            service_code="MEAL-CAI-DINNER",
            name="Nile dinner cruise",
            city="Cairo",
            base_rate_eur=Decimal("35"),
            base_rate_non_eur=Decimal("40"),
            meal_type=MealType.dinner,
            cuisine_type="International",
            **window,
        ),
        GuideRate(
            service_code="GUIDE-CAI-EN",
            name="Private Egyptologist (English)",
            city="Cairo",
            base_rate_eur=Decimal("60"),
            base_rate_non_eur=Decimal("75"),
            guide_language="English",
            rate_type=RateType.per_group,
            **window,
        ),
        EntranceFee(
            service_code="ENT-GIZA",
            name="Giza Pyramids plateau",
            city="Cairo",
            base_rate_eur=Decimal("25"),
            base_rate_non_eur=Decimal("30"),
            fee_type="site",
            child_discount_percent=Decimal("50"),
            **window,
        ),
        EntranceFee(
            service_code="ENT-KARNAK",
            name="Karnak Temple",
            city="Luxor",
            base_rate_eur=Decimal("20"),
            base_rate_non_eur=Decimal("24"),
            fee_type="site",
            **window,
        ),
        TransportationRate(
            service_code="TRN-CAI-SEDAN",
            name="Cairo full day - sedan",
            city="Cairo",
            base_rate_eur=Decimal("45"),
            base_rate_non_eur=Decimal("55"),
            vehicle_type="Sedan",
            service_type="full_day",
            capacity_min=1,
            capacity_max=2,
            **window,
        ),
        TransportationRate(
            service_code="TRN-CAI-MINIVAN",
            name="Cairo full day - minivan",
            city="Cairo",
            base_rate_eur=Decimal("70"),
            base_rate_non_eur=Decimal("85"),
            vehicle_type="Minivan",
            service_type="full_day",
            capacity_min=3,
            capacity_max=8,
            **window,
        ),
        ServiceFee(
            service_code="SVC-TIPS",
            name="Tipping package",
            city="Cairo",
            base_rate_eur=Decimal("10"),
            base_rate_non_eur=Decimal("10"),
            service_category="tips",
            rate_type=RateType.per_person,
            **window,
        ),
    ]


async def seed_dev_catalogue() -> None:
    """Seed the dev org's catalogue and B2B data.

    Idempotent - skipped when the dev org already has rates.
    """
    ctx = RequestContext(org_id=DEV_ORG_ID, user_id=DEV_USER_ID)

    async with AsyncSession(get_async_engine(), expire_on_commit=False) as session:
        existing = await session.execute(
            select(ServiceRate.id).where(ServiceRate.org_id == DEV_ORG_ID).limit(1)
        )
        if existing.first() is not None:
            print("Dev catalogue already seeded")
            return

        rates = SqlRateRepository(session)
        for rate in dev_catalogue():
            await rates.create_rate(rate.model_copy(update={"id": uuid.uuid4()}), ctx)

        b2b = SqlB2BRepository(session)
        await b2b.create_pricing_rule(
            PricingRule(
                service_name="Felucca ride",
                pricing_model=PricingModel.per_unit,
                unit_type="boat",
                tiers=[PricingTier(max_pax=8, rate_eur=Decimal("40"), label="boat")],
            ),
            ctx,
        )
        await b2b.create_transport_package(
            TransportPackage(
                package_type=PackageType.cruise_transfer,
                origin_city="Luxor",
                destination_city="Aswan",
                vehicles=[
                    PackageVehicle(vehicle="Minivan", capacity=7, rate_eur=Decimal("120")),
                    PackageVehicle(vehicle="Coaster", capacity=20, rate_eur=Decimal("190")),
                ],
            ),
            ctx,
        )

        print("Dev seeding complete")


if __name__ == "__main__":
    asyncio.run(seed_dev_catalogue())

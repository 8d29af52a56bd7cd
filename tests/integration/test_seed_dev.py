"""Integration tests for dev seeding helper."""

import uuid
from unittest.mock import patch

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from tourdesk.app.api.auth import DEV_ORG_ID, DEV_USER_ID
from tourdesk.app.db.context import RequestContext
from tourdesk.app.db.seed_dev import dev_catalogue, seed_dev_catalogue
from tourdesk.app.db.sql_repositories import SqlB2BRepository, SqlRateRepository
from tourdesk.app.models.common import RateCategory
from tourdesk.app.pricing.rates import find_overlapping_rates

pytestmark = pytest.mark.integration


def test_dev_ids_match_stub_auth() -> None:
    """Seeded data belongs to the identity used when no token is sent."""
    assert DEV_ORG_ID == uuid.UUID("00000000-0000-0000-0000-000000000001")
    assert DEV_USER_ID == uuid.UUID("00000000-0000-0000-0000-000000000002")


def test_dev_catalogue_has_no_overlaps() -> None:
    assert find_overlapping_rates(dev_catalogue()) == []


@pytest.mark.asyncio
async def test_seed_is_idempotent(test_engine: AsyncEngine) -> None:
    with patch("tourdesk.app.db.seed_dev.get_async_engine", return_value=test_engine):
        await seed_dev_catalogue()
        await seed_dev_catalogue()

    ctx = RequestContext(org_id=DEV_ORG_ID, user_id=DEV_USER_ID)
    async with AsyncSession(test_engine, expire_on_commit=False) as session:
        rates = SqlRateRepository(session)
        hotels = await rates.list_rates(RateCategory.accommodation, ctx)
        vehicles = await rates.list_rates(RateCategory.transportation, ctx)
        b2b = SqlB2BRepository(session)
        rules = await b2b.list_pricing_rules(ctx)
        packages = await b2b.list_transport_packages(ctx)

    assert {hotel.city for hotel in hotels} == {"Cairo", "Luxor"}
    assert len(vehicles) == 2
    assert [rule.service_name for rule in rules] == ["Felucca ride"]
    assert len(packages) == 1

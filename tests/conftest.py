"""Shared pytest fixtures for all test suites."""

import uuid
from collections.abc import AsyncGenerator
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from tourdesk.app.db.context import RequestContext
from tourdesk.app.db.engine import get_session
from tourdesk.app.db.models import Base
from tourdesk.app.main import app
from tourdesk.app.models.common import BoardBasis, MealType, RateType
from tourdesk.app.models.rates import (
    AccommodationRate,
    EntranceFee,
    GuideRate,
    MealRate,
    ServiceFee,
    TransportationRate,
)
from tourdesk.app.ratelimit import get_rate_limiters


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine shared across connections."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Session bound to the in-memory engine."""
    async with AsyncSession(test_engine, expire_on_commit=False) as session:
        yield session


@pytest_asyncio.fixture
async def client(test_engine: AsyncEngine) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client against the app with the database swapped for SQLite."""

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with AsyncSession(test_engine, expire_on_commit=False) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    get_rate_limiters.cache_clear()

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    get_rate_limiters.cache_clear()


@pytest.fixture
def ctx() -> RequestContext:
    """Random org/user context."""
    return RequestContext(org_id=uuid.uuid4(), user_id=uuid.uuid4())


@pytest.fixture
def hotel() -> AccommodationRate:
    return AccommodationRate(
        id=uuid.uuid4(),
        service_code="HTL-CAI",
        name="Nile View Hotel",
        city="Cairo",
        base_rate_eur=Decimal("100"),
        base_rate_non_eur=Decimal("120"),
        board_basis=BoardBasis.BB,
    )


@pytest.fixture
def lunch() -> MealRate:
    return MealRate(
        id=uuid.uuid4(),
        service_code="MEAL-LUNCH",
        city="Cairo",
        base_rate_eur=Decimal("15"),
        base_rate_non_eur=Decimal("18"),
        meal_type=MealType.lunch,
    )


@pytest.fixture
def dinner() -> MealRate:
    return MealRate(
        id=uuid.uuid4(),
        service_code="MEAL-DINNER",
        city="Cairo",
        base_rate_eur=Decimal("30"),
        base_rate_non_eur=Decimal("36"),
        meal_type=MealType.dinner,
    )


@pytest.fixture
def guide() -> GuideRate:
    return GuideRate(
        id=uuid.uuid4(),
        service_code="GUIDE-EN",
        city="Cairo",
        base_rate_eur=Decimal("60"),
        base_rate_non_eur=Decimal("70"),
        rate_type=RateType.per_group,
    )


@pytest.fixture
def entrance() -> EntranceFee:
    return EntranceFee(
        id=uuid.uuid4(),
        service_code="ENT-GIZA",
        city="Cairo",
        base_rate_eur=Decimal("20"),
        base_rate_non_eur=Decimal("25"),
    )


@pytest.fixture
def vehicle() -> TransportationRate:
    return TransportationRate(
        id=uuid.uuid4(),
        service_code="TRN-MINIVAN",
        city="Cairo",
        base_rate_eur=Decimal("80"),
        base_rate_non_eur=Decimal("90"),
        vehicle_type="Minivan",
        capacity_min=3,
        capacity_max=8,
    )


@pytest.fixture
def tips() -> ServiceFee:
    return ServiceFee(
        id=uuid.uuid4(),
        service_code="SVC-TIPS",
        city="Cairo",
        base_rate_eur=Decimal("5"),
        base_rate_non_eur=Decimal("6"),
        rate_type=RateType.per_person,
    )

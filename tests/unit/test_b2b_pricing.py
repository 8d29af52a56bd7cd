"""Unit tests for B2B partner pricing."""

import uuid
from datetime import date
from decimal import Decimal

import pytest

from tourdesk.app.errors import PricingError
from tourdesk.app.models.b2b import (
    PackageType,
    PackageVehicle,
    Partner,
    PartnerOverride,
    PricingModel,
    PricingRule,
    PricingTier,
    TransportPackage,
    VariationService,
)
from tourdesk.app.models.common import QuantityMode, RateCategory, Season
from tourdesk.app.models.rates import EntranceFee
from tourdesk.app.pricing.b2b import (
    apply_pricing_rule,
    calculate_b2b_price,
    get_season,
    line_quantity,
    match_pricing_rule,
    resolve_effective_margin,
)

TRAVEL_DATE = date(2026, 11, 10)


@pytest.fixture
def felucca_rule() -> PricingRule:
    return PricingRule(
        service_name="Felucca ride",
        pricing_model=PricingModel.per_unit,
        unit_type="boat",
        tiers=[
            PricingTier(max_pax=4, rate_eur=Decimal("30"), label="small boat"),
            PricingTier(max_pax=8, rate_eur=Decimal("50"), label="large boat"),
        ],
    )


@pytest.fixture
def transfer_package() -> TransportPackage:
    return TransportPackage(
        package_type=PackageType.cruise_transfer,
        origin_city="Luxor",
        destination_city="Aswan",
        vehicles=[
            PackageVehicle(vehicle="Minivan", capacity=7, rate_eur=Decimal("120")),
            PackageVehicle(vehicle="Coaster", capacity=20, rate_eur=Decimal("190")),
        ],
    )


@pytest.mark.parametrize(
    ("month", "season"),
    [(1, Season.high), (4, Season.high), (5, Season.low), (7, Season.peak), (12, Season.high)],
)
def test_get_season(month: int, season: Season) -> None:
    assert get_season(date(2026, month, 15)) == season


def test_match_pricing_rule_on_first_word(felucca_rule: PricingRule) -> None:
    assert match_pricing_rule("Felucca sunset sail", [felucca_rule]) is felucca_rule
    assert match_pricing_rule("Sound and light show", [felucca_rule]) is None
    assert match_pricing_rule("", [felucca_rule]) is None


def test_per_unit_rule_picks_fitting_boat(felucca_rule: PricingRule) -> None:
    small = apply_pricing_rule(felucca_rule, 3)
    large = apply_pricing_rule(felucca_rule, 6)

    assert small.line_total == Decimal("30")
    assert large.line_total == Decimal("50")
    assert large.quantity_mode == QuantityMode.fixed


def test_per_unit_rule_books_several_units(felucca_rule: PricingRule) -> None:
    priced = apply_pricing_rule(felucca_rule, 20)

    # ceil(20 / 8) = 3 large boats
    assert priced.line_total == Decimal("150")


def test_tiered_rule_is_per_person() -> None:
    rule = PricingRule(
        service_name="Sound and light show",
        pricing_model=PricingModel.tiered,
        tiers=[
            PricingTier(max_pax=5, rate_eur=Decimal("20")),
            PricingTier(max_pax=None, rate_eur=Decimal("15")),
        ],
    )

    assert apply_pricing_rule(rule, 4).line_total == Decimal("80")
    assert apply_pricing_rule(rule, 10).line_total == Decimal("150")


@pytest.mark.parametrize(
    ("mode", "value", "expected"),
    [
        (QuantityMode.per_pax, 1, 4),
        (QuantityMode.per_day, 2, 10),
        (QuantityMode.per_night, 1, 4),
        (QuantityMode.per_group, 1, 1),
        (QuantityMode.fixed, 3, 3),
    ],
)
def test_line_quantity(mode: QuantityMode, value: int, expected: int) -> None:
    assert line_quantity(mode, value, num_pax=4, duration_days=5) == expected


def test_effective_margin_precedence() -> None:
    partner = Partner(name="Nile Travel", default_margin_percent=Decimal("18"))
    overrides = [PartnerOverride(variation_code="EGY-8D-STD", margin_percent_override=Decimal("12"))]

    assert resolve_effective_margin(Decimal("25"), None) == Decimal("25")
    assert resolve_effective_margin(Decimal("25"), partner) == Decimal("18")
    assert (
        resolve_effective_margin(Decimal("25"), partner, overrides, "EGY-8D-STD")
        == Decimal("12")
    )
    assert (
        resolve_effective_margin(Decimal("25"), partner, overrides, "OTHER") == Decimal("18")
    )


def test_calculate_b2b_price_uses_each_source(
    felucca_rule: PricingRule, transfer_package: TransportPackage
) -> None:
    entrance = EntranceFee(
        id=uuid.uuid4(), base_rate_eur=Decimal("20"), base_rate_non_eur=Decimal("25")
    )
    services = [
        VariationService(
            id="felucca",
            service_name="Felucca sunset sail",
            service_category="activity",
        ),
        VariationService(
            id="transfer",
            service_name="Luxor to Aswan transfer",
            service_category="transportation",
            origin_city="Luxor",
            destination_city="Aswan",
        ),
        VariationService(
            id="karnak",
            service_name="Karnak entrance",
            service_category="entrance",
            rate_id=entrance.id,
        ),
        VariationService(
            id="water",
            service_name="Bottled water",
            service_category="extra",
            quantity_mode=QuantityMode.per_day,
            cost_per_unit=Decimal("2"),
        ),
        VariationService(
            id="balloon",
            service_name="Hot air balloon",
            service_category="extra",
            cost_per_unit=Decimal("100"),
            is_optional=True,
        ),
    ]

    result = calculate_b2b_price(
        services,
        num_pax=4,
        duration_days=3,
        travel_date=TRAVEL_DATE,
        is_eur_passport=False,
        margin_percent=Decimal("20"),
        variation_code="EGY-3D",
        rules=[felucca_rule],
        packages=[transfer_package],
        rates={entrance.id: entrance},
    )

    sources = {line.service_id: line.rate_source for line in result.services}
    assert sources == {
        "felucca": "b2b_rule",
        "transfer": "b2b_package",
        "karnak": "catalogue",
        "water": "stored",
    }
    totals = {line.service_id: line.line_total for line in result.services}
    assert totals["felucca"] == Decimal("30.00")
    assert totals["transfer"] == Decimal("120.00")
    assert totals["karnak"] == Decimal("100.00")  # 4 x 25 non-EUR
    assert totals["water"] == Decimal("6.00")  # 3 days x 2

    assert result.subtotal_cost == Decimal("256.00")
    assert result.optional_total == Decimal("0.00")
    assert result.total_cost == Decimal("256.00")
    assert result.selling_price == Decimal("307.20")
    assert result.price_per_person == Decimal("76.80")
    assert result.season == Season.low


def test_optionals_included_on_request() -> None:
    services = [
        VariationService(service_name="Dinner", cost_per_unit=Decimal("10")),
        VariationService(service_name="Balloon", cost_per_unit=Decimal("100"), is_optional=True),
    ]

    result = calculate_b2b_price(
        services,
        num_pax=2,
        duration_days=1,
        travel_date=TRAVEL_DATE,
        is_eur_passport=True,
        margin_percent=Decimal("0"),
        include_optionals=True,
    )

    assert result.total_cost == Decimal("220.00")
    assert result.optional_total == Decimal("200.00")
    assert [line.service_name for line in result.optional_services] == ["Balloon"]


def test_missing_catalogue_rate_falls_back_to_stored_cost() -> None:
    services = [
        VariationService(
            service_name="Museum", rate_id=uuid.uuid4(), cost_per_unit=Decimal("12")
        )
    ]

    result = calculate_b2b_price(
        services,
        num_pax=1,
        duration_days=1,
        travel_date=TRAVEL_DATE,
        is_eur_passport=True,
        margin_percent=Decimal("0"),
    )

    assert result.services[0].rate_source == "stored"
    assert result.total_cost == Decimal("12.00")


def test_rate_type_must_match_catalogue_category() -> None:
    entrance = EntranceFee(
        id=uuid.uuid4(), base_rate_eur=Decimal("20"), base_rate_non_eur=Decimal("25")
    )
    services = [
        VariationService(
            id="matching",
            service_name="Karnak entrance",
            rate_type=RateCategory.entrance,
            rate_id=entrance.id,
        ),
        VariationService(
            id="mismatched",
            service_name="Karnak guide",
            rate_type=RateCategory.guide,
            rate_id=entrance.id,
            cost_per_unit=Decimal("7"),
        ),
    ]

    result = calculate_b2b_price(
        services,
        num_pax=1,
        duration_days=1,
        travel_date=TRAVEL_DATE,
        is_eur_passport=True,
        margin_percent=Decimal("0"),
        rates={entrance.id: entrance},
    )

    lines = {line.service_id: line for line in result.services}
    assert lines["matching"].rate_source == "catalogue"
    assert lines["matching"].line_total == Decimal("20.00")
    assert lines["mismatched"].rate_source == "stored"
    assert lines["mismatched"].line_total == Decimal("7.00")


def test_b2b_rejects_zero_pax() -> None:
    with pytest.raises(PricingError):
        calculate_b2b_price(
            [],
            num_pax=0,
            duration_days=1,
            travel_date=TRAVEL_DATE,
            is_eur_passport=True,
            margin_percent=Decimal("10"),
        )

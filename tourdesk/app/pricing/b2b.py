"""B2B partner pricing.

Prices the service lines of a tour variation for a reseller. Each line is
priced from the first source that applies:

1. a group-size pricing rule (boats, shows...)
2. a transport package (cruise sightseeing / transfers)
3. the rate catalogue entry referenced by ``rate_id``
4. the cost stored on the line itself
"""

import logging
import math
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from tourdesk.app.errors import PricingError
from tourdesk.app.models.b2b import (
    B2BPriceResult,
    CalculatedService,
    PackageType,
    PackageVehicle,
    Partner,
    PartnerOverride,
    PricingModel,
    PricingRule,
    TransportPackage,
    VariationService,
)
from tourdesk.app.models.common import QuantityMode, RateCategory, Season
from tourdesk.app.models.rates import RateBase
from tourdesk.app.pricing.quote import apply_margin, round_money
from tourdesk.app.pricing.rates import select_rate_column

logger = logging.getLogger(__name__)


@dataclass
class RulePrice:
    """Result of applying a pricing rule to a group."""

    unit_cost: Decimal
    line_total: Decimal
    quantity_mode: QuantityMode
    note: str


def get_season(travel_date: date) -> Season:
    """Season of a travel date: Dec-Apr high, Jul-Aug peak, otherwise low."""
    if travel_date.month in (12, 1, 2, 3, 4):
        return Season.high
    if travel_date.month in (7, 8):
        return Season.peak
    return Season.low


def match_pricing_rule(service_name: str, rules: Sequence[PricingRule]) -> PricingRule | None:
    """Find the active rule whose service name contains the line's first word."""
    words = service_name.split()
    if not words:
        return None

    needle = words[0].casefold()
    for rule in rules:
        if rule.is_active and needle in rule.service_name.casefold():
            return rule
    return None


def apply_pricing_rule(rule: PricingRule, num_pax: int) -> RulePrice:
    """Price a group with a rule.

    per_unit: flat price of the first tier that fits the group, or several
    units of the largest tier. tiered: per-person rate of the first tier that
    fits (last tier beyond). per_person: first tier rate for everybody.
    """
    tiers = rule.tiers

    if rule.pricing_model == PricingModel.per_unit:
        for tier in tiers:
            if tier.max_pax is None or num_pax <= tier.max_pax:
                label = tier.label or rule.unit_type
                return RulePrice(
                    unit_cost=tier.rate_eur,
                    line_total=tier.rate_eur,
                    quantity_mode=QuantityMode.fixed,
                    note=f"{label}: €{tier.rate_eur} flat",
                )

        # Group exceeds every tier: book several of the largest unit
        largest = tiers[-1]
        capacity = largest.max_pax or num_pax
        units = math.ceil(num_pax / capacity)
        total = largest.rate_eur * units
        return RulePrice(
            unit_cost=total,
            line_total=total,
            quantity_mode=QuantityMode.fixed,
            note=f"{units}x {largest.label or rule.unit_type} @ €{largest.rate_eur} = €{total}",
        )

    if rule.pricing_model == PricingModel.tiered:
        chosen = tiers[-1]
        for tier in tiers:
            if tier.max_pax is None or num_pax <= tier.max_pax:
                chosen = tier
                break
        total = chosen.rate_eur * num_pax
        label = chosen.label or (f"up to {chosen.max_pax}" if chosen.max_pax else "open")
        return RulePrice(
            unit_cost=chosen.rate_eur,
            line_total=total,
            quantity_mode=QuantityMode.per_pax,
            note=f"{label}: €{chosen.rate_eur}/pax × {num_pax} = €{total}",
        )

    rate = tiers[0].rate_eur
    return RulePrice(
        unit_cost=rate,
        line_total=rate * num_pax,
        quantity_mode=QuantityMode.per_pax,
        note="Per person",
    )


def select_vehicle_from_package(package: TransportPackage, num_pax: int) -> PackageVehicle:
    """First priced vehicle that fits the group, else the last (largest) one."""
    for vehicle in package.vehicles:
        if num_pax <= vehicle.capacity and vehicle.rate_eur:
            return vehicle
    return package.vehicles[-1]


def package_type_for(service: VariationService) -> PackageType | None:
    """Map a transportation line to a transport package family by its name."""
    if service.service_category != RateCategory.transportation.value:
        return None

    name = service.service_name.casefold()
    if "sightseeing" in name:
        return PackageType.cruise_sightseeing
    if "transfer" in name or "airport" in name:
        return PackageType.cruise_transfer
    return None


def find_transport_package(
    packages: Sequence[TransportPackage],
    package_type: PackageType,
    origin_city: str | None,
    destination_city: str | None,
) -> TransportPackage | None:
    """Active package of a type between two cities."""
    for package in packages:
        if (
            package.is_active
            and package.package_type == package_type
            and package.origin_city == origin_city
            and package.destination_city == destination_city
        ):
            return package
    return None


def resolve_effective_margin(
    requested_margin: Decimal,
    partner: Partner | None,
    overrides: Sequence[PartnerOverride] = (),
    variation_code: str | None = None,
) -> Decimal:
    """Margin to apply: request < partner default < partner override per variation."""
    margin = requested_margin

    if partner is not None and partner.default_margin_percent:
        margin = partner.default_margin_percent

    if variation_code:
        for override in overrides:
            if override.is_active and override.variation_code == variation_code:
                margin = override.margin_percent_override
                break

    return margin


def line_quantity(
    quantity_mode: QuantityMode, quantity_value: int, num_pax: int, duration_days: int
) -> int:
    """Units billed for a service line."""
    if quantity_mode == QuantityMode.per_pax:
        return quantity_value * num_pax
    if quantity_mode == QuantityMode.per_day:
        return quantity_value * duration_days
    if quantity_mode == QuantityMode.per_night:
        return quantity_value * max(duration_days - 1, 0)
    # per_group and fixed
    return quantity_value


def price_service(
    service: VariationService,
    *,
    num_pax: int,
    duration_days: int,
    is_eur_passport: bool,
    rules: Sequence[PricingRule],
    packages: Sequence[TransportPackage],
    rates: Mapping[uuid.UUID, RateBase],
) -> CalculatedService:
    """Price a single variation service line."""
    unit_cost = Decimal("0")
    line_total: Decimal | None = None
    rate_source = "manual"
    note: str | None = None
    quantity_mode = service.quantity_mode

    # Step 1: group-size pricing rule
    if service.service_category == "activity":
        rule = match_pricing_rule(service.service_name, rules)
        if rule is not None:
            priced = apply_pricing_rule(rule, num_pax)
            unit_cost, line_total = priced.unit_cost, priced.line_total
            quantity_mode, note = priced.quantity_mode, priced.note
            rate_source = "b2b_rule"
            logger.info(f"B2B rule applied: {service.service_name} -> {note}")

    # Step 2: transport package
    if rate_source == "manual":
        package_type = package_type_for(service)
        if package_type is not None:
            package = find_transport_package(
                packages, package_type, service.origin_city, service.destination_city
            )
            if package is not None:
                vehicle = select_vehicle_from_package(package, num_pax)
                unit_cost = vehicle.rate_eur or Decimal("0")
                line_total = unit_cost
                quantity_mode = QuantityMode.fixed
                note = f"{vehicle.vehicle}: €{unit_cost} ({num_pax} pax)"
                rate_source = "b2b_package"

    # Step 3: catalogue rate, from the table named by rate_type when given
    if rate_source == "manual" and service.rate_id is not None:
        rate = rates.get(service.rate_id)
        category = getattr(rate, "category", None)
        if rate is not None and service.rate_type is not None and category != service.rate_type:
            logger.warning(
                f"Rate {service.rate_id} for '{service.service_name}' is a {category} "
                f"rate, not {service.rate_type.value}"
            )
        elif rate is not None:
            unit_cost = select_rate_column(rate, is_eur_passport)
            rate_source = "catalogue"
        else:
            logger.warning(f"Rate {service.rate_id} for '{service.service_name}' not found")

    # Step 4: stored cost on the line
    if rate_source == "manual" and service.cost_per_unit is not None:
        unit_cost = service.cost_per_unit
        rate_source = "stored"

    quantity = line_quantity(quantity_mode, service.quantity_value, num_pax, duration_days)
    if line_total is None:
        line_total = unit_cost * quantity

    return CalculatedService(
        service_id=service.id,
        service_name=service.service_name,
        service_category=service.service_category,
        rate_source=rate_source,
        quantity_mode=quantity_mode,
        quantity=quantity,
        unit_cost=round_money(unit_cost),
        line_total=round_money(line_total),
        is_optional=service.is_optional,
        day_number=service.day_number,
        pricing_note=note,
    )


def calculate_b2b_price(
    services: Sequence[VariationService],
    *,
    num_pax: int,
    duration_days: int,
    travel_date: date,
    is_eur_passport: bool,
    margin_percent: Decimal,
    include_optionals: bool = False,
    variation_code: str | None = None,
    rules: Sequence[PricingRule] = (),
    packages: Sequence[TransportPackage] = (),
    rates: Mapping[uuid.UUID, RateBase] | None = None,
    currency: str = "EUR",
) -> B2BPriceResult:
    """Price a tour variation for a partner.

    Args:
        services: Variation service lines
        num_pax: Group size (> 0)
        duration_days: Tour duration, used by per_day/per_night lines
        travel_date: Travel date (drives the season label)
        is_eur_passport: Passport column for catalogue rates
        margin_percent: Effective margin (see resolve_effective_margin)
        include_optionals: Add optional lines to optional_total and the total;
            optional lines are listed either way
        variation_code: Variation being priced
        rules: Active B2B pricing rules
        packages: Active transport packages
        rates: Catalogue rates referenced by rate_id, keyed by id
        currency: Currency label

    Returns:
        Partner quote with line detail, cost total, margin and selling price

    Raises:
        PricingError: If num_pax is not positive
    """
    if num_pax <= 0:
        raise PricingError("Number of passengers must be greater than 0")

    included: list[CalculatedService] = []
    optional: list[CalculatedService] = []
    subtotal = Decimal("0")
    optional_total = Decimal("0")

    for service in services:
        line = price_service(
            service,
            num_pax=num_pax,
            duration_days=duration_days,
            is_eur_passport=is_eur_passport,
            rules=rules,
            packages=packages,
            rates=rates or {},
        )
        if service.is_optional:
            optional.append(line)
            if include_optionals:
                optional_total += line.line_total
        else:
            included.append(line)
            subtotal += line.line_total

    total_cost = subtotal + optional_total
    quote = apply_margin(total_cost, margin_percent, num_pax, currency)

    return B2BPriceResult(
        variation_code=variation_code,
        num_pax=num_pax,
        travel_date=travel_date,
        season=get_season(travel_date),
        is_eur_passport=is_eur_passport,
        services=included,
        optional_services=optional,
        subtotal_cost=round_money(subtotal),
        optional_total=round_money(optional_total),
        total_cost=quote.cost_price,
        margin_percent=margin_percent,
        margin_amount=quote.margin_amount,
        selling_price=quote.selling_price,
        price_per_person=quote.price_per_person,
        currency=currency,
    )

"""Money helpers and margin-based quoting."""

from decimal import ROUND_HALF_UP, Decimal

from tourdesk.app.errors import PricingError
from tourdesk.app.models.pricing import Quote

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def round_money(amount: Decimal) -> Decimal:
    """Round to cents, half-up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def apply_margin(
    cost_total: Decimal, margin_percent: Decimal, pax: int, currency: str = "EUR"
) -> Quote:
    """Turn a cost total into a sell price.

    Args:
        cost_total: Aggregated cost price for the whole group
        margin_percent: Markup on cost, e.g. 25 for +25%
        pax: Number of travellers (> 0)
        currency: Currency label carried through to the quote

    Returns:
        Quote with margin amount, selling price and per-person price

    Raises:
        PricingError: If pax is not positive or the margin is negative
    """
    if pax <= 0:
        raise PricingError("Number of passengers must be greater than 0")
    if margin_percent < 0:
        raise PricingError("Margin percent cannot be negative")

    margin_amount = cost_total * margin_percent / HUNDRED
    selling_price = cost_total + margin_amount

    return Quote(
        cost_price=round_money(cost_total),
        margin_percent=margin_percent,
        margin_amount=round_money(margin_amount),
        selling_price=round_money(selling_price),
        price_per_person=round_money(selling_price / pax),
        currency=currency,
    )


def calculate_percentage(part: Decimal, total: Decimal) -> Decimal:
    """Share of part in total, in percent (0 when total is 0)."""
    if total == 0:
        return Decimal("0")
    return part / total * HUNDRED


def format_currency(amount: Decimal, symbol: str = "€") -> str:
    """Format an amount for quotes and vouchers, e.g. '€1,250.00'."""
    return f"{symbol}{round_money(amount):,.2f}"

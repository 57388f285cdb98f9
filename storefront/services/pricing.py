"""Cart and order totals.

Product prices are tax inclusive: the tax figure is reported for display
and invoices but never added on top of the subtotal. Shipping is a flat
fee waived once the subtotal reaches the free-shipping threshold.

All amounts are integer cents.
"""

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Protocol


class PricedLine(Protocol):
    """Anything with a unit price and a quantity (cart or order lines)."""

    price: int
    quantity: int


class PricingSettings(Protocol):
    tax_percent: int
    shipping_fee: int
    free_shipping_threshold: int


@dataclass(frozen=True)
class CartTotals:
    """Computed totals for a set of line items.

    Attributes:
        subtotal: Sum of price * quantity
        tax_amount: Tax contained in the subtotal (informational)
        shipping: Shipping fee charged, 0 when free
        total: Amount to charge (subtotal + shipping)
        is_free_shipping: Whether the threshold waived shipping
    """

    subtotal: int
    tax_amount: int
    shipping: int
    total: int
    is_free_shipping: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def round_cents(value: Decimal) -> int:
    """Round a fractional cent amount half away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_tax_amount(subtotal: int, tax_percent: int) -> int:
    return round_cents(Decimal(subtotal) * Decimal(tax_percent) / Decimal(100))


def calculate_cart_totals(
    items: Iterable[tuple[int, int]],
    config: PricingSettings,
) -> CartTotals:
    """Compute totals for ``(unit_price, quantity)`` pairs.

    Args:
        items: Unit price in cents and quantity per line
        config: Tax and shipping settings

    Returns:
        CartTotals for the lines
    """
    subtotal = sum(price * quantity for price, quantity in items)
    tax_amount = calculate_tax_amount(subtotal, config.tax_percent)

    is_free_shipping = subtotal >= config.free_shipping_threshold
    shipping = 0 if is_free_shipping else config.shipping_fee

    return CartTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        shipping=shipping,
        total=subtotal + shipping,
        is_free_shipping=is_free_shipping,
    )


def totals_for_lines(lines: Iterable[PricedLine], config: PricingSettings) -> CartTotals:
    """Compute totals for order items, which carry their own price snapshot."""
    return calculate_cart_totals(((line.price, line.quantity) for line in lines), config)

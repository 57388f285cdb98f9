"""Unit tests for cart and order totals."""

from dataclasses import dataclass
from decimal import Decimal

from hypothesis import given, strategies as st

from storefront.services.pricing import (
    calculate_cart_totals,
    calculate_tax_amount,
    round_cents,
    totals_for_lines,
)


@dataclass
class Settings:
    tax_percent: int = 18
    shipping_fee: int = 500
    free_shipping_threshold: int = 10000


@dataclass
class Line:
    price: int
    quantity: int


lines = st.lists(
    st.tuples(st.integers(min_value=1, max_value=100_000), st.integers(min_value=1, max_value=20)),
    max_size=10,
)


class TestRounding:
    def test_rounds_half_up(self):
        assert round_cents(Decimal("2.5")) == 3
        assert round_cents(Decimal("2.49")) == 2

    def test_tax_amount(self):
        assert calculate_tax_amount(10000, 18) == 1800
        assert calculate_tax_amount(999, 18) == 180  # 179.82
        assert calculate_tax_amount(5000, 0) == 0


class TestCartTotals:
    """Tests for calculate_cart_totals."""

    def test_below_threshold_charges_shipping(self):
        totals = calculate_cart_totals([(2500, 2)], Settings())

        assert totals.subtotal == 5000
        assert totals.shipping == 500
        assert totals.total == 5500
        assert totals.is_free_shipping is False

    def test_threshold_reached_ships_free(self):
        totals = calculate_cart_totals([(5000, 2)], Settings())

        assert totals.subtotal == 10000
        assert totals.shipping == 0
        assert totals.total == 10000
        assert totals.is_free_shipping is True

    def test_tax_is_included_not_added(self):
        totals = calculate_cart_totals([(10000, 1)], Settings(tax_percent=20))

        assert totals.tax_amount == 2000
        assert totals.total == 10000

    def test_zero_threshold_always_ships_free(self):
        totals = calculate_cart_totals([(100, 1)], Settings(free_shipping_threshold=0))
        assert totals.shipping == 0

    def test_empty_cart(self):
        totals = calculate_cart_totals([], Settings())

        assert totals.subtotal == 0
        assert totals.tax_amount == 0
        assert totals.shipping == 500

    def test_to_dict(self):
        totals = calculate_cart_totals([(1000, 1)], Settings())
        assert set(totals.to_dict()) == {
            "subtotal",
            "tax_amount",
            "shipping",
            "total",
            "is_free_shipping",
        }

    def test_totals_for_lines_uses_price_snapshot(self):
        totals = totals_for_lines([Line(price=1500, quantity=3)], Settings())
        assert totals.subtotal == 4500

    @given(items=lines)
    def test_total_is_subtotal_plus_shipping(self, items):
        settings = Settings()
        totals = calculate_cart_totals(items, settings)

        assert totals.subtotal == sum(p * q for p, q in items)
        assert totals.total == totals.subtotal + totals.shipping
        assert totals.shipping in (0, settings.shipping_fee)
        assert totals.is_free_shipping == (totals.subtotal >= settings.free_shipping_threshold)

    @given(items=lines, tax_percent=st.integers(min_value=0, max_value=100))
    def test_tax_never_exceeds_subtotal(self, items, tax_percent):
        totals = calculate_cart_totals(items, Settings(tax_percent=tax_percent))
        assert 0 <= totals.tax_amount <= totals.subtotal

"""Unit tests for the sales analysis service."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from storefront.services.sales import (
    build_daily_series,
    estimate_profit,
    estimate_tax,
    get_sales_summary,
    start_of_month,
)

NOW = datetime(2024, 2, 15, 13, 30, tzinfo=timezone.utc)


class TestDailySeries:
    def test_one_entry_per_day_of_month(self):
        series = build_daily_series([], NOW)

        assert len(series) == 29  # 2024 is a leap year
        assert series[0].label == "Feb 1"
        assert all(day.total == 0 for day in series)

    def test_buckets_orders_by_day(self):
        orders = [
            (datetime(2024, 2, 3, 9, tzinfo=timezone.utc), 1000),
            (datetime(2024, 2, 3, 18, tzinfo=timezone.utc), 2500),
            (datetime(2024, 2, 14, 0, tzinfo=timezone.utc), 700),
        ]
        series = {day.day: day.total for day in build_daily_series(orders, NOW)}

        assert series[3] == 3500
        assert series[14] == 700
        assert series[1] == 0

    def test_ignores_other_months(self):
        orders = [(datetime(2024, 1, 31, tzinfo=timezone.utc), 5000)]
        assert sum(day.total for day in build_daily_series(orders, NOW)) == 0


class TestEstimates:
    def test_profit_is_thirty_percent(self):
        assert estimate_profit(10000) == 3000
        assert estimate_profit(0) == 0

    def test_tax_estimate(self):
        assert estimate_tax(10000, 18) == 1800

    def test_start_of_month(self):
        assert start_of_month(NOW) == datetime(2024, 2, 1, tzinfo=timezone.utc)


class TestSalesSummary:
    @pytest.mark.asyncio
    async def test_summary_figures(self):
        db = AsyncMock()
        # today orders, pending shipments, today revenue, low stock
        db.scalar = AsyncMock(side_effect=[4, 2, 3000, 1])
        month_orders = MagicMock()
        month_orders.all.return_value = [
            (datetime(2024, 2, 1, tzinfo=timezone.utc), 7000),
            (datetime(2024, 2, 15, tzinfo=timezone.utc), 3000),
        ]
        db.execute = AsyncMock(return_value=month_orders)

        summary = await get_sales_summary(db, tax_percent=10, now=NOW)

        assert summary.today_orders_count == 4
        assert summary.pending_shipments_count == 2
        assert summary.today_revenue == 3000
        assert summary.low_stock_count == 1
        assert summary.monthly_revenue == 10000
        assert summary.estimated_profit == 3000
        assert summary.estimated_tax == 1000
        assert summary.daily_sales[0].total == 7000
        assert summary.daily_sales[14].total == 3000

    @pytest.mark.asyncio
    async def test_empty_store(self):
        db = AsyncMock()
        db.scalar = AsyncMock(side_effect=[None, None, None, None])
        empty = MagicMock()
        empty.all.return_value = []
        db.execute = AsyncMock(return_value=empty)

        summary = await get_sales_summary(db, tax_percent=18, now=NOW)

        assert summary.today_orders_count == 0
        assert summary.today_revenue == 0
        assert summary.monthly_revenue == 0
        assert summary.estimated_tax == 0

"""Sales analysis for the admin dashboard.

Figures cover the current calendar month in UTC. Revenue counts orders
that were paid (PAID, SHIPPED, COMPLETED); amounts are in cents.
"""

import calendar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.models import REVENUE_STATUSES, Order, OrderStatus, Product
from storefront.logging_config import get_logger
from storefront.services.pricing import round_cents

logger = get_logger(__name__)

# Rough gross margin used for the profit estimate
ESTIMATED_MARGIN = Decimal("0.3")

LOW_STOCK_THRESHOLD = 5


@dataclass
class DailySales:
    day: int
    label: str
    total: int


@dataclass
class SalesSummary:
    today_orders_count: int
    pending_shipments_count: int
    today_revenue: int
    monthly_revenue: int
    estimated_profit: int
    estimated_tax: int
    low_stock_count: int
    daily_sales: list[DailySales] = field(default_factory=list)


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_month(now: datetime) -> datetime:
    return start_of_day(now).replace(day=1)


def build_daily_series(
    orders: Iterable[tuple[datetime, int]],
    now: datetime,
) -> list[DailySales]:
    """Bucket ``(created_at, total)`` pairs into one entry per day of the month.

    Days without orders are present with a zero total.
    """
    days_in_month = calendar.monthrange(now.year, now.month)[1]
    month_label = now.strftime("%b")
    totals = {day: 0 for day in range(1, days_in_month + 1)}

    for created_at, total in orders:
        if created_at.year == now.year and created_at.month == now.month:
            totals[created_at.day] += total

    return [
        DailySales(day=day, label=f"{month_label} {day}", total=amount)
        for day, amount in totals.items()
    ]


def estimate_profit(monthly_revenue: int) -> int:
    return round_cents(Decimal(monthly_revenue) * ESTIMATED_MARGIN)


def estimate_tax(monthly_revenue: int, tax_percent: int) -> int:
    return round_cents(Decimal(monthly_revenue) * Decimal(tax_percent) / Decimal(100))


async def get_sales_summary(
    db: AsyncSession,
    tax_percent: int,
    now: datetime | None = None,
) -> SalesSummary:
    """Compute dashboard figures for the month containing ``now``.

    Args:
        db: Database session
        tax_percent: Store tax rate, used for the tax estimate
        now: Reference time (default: current UTC time)

    Returns:
        SalesSummary for the month
    """
    now = now or datetime.now(timezone.utc)
    today = start_of_day(now)
    month = start_of_month(now)

    today_orders_count = await db.scalar(
        select(func.count(Order.id)).where(Order.created_at >= today)
    )
    pending_shipments_count = await db.scalar(
        select(func.count(Order.id)).where(Order.status == OrderStatus.PAID)
    )
    today_revenue = await db.scalar(
        select(func.coalesce(func.sum(Order.total), 0)).where(
            Order.created_at >= today,
            Order.status.in_(REVENUE_STATUSES),
        )
    )
    low_stock_count = await db.scalar(
        select(func.count(Product.id)).where(Product.stock < LOW_STOCK_THRESHOLD)
    )

    result = await db.execute(
        select(Order.created_at, Order.total).where(
            Order.created_at >= month,
            Order.status.in_(REVENUE_STATUSES),
        )
    )
    month_orders = [(created_at, total) for created_at, total in result.all()]
    monthly_revenue = sum(total for _, total in month_orders)

    logger.debug(
        "Computed sales summary",
        extra={"month": month.isoformat(), "orders": len(month_orders)},
    )

    return SalesSummary(
        today_orders_count=today_orders_count or 0,
        pending_shipments_count=pending_shipments_count or 0,
        today_revenue=int(today_revenue or 0),
        monthly_revenue=monthly_revenue,
        estimated_profit=estimate_profit(monthly_revenue),
        estimated_tax=estimate_tax(monthly_revenue, tax_percent),
        low_stock_count=low_stock_count or 0,
        daily_sales=build_daily_series(month_orders, now),
    )

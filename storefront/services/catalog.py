"""Catalog helpers: product sorting, ratings and order numbering."""

from typing import Any, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.models import Order, Product

ORDER_NUMBER_WIDTH = 9

SORT_OPTIONS = (
    "price_asc",
    "price_desc",
    "newest",
    "oldest",
    "rating_desc",
    "reviews_desc",
)

# Sorts that need review aggregates and are applied after fetching
IN_MEMORY_SORTS = ("rating_desc", "reviews_desc")

T = TypeVar("T")


def product_order_by(sort: str | None) -> list[Any]:
    """Map a sort option to ORDER BY clauses for a Product query.

    Rating and review-count sorts fall back to newest first here and are
    finished by sort_products() once reviews are loaded.
    """
    if sort == "price_asc":
        return [Product.price.asc(), Product.created_at.desc()]
    if sort == "price_desc":
        return [Product.price.desc(), Product.created_at.desc()]
    if sort == "oldest":
        return [Product.created_at.asc()]
    return [Product.created_at.desc()]


def average_rating(ratings: Sequence[int]) -> float:
    """Mean of the given ratings, 0.0 when there are none."""
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


def product_ratings(product: Any) -> list[int]:
    return [review.rating for review in product.reviews]


def sort_products(products: Sequence[T], sort: str | None) -> list[T]:
    """Apply review-based sorts in memory.

    Python's sort is stable, so products with equal ratings keep the
    database order they arrived in.

    Args:
        products: Products with ``reviews`` loaded
        sort: Sort option; anything other than rating_desc/reviews_desc
            returns the input order

    Returns:
        New list in the requested order
    """
    if sort == "rating_desc":
        return sorted(
            products,
            key=lambda p: average_rating(product_ratings(p)),
            reverse=True,
        )
    if sort == "reviews_desc":
        return sorted(products, key=lambda p: len(p.reviews), reverse=True)
    return list(products)


def format_order_number(value: int) -> str:
    return str(value).zfill(ORDER_NUMBER_WIDTH)


def next_order_number(last_order_number: str | None) -> str:
    """Return the order number following ``last_order_number``.

    Non-numeric or missing values restart the sequence at 000000001.
    """
    if last_order_number and last_order_number.isdigit():
        return format_order_number(int(last_order_number) + 1)
    return format_order_number(1)


async def generate_order_number(db: AsyncSession) -> str:
    """Generate the next sequential order number.

    Order numbers are zero-padded to a fixed width, so the lexicographic
    maximum is also the numeric maximum.
    """
    result = await db.execute(select(func.max(Order.order_number)))
    return next_order_number(result.scalar_one_or_none())

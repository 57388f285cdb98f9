"""Helpers for per-user and singleton store records and reorderable lists."""

from typing import Any, Sequence, TypeVar, Union
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.db.models import (
    Banner,
    BannerSettings,
    Carousel,
    CarouselItem,
    Cart,
    CartItem,
    Category,
    PaymentConfig,
    Product,
)
from storefront.logging_config import get_logger

logger = get_logger(__name__)

OrderedModel = TypeVar("OrderedModel", bound=Union[Banner, CarouselItem])


async def get_or_create_payment_config(db: AsyncSession) -> PaymentConfig:
    """Get the singleton payment config, creating it with zeros if absent."""
    result = await db.execute(select(PaymentConfig).limit(1))
    config = result.scalar_one_or_none()

    if not config:
        config = PaymentConfig(tax_percent=0, shipping_fee=0, free_shipping_threshold=0)
        db.add(config)
        await db.flush()
        logger.info("Created default payment config")

    return config


async def get_or_create_banner_settings(db: AsyncSession) -> BannerSettings:
    """Get the singleton banner settings row, creating defaults if absent."""
    result = await db.execute(select(BannerSettings).limit(1))
    settings = result.scalar_one_or_none()

    if not settings:
        settings = BannerSettings(
            animation_speed=500,
            slide_delay=3000,
            animation_type="slide",
            loop=True,
            arrow_display="hover",
        )
        db.add(settings)
        await db.flush()

    return settings


async def get_cart(db: AsyncSession, user_id: UUID) -> Cart | None:
    """Load a user's cart with items, products and product images.

    Always refreshes already-loaded instances so the view reflects
    mutations made earlier in the same session.
    """
    result = await db.execute(
        select(Cart)
        .where(Cart.user_id == user_id)
        .options(
            selectinload(Cart.items)
            .selectinload(CartItem.product)
            .selectinload(Product.images)
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_or_create_cart(db: AsyncSession, user_id: UUID) -> Cart:
    cart = await get_cart(db, user_id)
    if cart:
        return cart

    db.add(Cart(user_id=user_id))
    await db.flush()
    logger.info("Created cart", extra={"user_id": str(user_id)})
    return await get_cart(db, user_id)


async def get_or_create_category(db: AsyncSession, name: str) -> Category:
    """Upsert a category by its unique name."""
    result = await db.execute(select(Category).where(Category.name == name))
    category = result.scalar_one_or_none()

    if not category:
        category = Category(name=name)
        db.add(category)
        await db.flush()
        logger.info(f"Created category {name!r}")

    return category


async def get_carousel(db: AsyncSession, carousel_type: str) -> Carousel | None:
    result = await db.execute(
        select(Carousel)
        .where(Carousel.type == carousel_type)
        .options(
            selectinload(Carousel.items)
            .selectinload(CarouselItem.product)
            .selectinload(Product.images)
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_or_create_carousel(db: AsyncSession, carousel_type: str) -> Carousel:
    carousel = await get_carousel(db, carousel_type)
    if carousel:
        return carousel

    db.add(Carousel(type=carousel_type))
    await db.flush()
    return await get_carousel(db, carousel_type)


async def apply_order(
    db: AsyncSession,
    model: type[OrderedModel],
    positions: Sequence[tuple[UUID, int]],
    *criteria: Any,
) -> list[OrderedModel]:
    """Persist new ``order`` values for rows of an ordered list.

    All rows are updated in the request transaction, so a reorder either
    applies completely or not at all.

    Args:
        db: Database session
        model: Model with an integer ``order`` column (Banner, CarouselItem)
        positions: ``(id, order)`` pairs
        *criteria: Extra filters scoping the rows (e.g. one carousel)

    Raises:
        HTTPException: 404 if any ID doesn't match a row in scope
    """
    ids = [row_id for row_id, _ in positions]
    result = await db.execute(select(model).where(model.id.in_(ids), *criteria))
    rows = {row.id: row for row in result.scalars().all()}

    missing = [str(row_id) for row_id in ids if row_id not in rows]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{model.__name__} not found: {', '.join(missing)}",
        )

    for row_id, order in positions:
        rows[row_id].order = order
    await db.flush()

    logger.info(f"Reordered {len(rows)} {model.__tablename__}")
    return sorted(rows.values(), key=lambda row: row.order)

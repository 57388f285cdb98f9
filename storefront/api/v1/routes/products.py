"""Public catalog routes: product listings, product detail and categories."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.api.models import CategoryResponse, ProductListItem, ProductResponse
from storefront.db.models import Category, Product, Review
from storefront.db.session import get_db
from storefront.logging_config import get_logger
from storefront.services.catalog import (
    SORT_OPTIONS,
    average_rating,
    product_order_by,
    product_ratings,
    sort_products,
)
from storefront.services.pricing import round_cents

logger = get_logger(__name__)

router = APIRouter(tags=["products"])


# ============================================================================
# Response Models
# ============================================================================


class ProductListResponse(BaseModel):
    products: List[ProductListItem]
    has_more: bool = Field(..., description="Whether another page is available")


class ReviewResponse(BaseModel):
    id: UUID
    user_id: UUID
    reviewer_name: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime


class ProductDetailResponse(ProductResponse):
    reviews: List[ReviewResponse] = Field(default_factory=list)
    average_rating: float = 0.0
    review_count: int = 0


# ============================================================================
# Helper Functions
# ============================================================================


def dollars_to_cents(amount: float) -> int:
    return round_cents(Decimal(str(amount)) * 100)


def reviewer_name(review: Review) -> str:
    """Display name for a review author: full name, else the email's local part."""
    return review.user.full_name or review.user.email.split("@")[0]


def review_to_response(review: Review) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        user_id=review.user_id,
        reviewer_name=reviewer_name(review),
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
    )


# ============================================================================
# Routes
# ============================================================================


@router.get("/products", response_model=List[ProductResponse])
async def list_available_products(
    db: AsyncSession = Depends(get_db),
) -> List[ProductResponse]:
    """All active, in-stock products, newest first."""
    result = await db.execute(
        select(Product)
        .where(Product.is_active.is_(True), Product.stock > 0)
        .options(selectinload(Product.images), selectinload(Product.category))
        .order_by(Product.created_at.desc())
    )
    return [ProductResponse.model_validate(p) for p in result.scalars().all()]


@router.get("/products/list", response_model=ProductListResponse)
async def search_products(
    page: int = Query(1, ge=1),
    page_size: int = Query(12, ge=1, le=100),
    q: Optional[str] = Query(None, description="Case-insensitive match on title or description"),
    category: Optional[str] = Query(None, description="Exact category name"),
    min_price: Optional[float] = Query(None, alias="min", ge=0, description="Minimum price in dollars"),
    max_price: Optional[float] = Query(None, alias="max", ge=0, description="Maximum price in dollars"),
    rating: Optional[int] = Query(None, ge=1, le=5, description="Minimum average rating"),
    sort: Optional[str] = Query(None, description=f"One of: {', '.join(SORT_OPTIONS)}"),
    db: AsyncSession = Depends(get_db),
) -> ProductListResponse:
    """Paginated product search for the storefront.

    One extra row is fetched to decide ``has_more``. The rating filter and
    the review-based sorts run on the fetched rows, so they apply within
    the page rather than across the whole catalog.
    """
    query = select(Product).where(Product.is_active.is_(True))

    if q:
        pattern = f"%{q}%"
        query = query.where(or_(Product.title.ilike(pattern), Product.description.ilike(pattern)))
    if category:
        query = query.join(Product.category).where(Category.name == category)
    if min_price is not None:
        query = query.where(Product.price >= dollars_to_cents(min_price))
    if max_price is not None:
        query = query.where(Product.price <= dollars_to_cents(max_price))

    query = (
        query.options(
            selectinload(Product.reviews),
            selectinload(Product.images),
            selectinload(Product.category),
        )
        .order_by(*product_order_by(sort))
        .offset((page - 1) * page_size)
        .limit(page_size + 1)
    )
    result = await db.execute(query)
    products = list(result.scalars().all())

    if rating:
        products = [
            p for p in products
            if p.reviews and average_rating(product_ratings(p)) >= rating
        ]

    has_more = len(products) > page_size
    page_products = sort_products(products[:page_size], sort)

    return ProductListResponse(
        products=[ProductListItem.from_product(p) for p in page_products],
        has_more=has_more,
    )


@router.get("/products/{product_id}", response_model=ProductDetailResponse)
async def get_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ProductDetailResponse:
    result = await db.execute(
        select(Product)
        .where(Product.id == product_id)
        .options(
            selectinload(Product.images),
            selectinload(Product.category),
            selectinload(Product.reviews).selectinload(Review.user),
        )
    )
    product = result.scalar_one_or_none()

    if not product or not product.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    reviews = sorted(product.reviews, key=lambda r: r.created_at, reverse=True)
    ratings = product_ratings(product)
    base = ProductResponse.model_validate(product)
    return ProductDetailResponse(
        **base.model_dump(),
        reviews=[review_to_response(r) for r in reviews],
        average_rating=average_rating(ratings),
        review_count=len(ratings),
    )


@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)) -> List[CategoryResponse]:
    result = await db.execute(select(Category).order_by(Category.name.asc()))
    return [CategoryResponse.model_validate(c) for c in result.scalars().all()]

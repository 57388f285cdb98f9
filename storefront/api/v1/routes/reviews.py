"""Product review routes."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.shared.auth import SessionUser, get_current_user
from storefront.db.models import Product, Review
from storefront.db.session import get_db
from storefront.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"])

ALREADY_REVIEWED = "You have already reviewed this product"


class ReviewCreate(BaseModel):
    product_id: UUID
    rating: int = Field(..., ge=1, le=5, description="Star rating from 1 to 5")
    comment: Optional[str] = Field(default=None, max_length=2000)


class ReviewCreatedResponse(BaseModel):
    id: UUID
    product_id: UUID
    rating: int
    comment: Optional[str] = None
    average_rating: float = Field(..., description="Product's average rating including this review")
    total_reviews: int


@router.post("", response_model=ReviewCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    request: ReviewCreate,
    user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ReviewCreatedResponse:
    """Rate a product. Each user may review a product once."""
    product = await db.get(Product, request.product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    existing = await db.execute(
        select(Review.id).where(
            Review.product_id == request.product_id,
            Review.user_id == user.user_id,
        )
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_REVIEWED)

    review = Review(
        product_id=request.product_id,
        user_id=user.user_id,
        rating=request.rating,
        comment=request.comment or None,
    )
    db.add(review)
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_REVIEWED)

    stats = await db.execute(
        select(func.avg(Review.rating), func.count(Review.id)).where(
            Review.product_id == request.product_id
        )
    )
    avg, count = stats.one()

    logger.info(
        "Review added",
        extra={"product_id": str(request.product_id), "rating": request.rating},
    )
    return ReviewCreatedResponse(
        id=review.id,
        product_id=review.product_id,
        rating=review.rating,
        comment=review.comment,
        average_rating=float(avg or 0),
        total_reviews=count,
    )

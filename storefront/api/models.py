"""Pydantic models shared across API routes.

Route modules define their own request bodies; the response shapes for
records that appear in more than one place (products, orders, addresses,
payment config) live here so the storefront and the admin back office
serialize them identically.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from storefront.db.models import OrderStatus, UserRole
from storefront.services.catalog import average_rating, product_ratings


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str = Field(..., description="Error type")
    detail: Optional[str] = Field(default=None, description="Detailed error information")
    error_code: Optional[str] = Field(default=None, description="Error code for client handling")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "not_found",
                "detail": "Product not found",
                "error_code": "ERR_RES_001",
            }
        }
    )


class MessageResponse(BaseModel):
    message: str


class ReorderItem(BaseModel):
    """New position of one entry in an ordered list (banners, carousel items)."""

    id: UUID
    order: int = Field(..., ge=0, description="Zero-based display position")


# ============================================================================
# Catalog
# ============================================================================


class CategoryResponse(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class ProductImageResponse(BaseModel):
    id: UUID
    url: str
    position: int

    model_config = ConfigDict(from_attributes=True)


class ProductResponse(BaseModel):
    """A product with its gallery and category."""

    id: UUID
    title: str
    description: str
    price: int = Field(..., description="Unit price in cents, tax inclusive")
    stock: int
    is_active: bool
    thumbnail: Optional[str] = None
    category: Optional[CategoryResponse] = None
    images: List[ProductImageResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductListItem(ProductResponse):
    """Product row in a storefront listing, with review aggregates."""

    average_rating: float = Field(0.0, description="Mean review rating, 0 without reviews")
    review_count: int = 0

    @classmethod
    def from_product(cls, product) -> "ProductListItem":
        """Build from a Product with ``reviews``, ``images`` and ``category`` loaded."""
        ratings = product_ratings(product)
        base = ProductResponse.model_validate(product)
        return cls(
            **base.model_dump(),
            average_rating=average_rating(ratings),
            review_count=len(ratings),
        )


class ProductSummary(BaseModel):
    """Minimal product fields embedded in cart, order and carousel rows."""

    id: UUID
    title: str
    price: int
    stock: int
    is_active: bool
    thumbnail: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Orders
# ============================================================================


class OrderItemResponse(BaseModel):
    id: UUID
    product_id: UUID
    quantity: int
    price: int = Field(..., description="Unit price snapshot in cents")
    product: ProductSummary

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    id: UUID
    order_number: Optional[str] = None
    status: OrderStatus
    total: int = Field(..., description="Charged amount in cents (subtotal + shipping)")
    shipping_address_id: Optional[UUID] = None
    items: List[OrderItemResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Users and addresses
# ============================================================================


class UserResponse(BaseModel):
    """User as shown to admins and to the user themself (never the password)."""

    id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AddressResponse(BaseModel):
    id: UUID
    title: str
    first_name: str
    last_name: str
    phone: str
    city: str
    district: str
    neighborhood: str
    full_address: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Payment config
# ============================================================================


class PaymentConfigResponse(BaseModel):
    tax_percent: int = Field(..., description="Tax rate included in prices, percent")
    shipping_fee: int = Field(..., description="Flat shipping fee in cents")
    free_shipping_threshold: int = Field(
        ..., description="Subtotal in cents at which shipping becomes free"
    )

    model_config = ConfigDict(from_attributes=True)

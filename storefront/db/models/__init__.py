"""SQLAlchemy models for the Storefront service.

This package contains all SQLAlchemy ORM models, including:

- User / PasswordResetToken: email+password accounts
- Category / Product / ProductImage / Review: the catalog
- Cart / CartItem: per-user shopping carts
- Order / OrderItem: placed orders with price snapshots
- Address: customer shipping addresses
- Banner / BannerSettings / Carousel / CarouselItem: storefront merchandising
- PaymentConfig: tax and shipping settings
- ProcessedWebhookEvent: webhook deduplication

Usage:
    from storefront.db.models import Product, Category

    product = Product(
        title="Wireless Headphones",
        description="Over-ear, noise cancelling",
        price=7999,
        stock=50,
    )
"""

from .address import Address
from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from .cart import Cart, CartItem
from .catalog import Category, Product, ProductImage, Review
from .merchandising import (
    ANIMATION_TYPES,
    ARROW_DISPLAYS,
    BANNER_ALIGNMENTS,
    BANNER_DISPLAY_MODES,
    MAX_CAROUSEL_ITEMS,
    Banner,
    BannerSettings,
    Carousel,
    CarouselItem,
    CarouselType,
)
from .order import REVENUE_STATUSES, Order, OrderItem, OrderStatus
from .payment_config import PaymentConfig
from .user import PasswordResetToken, User, UserRole
from .webhook import ProcessedWebhookEvent

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # Models
    "User",
    "PasswordResetToken",
    "Category",
    "Product",
    "ProductImage",
    "Review",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "Address",
    "Banner",
    "BannerSettings",
    "Carousel",
    "CarouselItem",
    "PaymentConfig",
    "ProcessedWebhookEvent",
    # Enums
    "UserRole",
    "OrderStatus",
    "CarouselType",
    # Constants
    "REVENUE_STATUSES",
    "BANNER_DISPLAY_MODES",
    "BANNER_ALIGNMENTS",
    "ANIMATION_TYPES",
    "ARROW_DISPLAYS",
    "MAX_CAROUSEL_ITEMS",
]

"""Database package for the Storefront service.

Subpackages:
    models: SQLAlchemy ORM models
"""

from .models import (
    Base,
    Order,
    OrderStatus,
    Product,
    TimestampMixin,
    User,
    UserRole,
    UUIDPrimaryKeyMixin,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # Models
    "User",
    "Product",
    "Order",
    # Enums
    "UserRole",
    "OrderStatus",
]

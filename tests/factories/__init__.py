"""Factory Boy factories for Storefront database models.

Usage:
    from tests.factories import ProductFactory, OrderFactory

    # Build a model instance without a database
    product = ProductFactory.build(price=2500)

For async tests, use the async_create helper:
    product = await ProductFactory.async_create(session)
"""

from .base import (
    AsyncSQLAlchemyFactory,
    TimestampedFactory,
    assign_ids_on_flush,
    scalar_result,
    scalars_result,
)
from .catalog import CategoryFactory, ProductFactory, ProductImageFactory, ReviewFactory
from .merchandising import (
    BannerFactory,
    BannerSettingsFactory,
    CarouselFactory,
    CarouselItemFactory,
)
from .order import CartFactory, CartItemFactory, OrderFactory, OrderItemFactory
from .user import AddressFactory, UserFactory

__all__ = [
    # Base
    "AsyncSQLAlchemyFactory",
    "TimestampedFactory",
    "assign_ids_on_flush",
    "scalar_result",
    "scalars_result",
    # Users
    "UserFactory",
    "AddressFactory",
    # Catalog
    "CategoryFactory",
    "ProductFactory",
    "ProductImageFactory",
    "ReviewFactory",
    # Orders
    "CartFactory",
    "CartItemFactory",
    "OrderFactory",
    "OrderItemFactory",
    # Merchandising
    "BannerFactory",
    "BannerSettingsFactory",
    "CarouselFactory",
    "CarouselItemFactory",
]

"""Admin back office routes. Every route requires an ADMIN session."""

from . import analytics, banners, orders, payment_config, products, uploads, users

__all__ = [
    "analytics",
    "banners",
    "orders",
    "payment_config",
    "products",
    "uploads",
    "users",
]

"""
Storefront - E-commerce API and Back Office

Product catalog, shopping cart, Stripe checkout, order management,
and merchandising (banners and carousels) behind a FastAPI service.
"""

__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy imports for public API - avoids loading the database engine at import time."""
    if name == "calculate_cart_totals":
        from storefront.services.pricing import calculate_cart_totals
        return calculate_cart_totals
    if name == "CartTotals":
        from storefront.services.pricing import CartTotals
        return CartTotals
    if name == "load_config":
        from storefront.config import load_config
        return load_config
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "calculate_cart_totals",
    "CartTotals",
    "load_config",
]

"""Storefront API v1.

This module collects the v1 routers and their OpenAPI tag metadata. The
application mounts every router under ``/api/v1``.
"""

from fastapi import APIRouter

from storefront.api.v1.routes import (
    addresses,
    auth,
    banners,
    carousels,
    cart,
    checkout,
    orders,
    products,
    profile,
    reviews,
    webhooks,
)
from storefront.api.v1.routes.admin import analytics as admin_analytics
from storefront.api.v1.routes.admin import banners as admin_banners
from storefront.api.v1.routes.admin import orders as admin_orders
from storefront.api.v1.routes.admin import payment_config as admin_payment_config
from storefront.api.v1.routes.admin import products as admin_products
from storefront.api.v1.routes.admin import uploads as admin_uploads
from storefront.api.v1.routes.admin import users as admin_users

API_PREFIX = "/api/v1"

# v1-specific OpenAPI tags
V1_OPENAPI_TAGS = [
    {
        "name": "auth",
        "description": "Account registration, sign-in and password reset. Sign-in returns a "
        "bearer session token.",
    },
    {
        "name": "profile",
        "description": "The signed-in user's name and avatar.",
    },
    {
        "name": "products",
        "description": "Public catalog. Listing with search, price and rating filters, product "
        "detail with reviews, and categories.",
    },
    {
        "name": "reviews",
        "description": "Product reviews. One review per user and product.",
    },
    {
        "name": "cart",
        "description": "The signed-in user's cart with totals computed from the payment config.",
    },
    {
        "name": "orders",
        "description": "Place an order from the cart and view order history.",
    },
    {
        "name": "checkout",
        "description": "Create a Stripe Checkout Session for a pending order.",
    },
    {
        "name": "webhooks",
        "description": "Stripe webhook receiver. Marks orders paid and decrements stock.",
    },
    {
        "name": "addresses",
        "description": "The signed-in user's shipping addresses.",
    },
    {
        "name": "banners",
        "description": "Home page hero slider. No authentication required.",
    },
    {
        "name": "carousels",
        "description": "Curated product carousels. Reading is public; editing requires an admin.",
    },
    {
        "name": "admin",
        "description": "Back office endpoints: products, orders, users, banners, uploads, "
        "payment config and sales analysis. Admin role required.",
    },
]

routers: list[APIRouter] = [
    auth.router,
    profile.router,
    products.router,
    reviews.router,
    cart.router,
    orders.router,
    checkout.router,
    webhooks.router,
    addresses.router,
    banners.router,
    carousels.router,
    admin_products.router,
    admin_orders.router,
    admin_orders.counts_router,
    admin_users.router,
    admin_banners.router,
    admin_uploads.router,
    admin_payment_config.router,
    admin_analytics.router,
]

__all__ = ["API_PREFIX", "V1_OPENAPI_TAGS", "routers"]

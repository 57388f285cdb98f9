"""Storefront API v1 route modules."""

"""Shared API building blocks: auth, helpers, middleware and services."""

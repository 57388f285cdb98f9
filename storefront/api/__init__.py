"""HTTP API for the Storefront service."""

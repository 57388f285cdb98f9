"""API middleware for Storefront.

This package contains FastAPI middleware and dependencies for
request processing, including:
- Security headers on every response
- Rate limiting of auth and webhook endpoints
"""

from .rate_limit import (
    RATE_LIMITS,
    RateLimitConfig,
    limiter,
    rate_limit_exceeded_handler,
)
from .security_headers import SecurityHeadersMiddleware

__all__ = [
    # Security headers
    "SecurityHeadersMiddleware",
    # Rate limiting
    "RATE_LIMITS",
    "RateLimitConfig",
    "limiter",
    "rate_limit_exceeded_handler",
]

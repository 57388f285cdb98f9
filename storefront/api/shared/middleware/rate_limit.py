"""Rate limiting for sensitive and externally called endpoints.

Limits are enforced with slowapi decorators on individual routes:

    from storefront.api.shared.middleware.rate_limit import RATE_LIMITS, limiter

    @router.post("/login")
    @limiter.limit(RATE_LIMITS["auth"].to_slowapi_format())
    async def login(request: Request, ...):
        ...

Counters live in Redis when REDIS_URL is set, otherwise in process memory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from fastapi import Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from storefront.api.shared.helpers.errors import ErrorCode, create_error_response
from storefront.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Rate Limit Constants
# =============================================================================


@dataclass
class RateLimitConfig:
    """Configuration for a rate limit.

    Attributes:
        requests: Number of requests allowed
        window_seconds: Time window in seconds
        description: Human-readable description
    """

    requests: int
    window_seconds: int
    description: str

    def to_slowapi_format(self) -> str:
        """Convert to slowapi limit string format.

        Returns:
            String like '100/minute' or '1000/hour'
        """
        if self.window_seconds == 60:
            return f"{self.requests}/minute"
        elif self.window_seconds == 3600:
            return f"{self.requests}/hour"
        elif self.window_seconds == 86400:
            return f"{self.requests}/day"
        else:
            requests_per_minute = max(1, (self.requests * 60) // self.window_seconds)
            return f"{requests_per_minute}/minute"


RATE_LIMITS: dict[str, RateLimitConfig] = {
    # Login, registration and password reset (brute force protection)
    "auth": RateLimitConfig(
        requests=10,
        window_seconds=60,
        description="10 requests per minute",
    ),
    # Password reset emails
    "password_reset": RateLimitConfig(
        requests=5,
        window_seconds=3600,
        description="5 requests per hour",
    ),
    # Payment provider callbacks
    "webhook": RateLimitConfig(
        requests=100,
        window_seconds=60,
        description="100 webhooks per minute",
    ),
}

HEADER_RETRY_AFTER = "Retry-After"


limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=os.getenv("REDIS_URL", "memory://"),
    enabled=os.getenv("RATE_LIMIT_ENABLED", "true").lower() != "false",
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render a 429 in the standard error shape."""
    logger.warning(
        f"Rate limit exceeded on {request.url.path}",
        extra={"limit": str(exc.detail), "client": get_remote_address(request)},
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=create_error_response(
            ErrorCode.LIMIT_RATE_EXCEEDED,
            detail=f"Rate limit exceeded: {exc.detail}",
        ),
        headers={HEADER_RETRY_AFTER: "60"},
    )


__all__ = [
    "HEADER_RETRY_AFTER",
    "RATE_LIMITS",
    "RateLimitConfig",
    "limiter",
    "rate_limit_exceeded_handler",
]

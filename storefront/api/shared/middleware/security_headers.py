"""Security headers middleware for FastAPI.

This middleware adds standard security headers to all responses:
- X-Content-Type-Options: Prevents MIME type sniffing
- X-Frame-Options: Prevents clickjacking
- Strict-Transport-Security: Enforces HTTPS (HSTS, production only)
- Content-Security-Policy: Controls allowed content sources
- Referrer-Policy: Controls referrer information
- Cross-Origin-Resource-Policy: Lets the storefront embed uploaded images

API responses are marked uncacheable; files served from the uploads
mount keep their default caching so product images load quickly.
"""

import os
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware that adds security headers to all responses.

    Configuration via environment variables:
    - ENVIRONMENT: If "production", enables HSTS
    - CORS_ORIGINS: Used to set frame-ancestors in CSP

    Example:
        app.add_middleware(SecurityHeadersMiddleware, static_prefix="/uploads")
    """

    def __init__(
        self,
        app,
        static_prefix: str = "/uploads",
        hsts_max_age: int = 31536000,  # 1 year in seconds
        frame_options: str = "DENY",
        referrer_policy: str = "strict-origin-when-cross-origin",
        csp_report_uri: Optional[str] = None,
    ):
        super().__init__(app)
        self.static_prefix = static_prefix.rstrip("/")
        self.hsts_max_age = hsts_max_age
        self.frame_options = frame_options
        self.referrer_policy = referrer_policy
        self.csp_report_uri = csp_report_uri or os.getenv("CSP_REPORT_URI")

    def is_static(self, path: str) -> bool:
        return path == self.static_prefix or path.startswith(self.static_prefix + "/")

    async def dispatch(self, request: Request, call_next) -> Response:
        """Add security headers to the response."""
        response = await call_next(request)

        is_production = os.getenv("ENVIRONMENT", "development") == "production"

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = self.frame_options
        response.headers["Referrer-Policy"] = self.referrer_policy

        if is_production:
            response.headers["Strict-Transport-Security"] = (
                f"max-age={self.hsts_max_age}; includeSubDomains"
            )

        if self.is_static(request.url.path):
            # Uploaded images are embedded by the storefront on another origin
            response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"
            return response

        response.headers["Content-Security-Policy"] = self._build_csp()
        response.headers["Cross-Origin-Resource-Policy"] = "same-site"
        if "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store, max-age=0"

        return response

    def _build_csp(self) -> str:
        """Build Content-Security-Policy header value for JSON/PDF responses."""
        cors_origins = [
            o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()
        ]
        if cors_origins:
            frame_ancestors = f"frame-ancestors 'self' {' '.join(cors_origins)}"
        else:
            frame_ancestors = "frame-ancestors 'none'"

        directives = [
            "default-src 'none'",
            "script-src 'self' 'unsafe-inline'",  # Swagger UI
            "style-src 'self' 'unsafe-inline'",
            "img-src 'self' data: https:",
            "connect-src 'self'",
            "base-uri 'self'",
            frame_ancestors,
        ]
        if self.csp_report_uri:
            directives.append(f"report-uri {self.csp_report_uri}")

        return "; ".join(directives)


__all__ = ["SecurityHeadersMiddleware"]

"""FastAPI application for the Storefront API."""

import os
import uuid
from contextlib import asynccontextmanager
from typing import Any

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from storefront import __version__
from storefront.api.shared.helpers import (
    ErrorCode,
    create_error_response,
    error_code_for_status,
)
from storefront.api.shared.middleware import (
    SecurityHeadersMiddleware,
    limiter,
    rate_limit_exceeded_handler,
)
from storefront.api.v1 import API_PREFIX, V1_OPENAPI_TAGS, routers
from storefront.config import get_config
from storefront.logging_config import clear_context, configure_logging, get_logger, set_context

logger = get_logger(__name__)


# Initialize Sentry if DSN is configured
def _init_sentry() -> None:
    """Initialize Sentry SDK with FastAPI integrations."""
    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        logger.info("SENTRY_DSN not configured, Sentry error tracking disabled")
        return

    sentry_sdk.init(
        dsn=sentry_dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("RELEASE_VERSION"),
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
        send_default_pii=False,
        traces_sampler=_traces_sampler,
    )
    logger.info("Sentry SDK initialized", extra={"environment": os.getenv("ENVIRONMENT", "development")})


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """Custom traces sampler to filter out health checks."""
    transaction_name = sampling_context.get("transaction_context", {}).get("name", "")
    if transaction_name in ("/health", "/health/ready", "GET /health", "GET /health/ready"):
        return 0.0

    return float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))


# Initialize Sentry early
_init_sentry()


# CORS origins - configure for production
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:3001"
).split(",")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add correlation IDs to all requests for distributed tracing."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())

        set_context(correlation_id=correlation_id)
        sentry_sdk.set_tag("correlation_id", correlation_id)

        try:
            response = await call_next(request)
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    config = get_config()
    configure_logging(
        level=config.logging.level,
        json_output=config.logging.format == "json",
        log_file=config.logging.file,
    )
    logger.info(f"Starting Storefront API ({config.store.name})")
    yield
    from storefront.db.session import close_db

    await close_db()
    logger.info("Shutting down Storefront API")


OPENAPI_TAGS = [
    *V1_OPENAPI_TAGS,
    {
        "name": "health",
        "description": "Service health checks. Liveness and readiness probes for load balancers "
        "and orchestration systems.",
    },
]

app = FastAPI(
    title="Storefront API",
    description="""
# Storefront API

Online store and back office: catalog, cart, orders, Stripe checkout and
store administration.

## Authentication

Sign in with `POST /api/v1/auth/login` and send the returned token:

```
Authorization: Bearer <token>
```

Admin routes (`/api/v1/admin/...`, and carousel edits) require the ADMIN role.

## Money

All amounts are integer cents. Prices include tax.

## Error Responses

All errors follow this format:

```json
{
  "error": "res_not_found",
  "detail": "Product not found",
  "error_code": "ERR_RES_001",
  "action": "It may have been removed. Refresh and try again."
}
```

Request validation failures are reported as 400.
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=OPENAPI_TAGS,
    servers=[
        {"url": "http://localhost:8000", "description": "Local development"},
    ],
    lifespan=lifespan,
)

# Add correlation ID middleware first (before CORS)
app.add_middleware(CorrelationIdMiddleware)

# CORS middleware for web clients - use configured origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    SecurityHeadersMiddleware,
    static_prefix=get_config().storage.url_prefix,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Include routers
for router in routers:
    app.include_router(router, prefix=API_PREFIX)

# Serve locally stored uploads
_storage_config = get_config().storage
if _storage_config.backend == "local":
    os.makedirs(_storage_config.upload_dir, exist_ok=True)
    app.mount(
        _storage_config.url_prefix,
        StaticFiles(directory=_storage_config.upload_dir),
        name="uploads",
    )


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Storefront API",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "register": f"POST {API_PREFIX}/auth/register",
            "login": f"POST {API_PREFIX}/auth/login",
            "products": f"GET {API_PREFIX}/products/list",
            "product": f"GET {API_PREFIX}/products/{{id}}",
            "cart": f"GET {API_PREFIX}/cart",
            "place_order": f"POST {API_PREFIX}/orders",
            "checkout": f"POST {API_PREFIX}/checkout",
            "stripe_webhook": f"POST {API_PREFIX}/webhooks/stripe",
            "banners": f"GET {API_PREFIX}/banners",
            "carousel": f"GET {API_PREFIX}/carousels/{{type}}",
            "admin_orders": f"GET {API_PREFIX}/admin/orders",
            "sales_analysis": f"GET {API_PREFIX}/admin/sales-analysis",
        },
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/health/ready", tags=["health"])
async def readiness_check():
    """Readiness check verifying the database.

    Returns 200 if PostgreSQL answers, 503 otherwise.
    """
    checks: dict[str, Any] = {}
    all_healthy = True

    try:
        from sqlalchemy import text

        from storefront.db.session import engine

        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        checks["postgres"] = True
    except Exception as e:
        checks["postgres"] = False
        checks["postgres_error"] = str(e)
        all_healthy = False
        logger.warning(f"PostgreSQL health check failed: {e}")

    status_code = 200 if all_healthy else 503
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "ready" if all_healthy else "not_ready",
            "checks": checks,
        }
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render route errors in the standard error shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(error_code_for_status(exc.status_code), exc.detail),
        headers=getattr(exc, "headers", None),
    )


def format_validation_error(exc: RequestValidationError) -> str:
    """First validation problem as ``field: message``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = str(first.get("msg", "Invalid value")).removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests as 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=create_error_response(
            ErrorCode.VAL_INVALID_REQUEST,
            format_validation_error(exc),
        ),
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    sentry_sdk.capture_exception(exc)

    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    # Don't expose internal error details in production
    is_production = os.getenv("ENVIRONMENT", "development") == "production"
    detail = "An unexpected error occurred. Please try again later." if is_production else str(exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=create_error_response(ErrorCode.SYS_INTERNAL_ERROR, detail),
    )


def custom_openapi() -> dict[str, Any]:
    """Generate custom OpenAPI schema with security schemes."""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        tags=app.openapi_tags,
        servers=app.servers,
    )

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "Session token from `POST /api/v1/auth/login`. "
            "Include in the Authorization header as `Bearer <token>`.",
        },
    }
    openapi_schema["security"] = [{"BearerAuth": []}]

    openapi_schema["components"].setdefault("schemas", {})["RateLimitError"] = {
        "type": "object",
        "properties": {
            "error": {"type": "string", "example": "limit_rate_exceeded"},
            "detail": {
                "type": "string",
                "example": "Rate limit exceeded: 10 per 1 minute",
            },
            "error_code": {"type": "string", "example": ErrorCode.LIMIT_RATE_EXCEEDED.value},
            "action": {"type": "string"},
        },
        "required": ["error", "detail", "error_code"],
    }

    app.openapi_schema = openapi_schema
    return app.openapi_schema


# Override the default OpenAPI schema generator
app.openapi = custom_openapi


if __name__ == "__main__":
    import uvicorn

    # Run with: python -m storefront.api.app
    uvicorn.run(
        "storefront.api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )

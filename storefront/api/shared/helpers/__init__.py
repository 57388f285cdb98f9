"""Shared API helper functions."""

from .errors import (
    ERROR_REGISTRY,
    ErrorCode,
    ErrorInfo,
    create_error_response,
    error_code_for_status,
    get_error_info,
)
from .store import (
    apply_order,
    get_cart,
    get_carousel,
    get_or_create_banner_settings,
    get_or_create_carousel,
    get_or_create_cart,
    get_or_create_category,
    get_or_create_payment_config,
)
from .user import get_current_db_user, get_db_user, get_user_by_email, normalize_email

__all__ = [
    # Errors
    "ERROR_REGISTRY",
    "ErrorCode",
    "ErrorInfo",
    "create_error_response",
    "error_code_for_status",
    "get_error_info",
    # Store records
    "apply_order",
    "get_cart",
    "get_carousel",
    "get_or_create_banner_settings",
    "get_or_create_carousel",
    "get_or_create_cart",
    "get_or_create_category",
    "get_or_create_payment_config",
    # Users
    "get_current_db_user",
    "get_db_user",
    "get_user_by_email",
    "normalize_email",
]

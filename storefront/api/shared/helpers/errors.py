"""Error handling utilities for API responses.

Provides standardized error codes so every non-2xx response carries the
same ``{error, detail, error_code}`` shape, and safe messages that don't
leak internal implementation details.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import status

from storefront.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Error Codes - Machine-readable codes for client handling and support
# =============================================================================


class ErrorCode(str, Enum):
    """Standardized error codes for API responses.

    Format: ERR_{CATEGORY}_{NUMBER}
    Categories:
    - AUTH: Authentication and authorization
    - VAL: Validation
    - RES: Resource (not found, conflict)
    - LIMIT: Rate limiting
    - PAY: Payments
    - SYS: System/server errors
    """

    # Authentication errors
    AUTH_MISSING_TOKEN = "ERR_AUTH_001"
    AUTH_FORBIDDEN = "ERR_AUTH_002"

    # Validation errors
    VAL_INVALID_REQUEST = "ERR_VAL_001"
    VAL_UNPROCESSABLE = "ERR_VAL_002"

    # Resource errors
    RES_NOT_FOUND = "ERR_RES_001"
    RES_CONFLICT = "ERR_RES_002"

    # Rate limiting errors
    LIMIT_RATE_EXCEEDED = "ERR_LIMIT_001"

    # Payment errors
    PAY_DECLINED = "ERR_PAY_001"

    # System errors
    SYS_INTERNAL_ERROR = "ERR_SYS_001"
    SYS_UNAVAILABLE = "ERR_SYS_002"

    # Generic
    UNKNOWN = "ERR_UNKNOWN"


# =============================================================================
# Error Information Dataclass
# =============================================================================


@dataclass
class ErrorInfo:
    """Complete error information for API responses."""

    code: ErrorCode
    message: str
    action: str
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR


ERROR_REGISTRY: Dict[ErrorCode, ErrorInfo] = {
    ErrorCode.AUTH_MISSING_TOKEN: ErrorInfo(
        code=ErrorCode.AUTH_MISSING_TOKEN,
        message="Authentication required.",
        action="Please sign in to continue.",
        status_code=status.HTTP_401_UNAUTHORIZED,
    ),
    ErrorCode.AUTH_FORBIDDEN: ErrorInfo(
        code=ErrorCode.AUTH_FORBIDDEN,
        message="You don't have permission to perform this action.",
        action="Contact a store administrator if you need access.",
        status_code=status.HTTP_403_FORBIDDEN,
    ),
    ErrorCode.VAL_INVALID_REQUEST: ErrorInfo(
        code=ErrorCode.VAL_INVALID_REQUEST,
        message="The request is invalid.",
        action="Check the submitted values and try again.",
        status_code=status.HTTP_400_BAD_REQUEST,
    ),
    ErrorCode.VAL_UNPROCESSABLE: ErrorInfo(
        code=ErrorCode.VAL_UNPROCESSABLE,
        message="Validation failed.",
        action="Check the highlighted fields and try again.",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    ),
    ErrorCode.RES_NOT_FOUND: ErrorInfo(
        code=ErrorCode.RES_NOT_FOUND,
        message="The requested resource was not found.",
        action="It may have been removed. Refresh and try again.",
        status_code=status.HTTP_404_NOT_FOUND,
    ),
    ErrorCode.RES_CONFLICT: ErrorInfo(
        code=ErrorCode.RES_CONFLICT,
        message="The request conflicts with the current state of the resource.",
        action="Refresh and try again.",
        status_code=status.HTTP_409_CONFLICT,
    ),
    ErrorCode.LIMIT_RATE_EXCEEDED: ErrorInfo(
        code=ErrorCode.LIMIT_RATE_EXCEEDED,
        message="Too many requests.",
        action="Please wait a moment and try again.",
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
    ),
    ErrorCode.PAY_DECLINED: ErrorInfo(
        code=ErrorCode.PAY_DECLINED,
        message="The payment was declined.",
        action="Try a different payment method.",
        status_code=status.HTTP_402_PAYMENT_REQUIRED,
    ),
    ErrorCode.SYS_INTERNAL_ERROR: ErrorInfo(
        code=ErrorCode.SYS_INTERNAL_ERROR,
        message="An internal error occurred.",
        action="Please try again. Contact support if the problem persists.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    ),
    ErrorCode.SYS_UNAVAILABLE: ErrorInfo(
        code=ErrorCode.SYS_UNAVAILABLE,
        message="A dependent service is temporarily unavailable.",
        action="Please try again in a few minutes.",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
    ),
    ErrorCode.UNKNOWN: ErrorInfo(
        code=ErrorCode.UNKNOWN,
        message="An unexpected error occurred.",
        action="Please try again. Contact support if the problem persists.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    ),
}

_STATUS_TO_CODE: Dict[int, ErrorCode] = {
    info.status_code: code
    for code, info in ERROR_REGISTRY.items()
    if code != ErrorCode.UNKNOWN
}


def error_code_for_status(status_code: int) -> ErrorCode:
    """Pick the error code that best describes an HTTP status.

    Unlisted 4xx statuses map to VAL_INVALID_REQUEST, anything else to UNKNOWN.
    """
    if status_code in _STATUS_TO_CODE:
        return _STATUS_TO_CODE[status_code]
    if 400 <= status_code < 500:
        return ErrorCode.VAL_INVALID_REQUEST
    return ErrorCode.UNKNOWN


def get_error_info(error_code: ErrorCode) -> ErrorInfo:
    return ERROR_REGISTRY.get(error_code, ERROR_REGISTRY[ErrorCode.UNKNOWN])


def create_error_response(
    error_code: ErrorCode,
    detail: Optional[Any] = None,
) -> Dict[str, Any]:
    """Create a standardized error response body.

    Args:
        error_code: The standardized error code
        detail: Optional custom detail (overrides the registry message)

    Returns:
        Dict with error, detail, error_code, and action fields
    """
    error_info = get_error_info(error_code)
    return {
        "error": error_code.name.lower(),
        "detail": detail if detail is not None else error_info.message,
        "error_code": error_code.value,
        "action": error_info.action,
    }

"""Unit tests for the standard error response shape."""

import pytest

from storefront.api.shared.helpers import (
    ErrorCode,
    create_error_response,
    error_code_for_status,
)
from storefront.api.shared.helpers.errors import ERROR_REGISTRY


class TestErrorCodes:
    @pytest.mark.parametrize(
        "status_code, expected",
        [
            (400, ErrorCode.VAL_INVALID_REQUEST),
            (401, ErrorCode.AUTH_MISSING_TOKEN),
            (403, ErrorCode.AUTH_FORBIDDEN),
            (404, ErrorCode.RES_NOT_FOUND),
            (409, ErrorCode.RES_CONFLICT),
            (429, ErrorCode.LIMIT_RATE_EXCEEDED),
            (500, ErrorCode.SYS_INTERNAL_ERROR),
            (503, ErrorCode.SYS_UNAVAILABLE),
        ],
    )
    def test_status_mapping(self, status_code, expected):
        assert error_code_for_status(status_code) == expected

    def test_unlisted_client_error(self):
        assert error_code_for_status(418) == ErrorCode.VAL_INVALID_REQUEST

    def test_unlisted_server_error(self):
        assert error_code_for_status(502) == ErrorCode.UNKNOWN

    def test_every_code_is_registered(self):
        assert set(ERROR_REGISTRY) == set(ErrorCode)


class TestCreateErrorResponse:
    def test_custom_detail(self):
        body = create_error_response(ErrorCode.RES_NOT_FOUND, "Product not found")

        assert body == {
            "error": "res_not_found",
            "detail": "Product not found",
            "error_code": "ERR_RES_001",
            "action": "It may have been removed. Refresh and try again.",
        }

    def test_default_detail(self):
        body = create_error_response(ErrorCode.AUTH_FORBIDDEN)
        assert body["detail"] == ERROR_REGISTRY[ErrorCode.AUTH_FORBIDDEN].message

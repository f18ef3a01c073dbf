"""
Unit tests for the service error taxonomy
"""

import pytest

from utils.exceptions import (
    QuoteServiceError, ConfigurationError, UnauthorizedError, ForbiddenError, NotFoundError,
    InvalidOperationError, InvalidIdError, InvalidRequestBodyError, StoreError, ErrorCodes, create_error_response,
)


@pytest.mark.unit
class TestExceptions:
    """Test cases for service exceptions"""

    @pytest.mark.parametrize("error_class,status_code", [
        (UnauthorizedError, 401),
        (ForbiddenError, 403),
        (InvalidOperationError, 403),
        (NotFoundError, 404),
        (InvalidIdError, 400),
        (InvalidRequestBodyError, 400),
        (StoreError, 500),
        (ConfigurationError, 500),
    ])
    def test_status_codes(self, error_class, status_code):
        error = error_class()
        assert isinstance(error, QuoteServiceError)
        assert error.status_code == status_code

    def test_defaults(self):
        error = NotFoundError()
        assert error.message == "Quote not found"
        assert error.error_code == "NotFoundError"
        assert error.context == {}

    def test_str_includes_code(self):
        error = ForbiddenError("Forbidden access", ErrorCodes.AUTH_TOKEN_REJECTED)
        assert str(error) == f"[{ErrorCodes.AUTH_TOKEN_REJECTED}] Forbidden access"

    def test_error_response_client_error(self):
        error = InvalidOperationError("Approved quotes cannot be deleted", ErrorCodes.QUOTE_ALREADY_APPROVED)
        assert create_error_response(error) == {"message": "Approved quotes cannot be deleted"}

    @pytest.mark.parametrize("error", [
        StoreError("connection to 10.0.0.5:27017 refused", ErrorCodes.DB_CONNECTION_FAILED),
        ConfigurationError("missing credentials file /etc/keys.json", ErrorCodes.CONFIG_MISSING_KEY),
    ])
    def test_error_response_hides_server_details(self, error):
        """Test server-side failures never expose their message"""
        assert create_error_response(error) == {"message": "Internal server error"}

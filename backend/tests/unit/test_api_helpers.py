"""Tests for Up error to HTTP error mapping."""

import pytest

from api.helpers import up_error_to_http
from integrations.exceptions import UpAPIError, UpAuthError, UpConnectionError, UpDataError
from services.aggregation_service import AggregationError


class TestUpErrorToHttp:
    def test_auth_error_is_401(self):
        exc = up_error_to_http(UpAuthError("Up API Error (401): Not Authorized"), "fetch accounts")
        assert exc.status_code == 401
        assert "token appears to be invalid" in exc.detail

    def test_api_error_keeps_up_message(self):
        exc = up_error_to_http(UpAPIError("Up API Error (500): Boom", status_code=500), "fetch accounts")
        assert exc.status_code == 500
        assert exc.detail == "Up API Error (500): Boom"

    def test_connection_error(self):
        exc = up_error_to_http(UpConnectionError("timed out"), "fetch accounts")
        assert exc.status_code == 500
        assert exc.detail == "Could not reach the Up API to fetch accounts."

    def test_data_error_is_generic(self):
        exc = up_error_to_http(UpDataError("bad json"), "fetch accounts")
        assert exc.status_code == 500
        assert exc.detail == "Failed to fetch accounts."

    def test_aggregation_error_unwrapped(self):
        wrapped = AggregationError(UpAuthError("401"), pages_fetched=2, partial_items=[{}])
        assert up_error_to_http(wrapped, "fetch accounts").status_code == 401

    def test_other_exceptions_rejected(self):
        with pytest.raises(TypeError):
            up_error_to_http(KeyError("x"), "fetch accounts")

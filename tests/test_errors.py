# Snowflake SQL MCP Server
# File: tests/test_errors.py
# Version: v1

"""Classification of SQL API failures into the error taxonomy."""

import httpx
import pytest

from snowflake_sql_mcp.errors import (
    AuthenticationError,
    ErrorKind,
    ExecutionTimeoutError,
    NotFoundError,
    RateLimitError,
    SnowflakeApiError,
    StatementError,
    ValidationError,
    error_from_request_error,
    error_from_response,
    format_error_for_logging,
    is_retryable_error,
)


def _response(status: int, json=None, headers=None, content=None) -> httpx.Response:
    request = httpx.Request("POST", "https://acme.snowflakecomputing.com/api/v2/statements")
    if json is not None:
        return httpx.Response(status, json=json, headers=headers, request=request)
    return httpx.Response(status, content=content or b"", headers=headers, request=request)


def test_rate_limit_uses_retry_after_header() -> None:
    err = error_from_response(_response(429, headers={"Retry-After": "30"}))
    assert isinstance(err, RateLimitError)
    assert err.retry_after_seconds == 30
    assert err.retryable is True
    assert err.status_code == 429


@pytest.mark.parametrize("header", [None, "", "soon"])
def test_rate_limit_defaults_to_sixty_seconds(header) -> None:
    headers = {"Retry-After": header} if header is not None else None
    err = error_from_response(_response(429, headers=headers))
    assert isinstance(err, RateLimitError)
    assert err.retry_after_seconds == 60


@pytest.mark.parametrize("status", [401, 403])
def test_auth_failures(status) -> None:
    err = error_from_response(_response(status, json={"message": "JWT expired"}))
    assert isinstance(err, AuthenticationError)
    assert err.status_code == status
    assert err.retryable is False
    assert err.kind is ErrorKind.AUTHENTICATION_FAILED


def test_execution_timeout_keeps_handle() -> None:
    err = error_from_response(
        _response(408, json={"message": "timed out", "statementHandle": "01b2-abc"})
    )
    assert isinstance(err, ExecutionTimeoutError)
    assert err.statement_handle == "01b2-abc"
    assert err.retryable is True


def test_statement_error_carries_sql_details() -> None:
    err = error_from_response(
        _response(
            422,
            json={
                "message": "SQL compilation error: Object 'FOO' does not exist",
                "statementHandle": "h-1",
                "sqlState": "42S02",
                "code": "002003",
            },
        )
    )
    assert isinstance(err, StatementError)
    assert err.sql_state == "42S02"
    assert err.vendor_code == "002003"
    assert err.statement_handle == "h-1"
    assert err.retryable is False
    assert "FOO" in err.message


def test_generic_error_with_unparseable_body() -> None:
    err = error_from_response(_response(500, content=b"<html>oops</html>"))
    assert type(err) is SnowflakeApiError
    assert err.kind is ErrorKind.GENERIC_API_ERROR
    assert err.status_code == 500
    assert err.message == "Snowflake API error: 500"


def test_generic_error_prefers_body_message() -> None:
    err = error_from_response(_response(400, json={"message": "bad request body"}))
    assert err.message == "bad request body"
    assert err.status_code == 400


def test_request_error_is_retryable_network_error() -> None:
    exc = httpx.ConnectError("connection refused")
    err = error_from_request_error(exc, "https://acme.snowflakecomputing.com/api/v2/statements")
    assert err.code == "NETWORK_ERROR"
    assert is_retryable_error(err) is True
    assert "connection refused" in err.message


def test_not_found_and_validation_shapes() -> None:
    nf = NotFoundError("Warehouse", "MISSING_WH")
    assert nf.message == "Warehouse 'MISSING_WH' not found"
    assert nf.to_dict()["identifier"] == "MISSING_WH"

    ve = ValidationError("bad input", {"partition": ["must be >= 0"]})
    assert ve.to_dict()["details"] == {"partition": ["must be >= 0"]}


def test_helpers_handle_foreign_exceptions() -> None:
    assert is_retryable_error(ValueError("x")) is False
    assert format_error_for_logging(ValueError("x")) == {"name": "ValueError", "message": "x"}

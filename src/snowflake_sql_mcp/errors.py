# Snowflake SQL MCP Server
# File: errors.py
# Version: v1

"""Error taxonomy for the Snowflake SQL API.

Every remote failure is turned into one of the exceptions below by
``error_from_response`` (HTTP status codes) or ``error_from_request_error``
(transport failures). Callers only ever see ``SnowflakeApiError`` and its
subclasses. Nothing here retries: ``retryable`` and ``retry_after_seconds``
are hints for the caller.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

DEFAULT_RETRY_AFTER_SECONDS = 60


class ErrorKind(str, Enum):
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    EXECUTION_TIMEOUT = "EXECUTION_TIMEOUT"
    STATEMENT_ERROR = "STATEMENT_ERROR"
    NOT_FOUND = "NOT_FOUND"
    GENERIC_API_ERROR = "GENERIC_API_ERROR"
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class SnowflakeApiError(RuntimeError):
    """Base error, and the generic kind for any unmodelled non-2xx response."""

    kind = ErrorKind.GENERIC_API_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        retryable: bool = False,
        sql_state: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code or "SNOWFLAKE_ERROR"
        self.retryable = retryable
        self.sql_state = sql_state

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serialisable view, used for logging and tool responses."""
        out: Dict[str, Any] = {
            "name": type(self).__name__,
            "kind": self.kind.value,
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "retryable": self.retryable,
            "sql_state": self.sql_state,
        }
        out.update(self._extra())
        return out

    def _extra(self) -> Dict[str, Any]:
        return {}


class RateLimitError(SnowflakeApiError):
    kind = ErrorKind.RATE_LIMIT_EXCEEDED

    def __init__(
        self,
        message: str,
        retry_after_seconds: int = DEFAULT_RETRY_AFTER_SECONDS,
    ) -> None:
        super().__init__(message, 429, "RATE_LIMIT_EXCEEDED", retryable=True)
        self.retry_after_seconds = retry_after_seconds

    def _extra(self) -> Dict[str, Any]:
        return {"retry_after_seconds": self.retry_after_seconds}


class AuthenticationError(SnowflakeApiError):
    kind = ErrorKind.AUTHENTICATION_FAILED

    def __init__(self, message: str, status_code: int = 401) -> None:
        super().__init__(message, status_code, "AUTHENTICATION_FAILED", retryable=False)


class ExecutionTimeoutError(SnowflakeApiError):
    """The remote side gave up on the statement (HTTP 408)."""

    kind = ErrorKind.EXECUTION_TIMEOUT

    def __init__(self, message: str, statement_handle: Optional[str] = None) -> None:
        super().__init__(message, 408, "EXECUTION_TIMEOUT", retryable=True)
        self.statement_handle = statement_handle

    def _extra(self) -> Dict[str, Any]:
        return {"statement_handle": self.statement_handle}


class StatementError(SnowflakeApiError):
    """The statement was accepted but failed to execute (HTTP 422)."""

    kind = ErrorKind.STATEMENT_ERROR

    def __init__(
        self,
        message: str,
        statement_handle: Optional[str] = None,
        sql_state: Optional[str] = None,
        vendor_code: Optional[str] = None,
    ) -> None:
        super().__init__(message, 422, "STATEMENT_ERROR", retryable=False, sql_state=sql_state)
        self.statement_handle = statement_handle
        self.vendor_code = vendor_code

    def _extra(self) -> Dict[str, Any]:
        return {
            "statement_handle": self.statement_handle,
            "vendor_code": self.vendor_code,
        }


class NotFoundError(SnowflakeApiError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity_type: str, identifier: str) -> None:
        super().__init__(f"{entity_type} '{identifier}' not found", 404, "NOT_FOUND", retryable=False)
        self.entity_type = entity_type
        self.identifier = identifier

    def _extra(self) -> Dict[str, Any]:
        return {"entity_type": self.entity_type, "identifier": self.identifier}


class MissingCredentialError(SnowflakeApiError):
    kind = ErrorKind.MISSING_CREDENTIAL

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message, None, "MISSING_CREDENTIAL", retryable=False)
        self.field = field

    def _extra(self) -> Dict[str, Any]:
        return {"field": self.field}


class ValidationError(SnowflakeApiError):
    kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, List[str]]] = None) -> None:
        super().__init__(message, 400, "VALIDATION_ERROR", retryable=False)
        self.details = details or {}

    def _extra(self) -> Dict[str, Any]:
        return {"details": self.details}


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    """Best-effort JSON object from an error response ({} when unparseable)."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _parse_retry_after(raw: Optional[str]) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        return int(raw.strip())
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS


def _opt_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def error_from_response(response: httpx.Response) -> SnowflakeApiError:
    """Map a non-2xx SQL API response onto the taxonomy."""
    status = response.status_code

    if status == 429:
        return RateLimitError(
            "Rate limit exceeded",
            _parse_retry_after(response.headers.get("Retry-After")),
        )

    if status in (401, 403):
        return AuthenticationError(
            "Authentication failed. Check your Snowflake account and JWT token.",
            status_code=status,
        )

    body = _json_body(response)

    if status == 408:
        return ExecutionTimeoutError(
            body.get("message") or "Statement execution timed out",
            _opt_str(body.get("statementHandle")),
        )

    if status == 422:
        return StatementError(
            body.get("message") or "Statement execution failed",
            statement_handle=_opt_str(body.get("statementHandle")),
            sql_state=_opt_str(body.get("sqlState")),
            vendor_code=_opt_str(body.get("code")),
        )

    message = body.get("message") or body.get("error") or f"Snowflake API error: {status}"
    return SnowflakeApiError(
        str(message),
        status_code=status,
        sql_state=_opt_str(body.get("sqlState")),
    )


def error_from_request_error(exc: httpx.RequestError, url: str) -> SnowflakeApiError:
    """Coerce a transport failure (DNS, connect, read timeout, ...) to the generic kind."""
    return SnowflakeApiError(
        f"Error calling Snowflake SQL API at '{url}': {exc}",
        code="NETWORK_ERROR",
        retryable=True,
    )


# ---------------------------------------------------------------------------
# Helpers for callers
# ---------------------------------------------------------------------------


def is_retryable_error(error: BaseException) -> bool:
    if isinstance(error, SnowflakeApiError):
        return error.retryable
    return False


def format_error_for_logging(error: BaseException) -> Dict[str, Any]:
    if isinstance(error, SnowflakeApiError):
        return error.to_dict()
    return {"name": type(error).__name__, "message": str(error)}

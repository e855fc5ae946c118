# Snowflake SQL MCP Server
# File: config.py
# Version: v1

"""Process-wide configuration for the Snowflake SQL MCP Server.

Nothing tenant-specific lives here: account, token and session defaults
arrive with each call (see ``credentials.py``).
"""

from __future__ import annotations

from dataclasses import dataclass
import os


def _parse_bool_env(name: str, default: bool = False) -> bool:
    """Parse a boolean-like environment variable.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _parse_int_env(
    name: str,
    default: int,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """Parse an int environment variable with clamping and safe fallback."""
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        value = int(default)
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            value = int(default)

    if min_value is not None and value < min_value:
        value = min_value
    if max_value is not None and value > max_value:
        value = max_value

    return value


@dataclass
class ServerConfig:
    """Settings shared by every tenant served by this process."""

    api_domain: str = "snowflakecomputing.com"

    # Statement timeouts (seconds) sent to the SQL API.
    default_timeout: int = 60
    list_timeout: int = 30

    # Local socket timeout floor for outbound HTTP calls.
    http_timeout: int = 90
    verify_tls: bool = True

    # Rendering limits for the tool layer.
    character_limit: int = 50000
    max_markdown_rows: int = 100

    # HTTP transport bind address.
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create configuration from environment variables."""
        api_domain = (os.getenv("SNOWFLAKE_API_DOMAIN") or "").strip()

        return cls(
            api_domain=api_domain or "snowflakecomputing.com",
            default_timeout=_parse_int_env(
                "SNOWFLAKE_DEFAULT_TIMEOUT", default=60, min_value=1, max_value=3600
            ),
            list_timeout=_parse_int_env(
                "SNOWFLAKE_LIST_TIMEOUT", default=30, min_value=1, max_value=3600
            ),
            http_timeout=_parse_int_env(
                "SNOWFLAKE_HTTP_TIMEOUT", default=90, min_value=1, max_value=86400
            ),
            verify_tls=_parse_bool_env("SNOWFLAKE_VERIFY_TLS", default=True),
            character_limit=_parse_int_env(
                "CHARACTER_LIMIT", default=50000, min_value=1000, max_value=10000000
            ),
            max_markdown_rows=_parse_int_env(
                "SNOWFLAKE_MAX_MARKDOWN_ROWS", default=100, min_value=1, max_value=10000
            ),
            host=(os.getenv("SNOWFLAKE_MCP_HOST") or "127.0.0.1").strip(),
            port=_parse_int_env(
                "SNOWFLAKE_MCP_PORT", default=8000, min_value=1, max_value=65535
            ),
        )

    def http_timeout_for(self, statement_timeout: int | None) -> float:
        """Socket timeout for a call whose statement may run ``statement_timeout`` s.

        The remote statement timeout has to fire first so it surfaces as a
        408 from the API rather than a local read timeout.
        """
        if statement_timeout is None:
            return float(self.http_timeout)
        return float(max(self.http_timeout, int(statement_timeout) + 10))

# Snowflake SQL MCP Server
# File: credentials.py
# Version: v1

"""Per-call tenant credentials.

A ``TenantCredentials`` value is built from transport headers for every
inbound call and dropped when the call finishes. It is never cached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
import os

from .errors import MissingCredentialError

ACCOUNT_HEADER = "X-Snowflake-Account"
TOKEN_HEADER = "X-Snowflake-Token"
WAREHOUSE_HEADER = "X-Snowflake-Warehouse"
DATABASE_HEADER = "X-Snowflake-Database"
SCHEMA_HEADER = "X-Snowflake-Schema"
ROLE_HEADER = "X-Snowflake-Role"

# Env fallback used by the stdio transport, which has no request headers.
_ENV_TO_HEADER = {
    "SNOWFLAKE_ACCOUNT": ACCOUNT_HEADER,
    "SNOWFLAKE_TOKEN": TOKEN_HEADER,
    "SNOWFLAKE_WAREHOUSE": WAREHOUSE_HEADER,
    "SNOWFLAKE_DATABASE": DATABASE_HEADER,
    "SNOWFLAKE_SCHEMA": SCHEMA_HEADER,
    "SNOWFLAKE_ROLE": ROLE_HEADER,
}


@dataclass(frozen=True)
class TenantCredentials:
    """Identity plus default session context for one tenant call."""

    account: str
    token: str = field(repr=False)
    warehouse: Optional[str] = None
    database: Optional[str] = None
    schema: Optional[str] = None
    role: Optional[str] = None

    def redacted(self) -> Dict[str, Any]:
        """Loggable view; the token is never included."""
        return {
            "account": self.account,
            "token": "***" if self.token else None,
            "warehouse": self.warehouse,
            "database": self.database,
            "schema": self.schema,
            "role": self.role,
        }


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_tenant_credentials(headers: Mapping[str, Any]) -> TenantCredentials:
    """Build credentials from transport headers (names are case-insensitive).

    Raises MissingCredentialError for the first missing required header,
    account before token. Optional headers default to None.
    """
    lowered = {str(k).lower(): v for k, v in headers.items()}

    def get(name: str) -> Optional[str]:
        return _clean(lowered.get(name.lower()))

    account = get(ACCOUNT_HEADER)
    if not account:
        raise MissingCredentialError(
            "account",
            f"Missing {ACCOUNT_HEADER} header. Provide your Snowflake account identifier.",
        )

    token = get(TOKEN_HEADER)
    if not token:
        raise MissingCredentialError(
            "token",
            f"Missing {TOKEN_HEADER} header. Provide your JWT token for authentication.",
        )

    return TenantCredentials(
        account=account,
        token=token,
        warehouse=get(WAREHOUSE_HEADER),
        database=get(DATABASE_HEADER),
        schema=get(SCHEMA_HEADER),
        role=get(ROLE_HEADER),
    )


def credentials_from_env() -> TenantCredentials:
    """Single-tenant fallback: read SNOWFLAKE_* variables as if they were headers."""
    headers = {
        header: os.getenv(env_name)
        for env_name, header in _ENV_TO_HEADER.items()
        if os.getenv(env_name) is not None
    }
    return parse_tenant_credentials(headers)

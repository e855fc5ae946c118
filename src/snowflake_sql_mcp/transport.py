# Snowflake SQL MCP Server
# File: transport.py
# Version: v1

"""Authenticated HTTP access to the Snowflake SQL API (``/api/v2``).

Every remote call made by the adapter goes through ``SqlApiTransport.request``,
which is also the only place where HTTP failures are classified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import logging

import httpx
from httpx import RequestError

from . import __version__
from .config import ServerConfig
from .credentials import TenantCredentials
from .errors import error_from_request_error, error_from_response

logger = logging.getLogger(__name__)

USER_AGENT = f"snowflake-sql-mcp/{__version__}"
TOKEN_TYPE_HEADER = "X-Snowflake-Authorization-Token-Type"
TOKEN_TYPE = "KEYPAIR_JWT"


@dataclass
class SqlApiTransport:
    """Per-tenant HTTP helper. Holds no connection state between calls."""

    credentials: TenantCredentials
    config: ServerConfig = field(default_factory=ServerConfig)

    # Injected by tests (httpx.MockTransport); None means real network I/O.
    http_transport: Optional[httpx.AsyncBaseTransport] = None

    @property
    def base_url(self) -> str:
        return f"https://{self.credentials.account}.{self.config.api_domain}/api/v2"

    def auth_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.credentials.token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            TOKEN_TYPE_HEADER: TOKEN_TYPE,
            "User-Agent": USER_AGENT,
        }

    async def request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Send one request and return the decoded JSON object.

        Raises a SnowflakeApiError subclass for any non-2xx status or
        transport failure. A 2xx with an empty body returns {}.
        """
        url = f"{self.base_url}{path}"
        logger.debug(
            "Snowflake SQL API %s %s (tenant=%s, params=%s)",
            method,
            path,
            self.credentials.redacted(),
            params,
        )

        async with httpx.AsyncClient(
            timeout=timeout or float(self.config.http_timeout),
            verify=self.config.verify_tls,
            transport=self.http_transport,
        ) as http_client:
            try:
                response = await http_client.request(
                    method,
                    url,
                    headers=self.auth_headers(),
                    json=json_body,
                    params=params or None,
                )
            except RequestError as exc:
                error = error_from_request_error(exc, url)
                logger.warning("Snowflake SQL API transport failure: %s", error.message)
                raise error from exc

        if not response.is_success:
            error = error_from_response(response)
            logger.warning(
                "Snowflake SQL API %s %s failed: HTTP %s %s (%s)",
                method,
                path,
                response.status_code,
                error.code,
                error.message,
            )
            raise error

        if not response.content:
            return {}

        try:
            data = response.json()
        except ValueError:
            return {"message": response.text[:500]}

        return data if isinstance(data, dict) else {"data": data}

# Snowflake SQL MCP Server
# File: client.py
# Version: v1
"""High-level client for the Snowflake SQL API.

Implements:

- execute_statement() / execute_statement_async() via POST /statements
- get_statement_status() / get_statement_result() via GET /statements/{handle}
- cancel_statement() via POST /statements/{handle}/cancel
- list_databases(), list_schemas(), list_tables(), list_views(),
  describe_table() on top of SHOW / DESCRIBE commands
- list_warehouses(), get_warehouse_status(), resume_warehouse(),
  suspend_warehouse()

One client is created per inbound call with that call's credentials.
Waiting for a running statement is up to the caller: nothing here polls.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, is_dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote
import logging

import httpx

from . import mapping
from .config import ServerConfig
from .credentials import TenantCredentials
from .errors import NotFoundError, SnowflakeApiError
from .models import (
    Column,
    ConnectionStatus,
    Database,
    OperationResult,
    PaginatedResponse,
    Row,
    Schema,
    StatementRequest,
    StatementResult,
    StatementStatus,
    Table,
    View,
    Warehouse,
)
from .transport import SqlApiTransport

logger = logging.getLogger(__name__)


def _handle_path(statement_handle: str, suffix: str = "") -> str:
    # The handle is opaque; escape it rather than trusting its shape.
    return f"/statements/{quote(str(statement_handle), safe='')}{suffix}"


@dataclass
class SnowflakeClient:
    """Statement lifecycle adapter bound to one tenant's credentials."""

    credentials: TenantCredentials
    config: ServerConfig = field(default_factory=ServerConfig)
    http_transport: Optional[httpx.AsyncBaseTransport] = None

    def __post_init__(self) -> None:
        self.transport = SqlApiTransport(
            credentials=self.credentials,
            config=self.config,
            http_transport=self.http_transport,
        )

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    async def test_connection(self) -> ConnectionStatus:
        """Run a trivial identity query with the tenant's defaults."""
        try:
            result = await self.execute_statement(
                StatementRequest(
                    statement="SELECT CURRENT_USER(), CURRENT_ACCOUNT(), CURRENT_ROLE()",
                    timeout=30,
                )
            )
        except SnowflakeApiError as exc:
            return ConnectionStatus(
                connected=False,
                message=exc.message,
                account=self.credentials.account,
            )

        if result.status == StatementStatus.SUCCESS and result.data:
            row = list(result.data[0]) + [None, None, None]
            user, account, role = row[0], row[1], row[2]
            return ConnectionStatus(
                connected=True,
                message=f"Connected as {user} with role {role}",
                account=str(account or self.credentials.account),
            )

        return ConnectionStatus(
            connected=False,
            message="Connection test returned unexpected response",
            account=self.credentials.account,
        )

    # ------------------------------------------------------------------
    # Statement execution
    # ------------------------------------------------------------------

    def _statement_body(self, request: StatementRequest) -> Dict[str, Any]:
        """Request body with tenant defaults filled in for absent context."""
        creds = self.credentials
        body: Dict[str, Any] = {
            "statement": request.statement,
            "timeout": request.timeout or self.config.default_timeout,
        }

        context = {
            "database": request.database or creds.database,
            "schema": request.schema or creds.schema,
            "warehouse": request.warehouse or creds.warehouse,
            "role": request.role or creds.role,
        }
        body.update({k: v for k, v in context.items() if v})

        if request.bindings:
            body["bindings"] = {
                key: asdict(value) if is_dataclass(value) else value
                for key, value in request.bindings.items()
            }
        if request.parameters:
            body["parameters"] = dict(request.parameters)

        return body

    async def _submit(self, request: StatementRequest, asynchronous: bool) -> StatementResult:
        body = self._statement_body(request)
        payload = await self.transport.request(
            "POST",
            "/statements",
            json_body=body,
            params={"async": "true"} if asynchronous else None,
            timeout=self.config.http_timeout_for(body["timeout"]),
        )
        return mapping.map_statement_response(payload)

    async def execute_statement(self, request: StatementRequest) -> StatementResult:
        """Submit and block until the API answers (or its own timeout fires)."""
        return await self._submit(request, asynchronous=False)

    async def execute_statement_async(self, request: StatementRequest) -> StatementResult:
        """Submit with ``async=true``; returns a handle without rows."""
        return await self._submit(request, asynchronous=True)

    async def get_statement_status(self, statement_handle: str) -> StatementResult:
        payload = await self.transport.request("GET", _handle_path(statement_handle))
        return mapping.map_statement_response(payload)

    async def get_statement_result(
        self,
        statement_handle: str,
        partition: int = 0,
    ) -> StatementResult:
        payload = await self.transport.request(
            "GET",
            _handle_path(statement_handle),
            params={"partition": str(int(partition))},
        )
        return mapping.map_statement_response(payload)

    async def get_statement_page(
        self,
        statement_handle: str,
        partition: int = 0,
        partition_count: Optional[int] = None,
    ) -> PaginatedResponse[Row]:
        """Fetch one partition as a page of raw rows.

        Iterate by following ``next_partition`` while ``has_more`` is true,
        passing along ``partition_count`` from the previous page.
        """
        result = await self.get_statement_result(statement_handle, partition)
        return mapping.partition_page(result, partition, partition_count)

    async def cancel_statement(self, statement_handle: str) -> OperationResult:
        """Best-effort cancel; a 2xx counts as success even if already finished."""
        payload = await self.transport.request("POST", _handle_path(statement_handle, "/cancel"))
        logger.info("Cancel requested for statement %s: %s", statement_handle, payload.get("message"))
        return OperationResult(
            success=True,
            message=f"Statement {statement_handle} cancelled successfully",
        )

    # ------------------------------------------------------------------
    # Schema introspection
    # ------------------------------------------------------------------

    async def _run_list_command(self, statement: str) -> StatementResult:
        return await self.execute_statement(
            StatementRequest(statement=statement, timeout=self.config.list_timeout)
        )

    async def list_databases(self) -> PaginatedResponse[Database]:
        result = await self._run_list_command("SHOW DATABASES")
        return mapping.map_databases(result)

    async def list_schemas(self, database: str) -> PaginatedResponse[Schema]:
        result = await self._run_list_command(
            f"SHOW SCHEMAS IN DATABASE {mapping.quote_identifier(database)}"
        )
        return mapping.map_schemas(result, database)

    async def list_tables(self, database: str, schema: str) -> PaginatedResponse[Table]:
        result = await self._run_list_command(
            f"SHOW TABLES IN {mapping.qualified_name(database, schema)}"
        )
        return mapping.map_tables(result, database, schema)

    async def list_views(self, database: str, schema: str) -> PaginatedResponse[View]:
        result = await self._run_list_command(
            f"SHOW VIEWS IN {mapping.qualified_name(database, schema)}"
        )
        return mapping.map_views(result, database, schema)

    async def describe_table(
        self,
        database: str,
        schema: str,
        table: str,
    ) -> PaginatedResponse[Column]:
        result = await self._run_list_command(
            f"DESCRIBE TABLE {mapping.qualified_name(database, schema, table)}"
        )
        return mapping.map_columns(result)

    # ------------------------------------------------------------------
    # Warehouses
    # ------------------------------------------------------------------

    async def list_warehouses(self) -> PaginatedResponse[Warehouse]:
        result = await self._run_list_command("SHOW WAREHOUSES")
        return mapping.map_warehouses(result)

    async def get_warehouse_status(self, warehouse_name: str) -> Warehouse:
        """Look up one warehouse; raises NotFoundError when it is not listed.

        LIKE treats ``_`` and ``%`` as wildcards, so an exact
        (case-insensitive) name match is required among the results.
        """
        result = await self._run_list_command(
            f"SHOW WAREHOUSES LIKE {mapping.quote_literal(warehouse_name)}"
        )
        warehouses = mapping.map_warehouses(result)

        wanted = warehouse_name.lower()
        for warehouse in warehouses.items:
            if warehouse.name.lower() == wanted:
                return warehouse

        raise NotFoundError("Warehouse", warehouse_name)

    async def _alter_warehouse(self, warehouse_name: str, action: str) -> None:
        await self.execute_statement(
            StatementRequest(
                statement=f"ALTER WAREHOUSE {mapping.quote_identifier(warehouse_name)} {action}",
                timeout=60,
            )
        )

    async def resume_warehouse(self, warehouse_name: str) -> OperationResult:
        await self._alter_warehouse(warehouse_name, "RESUME")
        return OperationResult(
            success=True,
            message=f"Warehouse '{warehouse_name}' resumed successfully",
        )

    async def suspend_warehouse(self, warehouse_name: str) -> OperationResult:
        await self._alter_warehouse(warehouse_name, "SUSPEND")
        return OperationResult(
            success=True,
            message=f"Warehouse '{warehouse_name}' suspended successfully",
        )


def create_client(
    credentials: TenantCredentials,
    config: Optional[ServerConfig] = None,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SnowflakeClient:
    """Create a client scoped to one tenant call."""
    return SnowflakeClient(
        credentials=credentials,
        config=config or ServerConfig.from_env(),
        http_transport=http_transport,
    )

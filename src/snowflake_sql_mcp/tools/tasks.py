# Snowflake SQL MCP Server
# File: tools/tasks.py
# Version: v1
#
# NOTE: This module is the single place where we define the behaviour
# exposed as MCP tools. The transports (stdio / http) simply call
# `register_tools(server)` to wire these up.

from __future__ import annotations

from dataclasses import replace
from typing import Any, Awaitable, Dict, Mapping, Optional
import logging

from .. import mapping
from ..client import SnowflakeClient, create_client
from ..config import ServerConfig
from ..credentials import TenantCredentials, credentials_from_env, parse_tenant_credentials
from ..errors import SnowflakeApiError, ValidationError, is_retryable_error
from ..formatters import (
    format_error,
    format_paginated_markdown,
    format_statement_result_markdown,
    format_warehouse_markdown,
    truncate_text,
)
from ..models import PaginatedResponse, StatementRequest, StatementResult

logger = logging.getLogger(__name__)

_FORMATS = {"json", "markdown"}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _make_client(credentials: TenantCredentials) -> SnowflakeClient:
    """Create a fresh client for one call.

    Tests replace this with a lambda returning a fake client.
    """
    return create_client(credentials, ServerConfig.from_env())


def _check_format(fmt: str) -> str:
    value = (fmt or "json").strip().lower()
    if value not in _FORMATS:
        raise ValidationError(
            f"Unsupported format '{fmt}'. Use 'json' or 'markdown'.",
            {"format": ["must be 'json' or 'markdown'"]},
        )
    return value


def _markdown(text: str) -> Dict[str, Any]:
    cfg = ServerConfig.from_env()
    return {"format": "markdown", "text": truncate_text(text, cfg.character_limit)}


def _page_out(page: PaginatedResponse[Any], entity_type: str, fmt: str) -> Dict[str, Any]:
    if _check_format(fmt) == "markdown":
        return _markdown(format_paginated_markdown(page, entity_type))
    return page.to_dict()


def _result_out(result: StatementResult, fmt: str) -> Dict[str, Any]:
    if _check_format(fmt) == "markdown":
        cfg = ServerConfig.from_env()
        return _markdown(format_statement_result_markdown(result, cfg.max_markdown_rows))
    return result.to_dict()


# ---------------------------------------------------------------------------
# Core async tasks (library-style)
# ---------------------------------------------------------------------------


async def test_connection(credentials: TenantCredentials) -> Dict[str, Any]:
    client = _make_client(credentials)
    status = await client.test_connection()
    return status.to_dict()


async def execute(
    credentials: TenantCredentials,
    statement: str,
    database: Optional[str] = None,
    schema: Optional[str] = None,
    warehouse: Optional[str] = None,
    role: Optional[str] = None,
    timeout: int = 60,
    format: str = "json",
) -> Dict[str, Any]:
    _check_format(format)
    client = _make_client(credentials)
    result = await client.execute_statement(
        StatementRequest(
            statement=statement,
            timeout=timeout,
            database=database,
            schema=schema,
            warehouse=warehouse,
            role=role,
        )
    )
    return _result_out(result, format)


async def execute_async(
    credentials: TenantCredentials,
    statement: str,
    database: Optional[str] = None,
    schema: Optional[str] = None,
    warehouse: Optional[str] = None,
    role: Optional[str] = None,
    timeout: int = 3600,
) -> Dict[str, Any]:
    client = _make_client(credentials)
    result = await client.execute_statement_async(
        StatementRequest(
            statement=statement,
            timeout=timeout,
            database=database,
            schema=schema,
            warehouse=warehouse,
            role=role,
        )
    )
    return {
        "statement_handle": result.statement_handle,
        "status": result.status.value,
        "message": (
            "Statement submitted for async execution. "
            "Use snowflake_get_status to check progress."
        ),
        "remote_message": result.message,
        "statement_status_url": result.statement_status_url,
    }


async def get_status(credentials: TenantCredentials, statement_handle: str) -> Dict[str, Any]:
    client = _make_client(credentials)
    result = await client.get_statement_status(statement_handle)
    meta = result.result_set_meta_data
    return {
        "statement_handle": result.statement_handle or statement_handle,
        "status": result.status.value,
        "message": result.message,
        "has_results": result.status.value == "success" and result.data is not None,
        "num_rows": meta.num_rows if meta is not None else None,
    }


async def get_result(
    credentials: TenantCredentials,
    statement_handle: str,
    partition: int = 0,
    format: str = "json",
    partition_count: Optional[int] = None,
) -> Dict[str, Any]:
    """Fetch one result partition plus paging fields.

    Only partition 0 reports ``partitionInfo``; for later partitions pass
    back the ``partition_count`` returned with partition 0.
    """
    _check_format(format)
    if partition < 0:
        raise ValidationError("partition must be >= 0", {"partition": ["must be >= 0"]})

    client = _make_client(credentials)
    result = await client.get_statement_result(statement_handle, partition)
    if not result.statement_handle:
        result = replace(result, statement_handle=statement_handle)

    page = mapping.partition_page(result, partition, partition_count)
    out = _result_out(result, format)
    out["partition"] = partition
    out["partition_count"] = page.partition_count
    out["has_more"] = page.has_more
    out["next_partition"] = page.next_partition
    return out


async def cancel(credentials: TenantCredentials, statement_handle: str) -> Dict[str, Any]:
    client = _make_client(credentials)
    result = await client.cancel_statement(statement_handle)
    return result.to_dict()


async def list_databases(credentials: TenantCredentials, format: str = "json") -> Dict[str, Any]:
    _check_format(format)
    page = await _make_client(credentials).list_databases()
    return _page_out(page, "databases", format)


async def list_schemas(
    credentials: TenantCredentials,
    database: str,
    format: str = "json",
) -> Dict[str, Any]:
    _check_format(format)
    page = await _make_client(credentials).list_schemas(database)
    return _page_out(page, "schemas", format)


async def list_tables(
    credentials: TenantCredentials,
    database: str,
    schema: str,
    format: str = "json",
) -> Dict[str, Any]:
    _check_format(format)
    page = await _make_client(credentials).list_tables(database, schema)
    return _page_out(page, "tables", format)


async def list_views(
    credentials: TenantCredentials,
    database: str,
    schema: str,
    format: str = "json",
) -> Dict[str, Any]:
    _check_format(format)
    page = await _make_client(credentials).list_views(database, schema)
    return _page_out(page, "views", format)


async def describe_table(
    credentials: TenantCredentials,
    database: str,
    schema: str,
    table: str,
    format: str = "json",
) -> Dict[str, Any]:
    _check_format(format)
    page = await _make_client(credentials).describe_table(database, schema, table)
    return _page_out(page, "columns", format)


async def list_warehouses(credentials: TenantCredentials, format: str = "json") -> Dict[str, Any]:
    _check_format(format)
    page = await _make_client(credentials).list_warehouses()
    return _page_out(page, "warehouses", format)


async def get_warehouse(
    credentials: TenantCredentials,
    name: str,
    format: str = "json",
) -> Dict[str, Any]:
    fmt = _check_format(format)
    warehouse = await _make_client(credentials).get_warehouse_status(name)
    if fmt == "markdown":
        return _markdown(format_warehouse_markdown(warehouse))
    return warehouse.to_dict()


async def resume_warehouse(credentials: TenantCredentials, name: str) -> Dict[str, Any]:
    result = await _make_client(credentials).resume_warehouse(name)
    return result.to_dict()


async def suspend_warehouse(credentials: TenantCredentials, name: str) -> Dict[str, Any]:
    result = await _make_client(credentials).suspend_warehouse(name)
    return result.to_dict()


# ---------------------------------------------------------------------------
# Per-call credential resolution
# ---------------------------------------------------------------------------


def _request_headers(server: Any) -> Optional[Mapping[str, str]]:
    """Headers of the inbound HTTP request, or None when not running over HTTP."""
    get_context = getattr(server, "get_context", None)
    if get_context is None:
        return None
    try:
        request = get_context().request_context.request
    except (LookupError, ValueError, AttributeError):
        return None
    return getattr(request, "headers", None)


def resolve_credentials(server: Any) -> TenantCredentials:
    """Credentials for the current tool call.

    Over HTTP the request headers are authoritative (no env fallback, so one
    tenant can never pick up another's identity). Over stdio the SNOWFLAKE_*
    environment variables stand in for headers.
    """
    headers = _request_headers(server)
    if headers is not None:
        return parse_tenant_credentials(headers)
    return credentials_from_env()


async def _guarded(tool_name: str, server: Any, call: Any) -> Dict[str, Any]:
    """Resolve credentials, run the task, and turn taxonomy errors into payloads."""
    try:
        credentials = resolve_credentials(server)
        awaitable: Awaitable[Dict[str, Any]] = call(credentials)
        return await awaitable
    except SnowflakeApiError as exc:
        logger.warning(
            "Tool %s failed (retryable=%s): %s",
            tool_name,
            is_retryable_error(exc),
            exc.to_dict(),
        )
        return format_error(exc)


# ---------------------------------------------------------------------------
# MCP tool registration
# ---------------------------------------------------------------------------


def register_tools(server: Any) -> None:
    """Register MCP tools on an MCP Server-like instance."""
    if server is None or not hasattr(server, "tool"):
        raise ValueError(
            "register_tools(server) expects an MCP Server-like object that exposes a .tool() decorator."
        )

    @server.tool(
        name="snowflake_test_connection",
        description="Test the connection to Snowflake using the provided credentials.",
    )
    async def mcp_test_connection() -> Dict[str, Any]:
        return await _guarded("snowflake_test_connection", server, test_connection)

    @server.tool(
        name="snowflake_execute",
        description=(
            "Execute a SQL statement synchronously and wait for the result. "
            "For long-running queries use snowflake_execute_async."
        ),
    )
    async def mcp_execute(
        statement: str,
        database: Optional[str] = None,
        schema: Optional[str] = None,
        warehouse: Optional[str] = None,
        role: Optional[str] = None,
        timeout: int = 60,
        format: str = "json",
    ) -> Dict[str, Any]:
        return await _guarded(
            "snowflake_execute",
            server,
            lambda creds: execute(
                creds,
                statement=statement,
                database=database,
                schema=schema,
                warehouse=warehouse,
                role=role,
                timeout=timeout,
                format=format,
            ),
        )

    @server.tool(
        name="snowflake_execute_async",
        description=(
            "Submit a SQL statement for asynchronous execution and return its handle. "
            "Poll with snowflake_get_status, then fetch rows with snowflake_get_result."
        ),
    )
    async def mcp_execute_async(
        statement: str,
        database: Optional[str] = None,
        schema: Optional[str] = None,
        warehouse: Optional[str] = None,
        role: Optional[str] = None,
        timeout: int = 3600,
    ) -> Dict[str, Any]:
        return await _guarded(
            "snowflake_execute_async",
            server,
            lambda creds: execute_async(
                creds,
                statement=statement,
                database=database,
                schema=schema,
                warehouse=warehouse,
                role=role,
                timeout=timeout,
            ),
        )

    @server.tool(
        name="snowflake_get_status",
        description="Check the execution status of a statement by its handle.",
    )
    async def mcp_get_status(statement_handle: str) -> Dict[str, Any]:
        return await _guarded(
            "snowflake_get_status",
            server,
            lambda creds: get_status(creds, statement_handle),
        )

    @server.tool(
        name="snowflake_get_result",
        description=(
            "Fetch one partition of a completed statement's rows (partition starts at 0). "
            "Keep requesting next_partition while has_more is true, passing back the "
            "partition_count returned with partition 0."
        ),
    )
    async def mcp_get_result(
        statement_handle: str,
        partition: int = 0,
        format: str = "json",
        partition_count: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await _guarded(
            "snowflake_get_result",
            server,
            lambda creds: get_result(
                creds,
                statement_handle,
                partition=partition,
                format=format,
                partition_count=partition_count,
            ),
        )

    @server.tool(
        name="snowflake_cancel",
        description="Cancel a running statement (best effort, safe to repeat).",
    )
    async def mcp_cancel(statement_handle: str) -> Dict[str, Any]:
        return await _guarded(
            "snowflake_cancel",
            server,
            lambda creds: cancel(creds, statement_handle),
        )

    @server.tool(
        name="snowflake_list_databases",
        description="List all databases accessible to the current role.",
    )
    async def mcp_list_databases(format: str = "json") -> Dict[str, Any]:
        return await _guarded(
            "snowflake_list_databases",
            server,
            lambda creds: list_databases(creds, format=format),
        )

    @server.tool(
        name="snowflake_list_schemas",
        description="List all schemas in a database.",
    )
    async def mcp_list_schemas(database: str, format: str = "json") -> Dict[str, Any]:
        return await _guarded(
            "snowflake_list_schemas",
            server,
            lambda creds: list_schemas(creds, database, format=format),
        )

    @server.tool(
        name="snowflake_list_tables",
        description="List tables in a database schema, with row counts and sizes.",
    )
    async def mcp_list_tables(database: str, schema: str, format: str = "json") -> Dict[str, Any]:
        return await _guarded(
            "snowflake_list_tables",
            server,
            lambda creds: list_tables(creds, database, schema, format=format),
        )

    @server.tool(
        name="snowflake_list_views",
        description="List views in a database schema.",
    )
    async def mcp_list_views(database: str, schema: str, format: str = "json") -> Dict[str, Any]:
        return await _guarded(
            "snowflake_list_views",
            server,
            lambda creds: list_views(creds, database, schema, format=format),
        )

    @server.tool(
        name="snowflake_describe_table",
        description="Describe the columns of a table or view.",
    )
    async def mcp_describe_table(
        database: str,
        schema: str,
        table: str,
        format: str = "json",
    ) -> Dict[str, Any]:
        return await _guarded(
            "snowflake_describe_table",
            server,
            lambda creds: describe_table(creds, database, schema, table, format=format),
        )

    @server.tool(
        name="snowflake_list_warehouses",
        description="List warehouses with their state, size and running / queued queries.",
    )
    async def mcp_list_warehouses(format: str = "json") -> Dict[str, Any]:
        return await _guarded(
            "snowflake_list_warehouses",
            server,
            lambda creds: list_warehouses(creds, format=format),
        )

    @server.tool(
        name="snowflake_get_warehouse",
        description="Get the detailed status of a single warehouse.",
    )
    async def mcp_get_warehouse(name: str, format: str = "json") -> Dict[str, Any]:
        return await _guarded(
            "snowflake_get_warehouse",
            server,
            lambda creds: get_warehouse(creds, name, format=format),
        )

    @server.tool(
        name="snowflake_resume_warehouse",
        description="Resume a suspended warehouse (it starts consuming credits).",
    )
    async def mcp_resume_warehouse(name: str) -> Dict[str, Any]:
        return await _guarded(
            "snowflake_resume_warehouse",
            server,
            lambda creds: resume_warehouse(creds, name),
        )

    @server.tool(
        name="snowflake_suspend_warehouse",
        description="Suspend a running warehouse to stop credit consumption.",
    )
    async def mcp_suspend_warehouse(name: str) -> Dict[str, Any]:
        return await _guarded(
            "snowflake_suspend_warehouse",
            server,
            lambda creds: suspend_warehouse(creds, name),
        )

# Snowflake SQL MCP Server
# File: formatters.py
# Version: v1

"""Markdown / JSON rendering helpers used by the MCP tools."""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from .errors import SnowflakeApiError, format_error_for_logging
from .models import PaginatedResponse, StatementResult, Warehouse

TRUNCATION_NOTICE = "\n\n_Output truncated to {limit} characters._"


def _dash(value: Any) -> str:
    if value is None or value == "":
        return "-"
    return str(value)


def _yes_no(value: Optional[bool], no: str = "-") -> str:
    return "YES" if value else no


def format_bytes(num_bytes: int) -> str:
    """Human-readable byte count (1024-based), e.g. 1536 -> '1.5 KB'."""
    if num_bytes <= 0:
        return "0 B"
    sizes = ["B", "KB", "MB", "GB", "TB", "PB"]
    value = float(num_bytes)
    i = 0
    while value >= 1024 and i < len(sizes) - 1:
        value /= 1024
        i += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {sizes[i]}"


def truncate_text(text: str, limit: int) -> str:
    if limit <= 0 or len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_NOTICE.format(limit=limit)


def _table(headers: Sequence[str], rows: List[Sequence[str]]) -> str:
    lines = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join("---" for _ in headers) + "|",
    ]
    for row in rows:
        lines.append("| " + " | ".join(row) + " |")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Per-entity tables
# ---------------------------------------------------------------------------


def _databases(items: List[Any]) -> str:
    return _table(
        ["Name", "Owner", "Origin", "Created"],
        [[i.name, _dash(i.owner), _dash(i.origin), _dash(i.created_on)] for i in items],
    )


def _schemas(items: List[Any]) -> str:
    return _table(
        ["Name", "Database", "Owner", "Created"],
        [[i.name, _dash(i.database_name), _dash(i.owner), _dash(i.created_on)] for i in items],
    )


def _tables(items: List[Any]) -> str:
    rows = []
    for t in items:
        rows.append(
            [
                t.name,
                t.kind or "TABLE",
                f"{t.rows:,}" if t.rows is not None else "-",
                format_bytes(t.bytes) if t.bytes is not None else "-",
                _dash(t.owner),
            ]
        )
    return _table(["Name", "Kind", "Rows", "Bytes", "Owner"], rows)


def _views(items: List[Any]) -> str:
    return _table(
        ["Name", "Secure", "Materialized", "Owner", "Created"],
        [
            [
                v.name,
                "Y" if v.is_secure else "N",
                "Y" if v.is_materialized else "N",
                _dash(v.owner),
                _dash(v.created_on),
            ]
            for v in items
        ],
    )


def _columns(items: List[Any]) -> str:
    return _table(
        ["Name", "Type", "Nullable", "Default", "PK"],
        [
            [c.name, c.type, _yes_no(c.nullable, "NO"), _dash(c.default), _yes_no(c.primary_key)]
            for c in items
        ],
    )


def _warehouses(items: List[Any]) -> str:
    return _table(
        ["Name", "State", "Size", "Running", "Queued"],
        [[w.name, w.state, _dash(w.size), _dash(w.running), _dash(w.queued)] for w in items],
    )


def _generic(items: List[Any]) -> str:
    records = [asdict(i) if is_dataclass(i) else i for i in items]
    first = records[0]
    if not isinstance(first, dict):
        return _table(["Value"], [[_dash(r)] for r in records])

    keys = list(first.keys())[:6]
    return _table(keys, [[_dash(r.get(k)) for k in keys] for r in records])


_ENTITY_TABLES: Dict[str, Callable[[List[Any]], str]] = {
    "databases": _databases,
    "schemas": _schemas,
    "tables": _tables,
    "views": _views,
    "columns": _columns,
    "warehouses": _warehouses,
}


def format_paginated_markdown(page: PaginatedResponse[Any], entity_type: str) -> str:
    lines = [f"## {entity_type.capitalize()}", ""]

    if page.total is not None:
        lines.append(f"**Total:** {page.total} | **Showing:** {page.count}")
    else:
        lines.append(f"**Showing:** {page.count}")

    if page.has_more:
        lines.append(f"**More available:** Yes (partition: {page.next_partition})")
    lines.append("")

    if not page.items:
        lines.append("_No items found._")
        return "\n".join(lines)

    render = _ENTITY_TABLES.get(entity_type, _generic)
    lines.append(render(page.items))
    return "\n".join(lines)


def format_statement_result_markdown(result: StatementResult, max_rows: int = 100) -> str:
    lines = [
        "## Query Result",
        "",
        f"**Statement Handle:** `{result.statement_handle}`",
        f"**Status:** {result.status.value}",
    ]
    if result.message:
        lines.append(f"**Message:** {result.message}")

    stats = result.stats
    if stats is not None:
        lines += ["", "### Statistics"]
        for label, value in (
            ("Rows Scanned", stats.num_rows_scanned),
            ("Rows Inserted", stats.num_rows_inserted),
            ("Rows Updated", stats.num_rows_updated),
            ("Rows Deleted", stats.num_rows_deleted),
        ):
            if value is not None:
                lines.append(f"- {label}: {value}")
        if stats.elapsed_time_ms is not None:
            lines.append(f"- Elapsed Time: {stats.elapsed_time_ms}ms")

    meta = result.result_set_meta_data
    if result.data is not None and (meta is not None or result.data):
        # Partitions after the first come without metadata.
        if meta is not None:
            lines += ["", f"### Results ({meta.num_rows} rows)", ""]
            headers = [c.name for c in meta.row_type]
        else:
            lines += ["", f"### Results ({len(result.data)} rows in this partition)", ""]
            headers = [f"col{i + 1}" for i in range(len(result.data[0]))]
        shown = result.data[:max_rows]
        lines.append(
            _table(headers, [["NULL" if v is None else str(v) for v in row] for row in shown])
        )
        if len(result.data) > max_rows:
            lines += ["", f"_Showing first {max_rows} of {len(result.data)} rows_"]

    return "\n".join(lines)


def format_warehouse_markdown(warehouse: Warehouse) -> str:
    w = warehouse
    lines = [
        f"## Warehouse: {w.name}",
        "",
        f"**State:** {w.state}",
        f"**Size:** {w.size or 'N/A'}",
        f"**Type:** {w.type or 'STANDARD'}",
        "",
        "### Configuration",
        f"- Auto Suspend: {w.auto_suspend if w.auto_suspend is not None else 'N/A'} seconds",
        f"- Auto Resume: {'Yes' if w.auto_resume else 'No'}",
        f"- Min Clusters: {w.min_cluster_count if w.min_cluster_count is not None else 1}",
        f"- Max Clusters: {w.max_cluster_count if w.max_cluster_count is not None else 1}",
        f"- Started Clusters: {w.started_clusters or 0}",
        "",
        "### Activity",
        f"- Running Queries: {w.running or 0}",
        f"- Queued Queries: {w.queued or 0}",
    ]
    if w.resource_monitor:
        lines.append(f"- Resource Monitor: {w.resource_monitor}")
    lines += [
        "",
        "### Metadata",
        f"- Owner: {w.owner or 'N/A'}",
        f"- Created: {w.created_on or 'N/A'}",
        f"- Last Resumed: {w.resumed_on or 'N/A'}",
    ]
    if w.comment:
        lines.append(f"- Comment: {w.comment}")
    return "\n".join(lines)


def format_error(error: BaseException) -> Dict[str, Any]:
    """Tool-facing error payload: {"error": "...", "details": {...}}."""
    if isinstance(error, SnowflakeApiError):
        message = f"Error: {error.message}"
        if error.retryable:
            message += " (retryable)"
        if error.sql_state:
            message += f" [SQL State: {error.sql_state}]"
    else:
        message = f"Error: {error}"

    return {"error": message, "details": format_error_for_logging(error)}

# Snowflake SQL MCP Server
# File: mapping.py
# Version: v1

"""Response and row mapping for the Snowflake SQL API.

Two jobs live here:

- turning the raw ``/statements`` JSON payload into a ``StatementResult``
  (including the status inference heuristic), and
- turning the untyped rows of SHOW / DESCRIBE commands into typed entities.

Row decoding is name-based: a lower-cased column name -> index map is built
from ``rowType`` for every result set. A handful of fields have a fixed
fallback position used only when the column name is missing:

    name -> 0 (all entities)
    created_on -> 1 (databases)
    type -> 1 (DESCRIBE TABLE columns)
    state -> 1 (warehouses)

Everything else is None when the column is absent or the row is short.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from .errors import ValidationError
from .models import (
    Column,
    ColumnMetaData,
    Database,
    PaginatedResponse,
    PartitionInfo,
    QueryStats,
    ResultSetMetaData,
    Row,
    Schema,
    StatementResult,
    StatementStatus,
    Table,
    View,
    Warehouse,
)

ColumnMap = Dict[str, int]


# ---------------------------------------------------------------------------
# Identifier quoting
# ---------------------------------------------------------------------------


def quote_identifier(name: str) -> str:
    """Double-quote an identifier, doubling embedded double quotes."""
    if name is None or not str(name).strip():
        raise ValidationError(
            "Identifier must be a non-empty string.",
            {"identifier": ["empty"]},
        )
    return '"' + str(name).replace('"', '""') + '"'


def qualified_name(*parts: str) -> str:
    return ".".join(quote_identifier(p) for p in parts)


def quote_literal(value: str) -> str:
    """Single-quote a string literal, doubling embedded single quotes."""
    return "'" + str(value).replace("'", "''") + "'"


# ---------------------------------------------------------------------------
# Statement responses
# ---------------------------------------------------------------------------


_FAILURE_MARKERS = ("failed", "error")


def map_status(status_url: Optional[str] = None, message: Optional[str] = None) -> StatementStatus:
    """Infer a statement status from a response that may not carry one.

    Precedence: a polling URL means still running; otherwise a failure word
    in the message means failed; anything else is success. This is an
    approximation, which is why ``StatementResult`` keeps the raw message.
    """
    if status_url:
        return StatementStatus.RUNNING

    text = (message or "").lower()
    if any(marker in text for marker in _FAILURE_MARKERS):
        return StatementStatus.FAILED_WITH_ERROR
    return StatementStatus.SUCCESS


def _opt_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _opt_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _map_row_type(raw: Iterable[Any]) -> List[ColumnMetaData]:
    columns: List[ColumnMetaData] = []
    for col in raw or []:
        if not isinstance(col, dict):
            continue
        nullable = col.get("nullable")
        columns.append(
            ColumnMetaData(
                name=str(col.get("name") or ""),
                type=str(col.get("type") or ""),
                nullable=True if nullable is None else bool(nullable),
                database=_opt_str(col.get("database")),
                schema=_opt_str(col.get("schema")),
                table=_opt_str(col.get("table")),
                byte_length=_opt_int(col.get("byteLength")),
                precision=_opt_int(col.get("precision")),
                scale=_opt_int(col.get("scale")),
                collation=_opt_str(col.get("collation")),
            )
        )
    return columns


def _map_partition_info(raw: Any) -> Optional[List[PartitionInfo]]:
    if not isinstance(raw, list):
        return None
    return [
        PartitionInfo(
            row_count=_opt_int(p.get("rowCount")) or 0,
            uncompressed_size=_opt_int(p.get("uncompressedSize")),
            compressed_size=_opt_int(p.get("compressedSize")),
        )
        for p in raw
        if isinstance(p, dict)
    ]


def _map_meta_data(raw: Any) -> Optional[ResultSetMetaData]:
    if not isinstance(raw, dict):
        return None
    return ResultSetMetaData(
        num_rows=_opt_int(raw.get("numRows")) or 0,
        row_type=_map_row_type(raw.get("rowType") or []),
        format=_opt_str(raw.get("format")),
        partition_info=_map_partition_info(raw.get("partitionInfo")),
    )


def _map_stats(raw: Any) -> Optional[QueryStats]:
    if not isinstance(raw, dict):
        return None
    return QueryStats(
        num_rows_scanned=_opt_int(raw.get("numRowsScanned")),
        num_rows_inserted=_opt_int(raw.get("numRowsInserted")),
        num_rows_updated=_opt_int(raw.get("numRowsUpdated")),
        num_rows_deleted=_opt_int(raw.get("numRowsDeleted")),
        num_duplicate_rows_updated=_opt_int(raw.get("numDuplicateRowsUpdated")),
        elapsed_time_ms=_opt_int(raw.get("elapsedTimeMs")),
    )


def _map_data(raw: Any) -> Optional[List[Row]]:
    if not isinstance(raw, list):
        return None
    return [list(row) for row in raw if isinstance(row, list)]


def map_statement_response(payload: Mapping[str, Any]) -> StatementResult:
    """Normalise a sync, async, status or partition response."""
    status_url = _opt_str(payload.get("statementStatusUrl"))
    message = _opt_str(payload.get("message"))

    return StatementResult(
        statement_handle=str(payload.get("statementHandle") or ""),
        status=map_status(status_url, message),
        result_set_meta_data=_map_meta_data(payload.get("resultSetMetaData")),
        data=_map_data(payload.get("data")),
        stats=_map_stats(payload.get("stats")),
        statement_status_url=status_url,
        message=message,
        sql_state=_opt_str(payload.get("sqlState")),
        code=_opt_str(payload.get("code")),
    )


def partition_page(
    result: StatementResult,
    partition: int = 0,
    partition_count: Optional[int] = None,
) -> PaginatedResponse[Row]:
    """Wrap one fetched partition of a statement's rows.

    ``partitionInfo`` is normally only returned with partition 0, so callers
    fetching later partitions pass the count they saw first.
    """
    meta = result.result_set_meta_data
    if meta is not None and meta.partition_info:
        partition_count = len(meta.partition_info)

    has_more = partition_count is not None and partition + 1 < partition_count

    return PaginatedResponse(
        items=list(result.data or []),
        total=meta.num_rows if meta is not None else None,
        has_more=has_more,
        next_partition=partition + 1 if has_more else None,
        partition_count=partition_count,
    )


# ---------------------------------------------------------------------------
# Row decoding helpers
# ---------------------------------------------------------------------------


def build_column_map(row_type: Sequence[Any]) -> ColumnMap:
    """Map lower-cased column names to their index in each data row."""
    column_map: ColumnMap = {}
    for index, col in enumerate(row_type):
        name = col.get("name") if isinstance(col, dict) else getattr(col, "name", None)
        if name is None:
            continue
        column_map[str(name).lower()] = index
    return column_map


def _cell(
    row: Sequence[Optional[str]],
    column_map: ColumnMap,
    name: str,
    fallback: Optional[int] = None,
) -> Optional[str]:
    index = column_map.get(name, fallback)
    if index is None or index < 0 or index >= len(row):
        return None
    return row[index]


def _cell_any(row: Sequence[Optional[str]], column_map: ColumnMap, *names: str) -> Optional[str]:
    """First present column among alternative header spellings."""
    for name in names:
        if name in column_map:
            return _cell(row, column_map, name)
    return None


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def _flag(value: Optional[str], truthy: str) -> Optional[bool]:
    if value is None:
        return None
    return str(value).strip().lower() == truthy


def _map_rows(result: StatementResult, build: Callable[[Row, ColumnMap], Any]) -> PaginatedResponse[Any]:
    """Shared wrapper: empty page for a rowless result, else one item per row."""
    meta = result.result_set_meta_data
    if result.data is None or meta is None:
        return PaginatedResponse.empty()

    column_map = build_column_map(meta.row_type)
    items = [build(row, column_map) for row in result.data]
    return PaginatedResponse(items=items, total=meta.num_rows, has_more=False)


# ---------------------------------------------------------------------------
# Entity mappers
# ---------------------------------------------------------------------------


def map_databases(result: StatementResult) -> PaginatedResponse[Database]:
    def build(row: Row, cm: ColumnMap) -> Database:
        return Database(
            name=_cell(row, cm, "name", 0) or "",
            created_on=_cell(row, cm, "created_on", 1),
            origin=_cell(row, cm, "origin"),
            owner=_cell(row, cm, "owner"),
            comment=_cell(row, cm, "comment"),
            options=_cell(row, cm, "options"),
            retention_time=_cell(row, cm, "retention_time"),
            resource_group=_cell(row, cm, "resource_group"),
            kind=_cell(row, cm, "kind"),
        )

    return _map_rows(result, build)


def map_schemas(result: StatementResult, database: str) -> PaginatedResponse[Schema]:
    def build(row: Row, cm: ColumnMap) -> Schema:
        return Schema(
            name=_cell(row, cm, "name", 0) or "",
            database_name=database,
            created_on=_cell(row, cm, "created_on"),
            owner=_cell(row, cm, "owner"),
            comment=_cell(row, cm, "comment"),
            options=_cell(row, cm, "options"),
            retention_time=_cell(row, cm, "retention_time"),
        )

    return _map_rows(result, build)


def map_tables(result: StatementResult, database: str, schema: str) -> PaginatedResponse[Table]:
    def build(row: Row, cm: ColumnMap) -> Table:
        return Table(
            name=_cell(row, cm, "name", 0) or "",
            database_name=database,
            schema_name=schema,
            kind=_cell(row, cm, "kind"),
            created_on=_cell(row, cm, "created_on"),
            owner=_cell(row, cm, "owner"),
            comment=_cell(row, cm, "comment"),
            cluster_by=_cell(row, cm, "cluster_by"),
            rows=_to_int(_cell(row, cm, "rows")),
            bytes=_to_int(_cell(row, cm, "bytes")),
            retention_time=_cell(row, cm, "retention_time"),
            automatic_clustering=_cell(row, cm, "automatic_clustering"),
            change_tracking=_cell(row, cm, "change_tracking"),
            is_external=_flag(_cell(row, cm, "is_external"), "y"),
        )

    return _map_rows(result, build)


def map_views(result: StatementResult, database: str, schema: str) -> PaginatedResponse[View]:
    def build(row: Row, cm: ColumnMap) -> View:
        return View(
            name=_cell(row, cm, "name", 0) or "",
            database_name=database,
            schema_name=schema,
            created_on=_cell(row, cm, "created_on"),
            owner=_cell(row, cm, "owner"),
            comment=_cell(row, cm, "comment"),
            text=_cell(row, cm, "text"),
            is_secure=_flag(_cell(row, cm, "is_secure"), "true"),
            is_materialized=_flag(_cell(row, cm, "is_materialized"), "true"),
        )

    return _map_rows(result, build)


def map_columns(result: StatementResult) -> PaginatedResponse[Column]:
    # DESCRIBE TABLE headers contain spaces and '?' ("null?", "primary key").
    def build(row: Row, cm: ColumnMap) -> Column:
        return Column(
            name=_cell(row, cm, "name", 0) or "",
            type=_cell(row, cm, "type", 1) or "",
            kind=_cell(row, cm, "kind"),
            nullable=_flag(_cell_any(row, cm, "null?", "null"), "y"),
            default=_cell(row, cm, "default"),
            primary_key=_flag(_cell_any(row, cm, "primary key", "primary_key"), "y"),
            unique_key=_flag(_cell_any(row, cm, "unique key", "unique_key"), "y"),
            check=_cell(row, cm, "check"),
            expression=_cell(row, cm, "expression"),
            comment=_cell(row, cm, "comment"),
            policy_name=_cell_any(row, cm, "policy name", "policy_name"),
        )

    return _map_rows(result, build)


def map_warehouses(result: StatementResult) -> PaginatedResponse[Warehouse]:
    def build(row: Row, cm: ColumnMap) -> Warehouse:
        return Warehouse(
            name=_cell(row, cm, "name", 0) or "",
            state=_cell(row, cm, "state", 1) or "SUSPENDED",
            type=_cell(row, cm, "type"),
            size=_cell(row, cm, "size"),
            min_cluster_count=_to_int(_cell(row, cm, "min_cluster_count")),
            max_cluster_count=_to_int(_cell(row, cm, "max_cluster_count")),
            started_clusters=_to_int(_cell(row, cm, "started_clusters")),
            running=_to_int(_cell(row, cm, "running")),
            queued=_to_int(_cell(row, cm, "queued")),
            is_default=_flag(_cell(row, cm, "is_default"), "y"),
            is_current=_flag(_cell(row, cm, "is_current"), "y"),
            auto_suspend=_to_int(_cell(row, cm, "auto_suspend")),
            auto_resume=_flag(_cell(row, cm, "auto_resume"), "true"),
            available=_cell(row, cm, "available"),
            provisioning=_cell(row, cm, "provisioning"),
            quiescing=_cell(row, cm, "quiescing"),
            other=_cell(row, cm, "other"),
            created_on=_cell(row, cm, "created_on"),
            resumed_on=_cell(row, cm, "resumed_on"),
            updated_on=_cell(row, cm, "updated_on"),
            owner=_cell(row, cm, "owner"),
            comment=_cell(row, cm, "comment"),
            resource_monitor=_cell(row, cm, "resource_monitor"),
            scaling_policy=_cell(row, cm, "scaling_policy"),
        )

    return _map_rows(result, build)

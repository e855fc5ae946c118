# Snowflake SQL MCP Server
# File: tests/test_mapping.py
# Version: v1

"""Row mapping and status inference tests (no HTTP involved)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from snowflake_sql_mcp import mapping
from snowflake_sql_mcp.errors import ValidationError
from snowflake_sql_mcp.models import StatementResult, StatementStatus


def _result(columns: List[str], rows: List[List[Optional[str]]]) -> StatementResult:
    payload: Dict[str, Any] = {
        "statementHandle": "h-1",
        "message": "Statement executed successfully.",
        "resultSetMetaData": {
            "numRows": len(rows),
            "rowType": [{"name": c, "type": "text"} for c in columns],
        },
        "data": rows,
    }
    return mapping.map_statement_response(payload)


# ---------------------------------------------------------------------------
# Status inference
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "status_url, message, expected",
    [
        ("/api/v2/statements/h-1", None, StatementStatus.RUNNING),
        # A polling URL wins even over a failure-looking message.
        ("/api/v2/statements/h-1", "Execution failed", StatementStatus.RUNNING),
        (None, "Statement execution FAILED", StatementStatus.FAILED_WITH_ERROR),
        (None, "Internal error", StatementStatus.FAILED_WITH_ERROR),
        (None, "Statement executed successfully.", StatementStatus.SUCCESS),
        (None, None, StatementStatus.SUCCESS),
        (None, "", StatementStatus.SUCCESS),
    ],
)
def test_map_status(status_url, message, expected) -> None:
    assert mapping.map_status(status_url, message) is expected


def test_map_statement_response_camel_case_fields() -> None:
    result = mapping.map_statement_response(
        {
            "statementHandle": "01b2-0000",
            "message": "Statement executed successfully.",
            "resultSetMetaData": {
                "numRows": 2,
                "format": "jsonv2",
                "rowType": [
                    {"name": "ID", "type": "fixed", "nullable": False, "precision": 38, "scale": 0},
                    {"name": "NAME", "type": "text", "byteLength": 64},
                ],
                "partitionInfo": [{"rowCount": 2, "uncompressedSize": 40}],
            },
            "data": [["1", "a"], ["2", None]],
            "stats": {"numRowsInserted": 0, "elapsedTimeMs": 12},
        }
    )

    assert result.statement_handle == "01b2-0000"
    assert result.status is StatementStatus.SUCCESS
    meta = result.result_set_meta_data
    assert meta is not None
    assert meta.num_rows == 2
    assert meta.row_type[0].nullable is False
    assert meta.row_type[1].nullable is True
    assert meta.row_type[1].byte_length == 64
    assert meta.partition_info is not None and meta.partition_info[0].row_count == 2
    assert result.data == [["1", "a"], ["2", None]]
    assert result.stats is not None and result.stats.elapsed_time_ms == 12


def test_async_submission_has_handle_but_no_rows() -> None:
    result = mapping.map_statement_response(
        {
            "statementHandle": "h-async",
            "message": "Asynchronous execution in progress.",
            "statementStatusUrl": "/api/v2/statements/h-async",
        }
    )
    assert result.status is StatementStatus.RUNNING
    assert result.data is None
    assert result.result_set_meta_data is None


# ---------------------------------------------------------------------------
# Column map and cells
# ---------------------------------------------------------------------------


def test_column_map_is_case_insensitive() -> None:
    cm = mapping.build_column_map([{"name": "Name"}, {"name": "CREATED_ON"}])
    assert cm == {"name": 0, "created_on": 1}


def test_short_rows_yield_none_not_errors() -> None:
    result = _result(["name", "state", "size", "running", "queued"], [["WH_SHORT"]])
    page = mapping.map_warehouses(result)

    wh = page.items[0]
    assert wh.name == "WH_SHORT"
    # state falls back to position 1, which is missing, so the default applies.
    assert wh.state == "SUSPENDED"
    assert wh.size is None
    assert wh.running is None


_SHORT_ROW_MAPPERS = {
    "databases": (
        lambda r: mapping.map_databases(r),
        ["name", "created_on", "origin", "owner"],
        ("created_on", "origin", "owner"),
    ),
    "schemas": (
        lambda r: mapping.map_schemas(r, "DB"),
        ["created_on", "name", "owner", "retention_time"],
        ("created_on", "owner", "retention_time"),
    ),
    "tables": (
        lambda r: mapping.map_tables(r, "DB", "S"),
        ["name", "kind", "rows", "bytes", "is_external"],
        ("kind", "rows", "bytes", "is_external"),
    ),
    "views": (
        lambda r: mapping.map_views(r, "DB", "S"),
        ["name", "text", "is_secure", "is_materialized"],
        ("text", "is_secure", "is_materialized"),
    ),
    "columns": (
        lambda r: mapping.map_columns(r),
        ["name", "type", "null?", "primary key", "unique key"],
        ("nullable", "primary_key", "unique_key"),
    ),
}


@pytest.mark.parametrize("row", [[], ["ONLY_NAME"]], ids=["empty", "one-cell"])
@pytest.mark.parametrize("entity", sorted(_SHORT_ROW_MAPPERS))
def test_short_rows_for_every_mapper(entity, row) -> None:
    map_fn, columns, optional_fields = _SHORT_ROW_MAPPERS[entity]

    page = map_fn(_result(columns, [row]))

    item = page.items[0]
    assert item.name == (row[0] if row else "")
    for field_name in optional_fields:
        assert getattr(item, field_name) is None
    if entity == "columns":
        # type falls back to position 1, missing here.
        assert item.type == ""


def test_name_fallback_position_without_headers() -> None:
    result = mapping.map_statement_response(
        {
            "statementHandle": "h",
            "resultSetMetaData": {"numRows": 1, "rowType": []},
            "data": [["DB1", "2024-01-01"]],
        }
    )
    page = mapping.map_databases(result)
    assert page.items[0].name == "DB1"
    assert page.items[0].created_on == "2024-01-01"


# ---------------------------------------------------------------------------
# Entity mappers
# ---------------------------------------------------------------------------


def test_map_warehouses_round_trip() -> None:
    result = _result(
        ["name", "state", "size", "running", "queued"],
        [["WH_XS", "SUSPENDED", "XSMALL", "0", "0"]],
    )
    page = mapping.map_warehouses(result)

    assert page.count == 1
    assert page.total == 1
    assert page.has_more is False
    wh = page.items[0]
    assert (wh.name, wh.state, wh.size, wh.running, wh.queued) == (
        "WH_XS",
        "SUSPENDED",
        "XSMALL",
        0,
        0,
    )


def test_map_warehouse_flags() -> None:
    result = _result(
        ["name", "state", "is_default", "is_current", "auto_resume", "auto_suspend"],
        [["WH", "STARTED", "Y", "N", "true", "600"]],
    )
    wh = mapping.map_warehouses(result).items[0]
    assert wh.is_default is True
    assert wh.is_current is False
    assert wh.auto_resume is True
    assert wh.auto_suspend == 600


def test_map_tables_numeric_and_external_flag() -> None:
    result = _result(
        ["created_on", "name", "kind", "rows", "bytes", "is_external"],
        [
            ["2024-01-01", "ORDERS", "TABLE", "1200", "4096", "N"],
            ["2024-01-02", "EXT_T", "TABLE", "", "garbage", "Y"],
        ],
    )
    page = mapping.map_tables(result, "DB", "PUBLIC")

    orders, ext = page.items
    assert orders.name == "ORDERS"
    assert orders.database_name == "DB"
    assert orders.schema_name == "PUBLIC"
    assert orders.rows == 1200
    assert orders.bytes == 4096
    assert orders.is_external is False
    assert ext.rows is None
    assert ext.bytes is None
    assert ext.is_external is True


def test_map_views_boolean_flags() -> None:
    result = _result(
        ["name", "is_secure", "is_materialized", "text"],
        [["V1", "true", "false", "select 1"]],
    )
    view = mapping.map_views(result, "DB", "S").items[0]
    assert view.is_secure is True
    assert view.is_materialized is False
    assert view.text == "select 1"


@pytest.mark.parametrize(
    "headers",
    [
        ["name", "type", "kind", "null?", "default", "primary key", "unique key"],
        ["name", "type", "kind", "null", "default", "primary_key", "unique_key"],
    ],
)
def test_map_columns_accepts_both_header_spellings(headers) -> None:
    result = _result(headers, [["ID", "NUMBER(38,0)", "COLUMN", "N", None, "Y", "N"]])
    col = mapping.map_columns(result).items[0]

    assert col.name == "ID"
    assert col.type == "NUMBER(38,0)"
    assert col.nullable is False
    assert col.primary_key is True
    assert col.unique_key is False


def test_map_schemas_sets_database_name() -> None:
    result = _result(["created_on", "name", "owner"], [["2024", "PUBLIC", "SYSADMIN"]])
    schema = mapping.map_schemas(result, "ANALYTICS").items[0]
    assert schema.name == "PUBLIC"
    assert schema.database_name == "ANALYTICS"
    assert schema.owner == "SYSADMIN"


def test_rowless_result_maps_to_empty_page() -> None:
    result = mapping.map_statement_response({"statementHandle": "h", "message": "ok"})
    page = mapping.map_databases(result)
    assert page.items == []
    assert page.count == 0
    assert page.has_more is False


# ---------------------------------------------------------------------------
# Partition pages
# ---------------------------------------------------------------------------


def test_partition_page_uses_partition_info_count() -> None:
    result = mapping.map_statement_response(
        {
            "statementHandle": "h",
            "resultSetMetaData": {
                "numRows": 5,
                "rowType": [{"name": "N", "type": "fixed"}],
                "partitionInfo": [{"rowCount": 2}, {"rowCount": 2}, {"rowCount": 1}],
            },
            "data": [["1"], ["2"]],
        }
    )
    page = mapping.partition_page(result, 0)
    assert page.partition_count == 3
    assert page.has_more is True
    assert page.next_partition == 1
    assert page.total == 5


def test_partition_page_last_partition() -> None:
    result = mapping.map_statement_response(
        {
            "statementHandle": "h",
            "resultSetMetaData": {"numRows": 5, "rowType": [{"name": "N"}]},
            "data": [["5"]],
        }
    )
    page = mapping.partition_page(result, 2, partition_count=3)
    assert page.has_more is False
    assert page.next_partition is None


# ---------------------------------------------------------------------------
# Quoting
# ---------------------------------------------------------------------------


def test_quote_identifier_escapes_double_quotes() -> None:
    assert mapping.quote_identifier("my db") == '"my db"'
    assert mapping.quote_identifier('we"ird') == '"we""ird"'
    assert mapping.qualified_name("DB", "S", "T") == '"DB"."S"."T"'


def test_quote_identifier_rejects_empty() -> None:
    with pytest.raises(ValidationError):
        mapping.quote_identifier("")


def test_quote_literal() -> None:
    assert mapping.quote_literal("O'Brien") == "'O''Brien'"


@pytest.mark.parametrize("blank", ["   ", "\t"])
def test_quote_identifier_rejects_whitespace_only(blank) -> None:
    with pytest.raises(ValidationError):
        mapping.quote_identifier(blank)

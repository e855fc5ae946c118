# Snowflake SQL MCP Server
# File: models.py
# Version: v1

"""Domain models used by the Snowflake SQL MCP server.

All models are read-only projections of one API response; they are built
fresh on every call and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")

Row = List[Optional[str]]


class StatementStatus(str, Enum):
    RUNNING = "running"
    RESUMING_WAREHOUSE = "resuming_warehouse"
    QUEUED = "queued"
    BLOCKED = "blocked"
    SUCCESS = "success"
    FAILED_WITH_ERROR = "failed_with_error"
    FAILED_WITH_INCIDENT = "failed_with_incident"
    ABORTED = "aborted"


# ---------------------------------------------------------------------------
# Statement execution
# ---------------------------------------------------------------------------


@dataclass
class BindVariable:
    """Positional bind value, e.g. BindVariable("TEXT", "abc")."""

    type: str
    value: Optional[str]


@dataclass
class StatementRequest:
    """Body of a statement submission.

    Context fields left as None fall back to the tenant's defaults.
    """

    statement: str
    timeout: Optional[int] = None
    database: Optional[str] = None
    schema: Optional[str] = None
    warehouse: Optional[str] = None
    role: Optional[str] = None
    bindings: Optional[Dict[str, BindVariable]] = None
    parameters: Optional[Dict[str, str]] = None


@dataclass
class ColumnMetaData:
    name: str
    type: str
    nullable: bool = True
    database: Optional[str] = None
    schema: Optional[str] = None
    table: Optional[str] = None
    byte_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    collation: Optional[str] = None


@dataclass
class PartitionInfo:
    row_count: int
    uncompressed_size: Optional[int] = None
    compressed_size: Optional[int] = None


@dataclass
class ResultSetMetaData:
    num_rows: int
    row_type: List[ColumnMetaData]
    format: Optional[str] = None
    partition_info: Optional[List[PartitionInfo]] = None


@dataclass
class QueryStats:
    num_rows_scanned: Optional[int] = None
    num_rows_inserted: Optional[int] = None
    num_rows_updated: Optional[int] = None
    num_rows_deleted: Optional[int] = None
    num_duplicate_rows_updated: Optional[int] = None
    elapsed_time_ms: Optional[int] = None


@dataclass
class StatementResult:
    """Normalised response of any statement endpoint.

    ``statement_handle`` is opaque. ``data`` holds raw wire strings; typed
    interpretation only happens in ``mapping``.
    """

    statement_handle: str
    status: StatementStatus
    result_set_meta_data: Optional[ResultSetMetaData] = None
    data: Optional[List[Row]] = None
    stats: Optional[QueryStats] = None
    statement_status_url: Optional[str] = None
    message: Optional[str] = None
    sql_state: Optional[str] = None
    code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class OperationResult:
    success: bool
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ConnectionStatus:
    connected: bool
    message: str
    account: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PaginatedResponse(Generic[T]):
    """A page of items; ``count`` always equals ``len(items)``."""

    items: List[T]
    total: Optional[int] = None
    has_more: bool = False
    next_partition: Optional[int] = None
    # Only set for statement result pages.
    partition_count: Optional[int] = None
    count: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self.count = len(self.items)

    @classmethod
    def empty(cls) -> "PaginatedResponse[T]":
        return cls(items=[])

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Schema objects
# ---------------------------------------------------------------------------


@dataclass
class Database:
    name: str
    created_on: Optional[str] = None
    origin: Optional[str] = None
    owner: Optional[str] = None
    comment: Optional[str] = None
    options: Optional[str] = None
    retention_time: Optional[str] = None
    resource_group: Optional[str] = None
    kind: Optional[str] = None


@dataclass
class Schema:
    name: str
    database_name: Optional[str] = None
    created_on: Optional[str] = None
    owner: Optional[str] = None
    comment: Optional[str] = None
    options: Optional[str] = None
    retention_time: Optional[str] = None


@dataclass
class Table:
    name: str
    database_name: Optional[str] = None
    schema_name: Optional[str] = None
    kind: Optional[str] = None
    created_on: Optional[str] = None
    owner: Optional[str] = None
    comment: Optional[str] = None
    cluster_by: Optional[str] = None
    rows: Optional[int] = None
    bytes: Optional[int] = None
    retention_time: Optional[str] = None
    automatic_clustering: Optional[str] = None
    change_tracking: Optional[str] = None
    is_external: Optional[bool] = None


@dataclass
class View:
    name: str
    database_name: Optional[str] = None
    schema_name: Optional[str] = None
    created_on: Optional[str] = None
    owner: Optional[str] = None
    comment: Optional[str] = None
    text: Optional[str] = None
    is_secure: Optional[bool] = None
    is_materialized: Optional[bool] = None


@dataclass
class Column:
    """One row of DESCRIBE TABLE output."""

    name: str
    type: str
    kind: Optional[str] = None
    nullable: Optional[bool] = None
    default: Optional[str] = None
    primary_key: Optional[bool] = None
    unique_key: Optional[bool] = None
    check: Optional[str] = None
    expression: Optional[str] = None
    comment: Optional[str] = None
    policy_name: Optional[str] = None


@dataclass
class Warehouse:
    name: str
    state: str
    type: Optional[str] = None
    size: Optional[str] = None
    min_cluster_count: Optional[int] = None
    max_cluster_count: Optional[int] = None
    started_clusters: Optional[int] = None
    running: Optional[int] = None
    queued: Optional[int] = None
    is_default: Optional[bool] = None
    is_current: Optional[bool] = None
    auto_suspend: Optional[int] = None
    auto_resume: Optional[bool] = None
    available: Optional[str] = None
    provisioning: Optional[str] = None
    quiescing: Optional[str] = None
    other: Optional[str] = None
    created_on: Optional[str] = None
    resumed_on: Optional[str] = None
    updated_on: Optional[str] = None
    owner: Optional[str] = None
    comment: Optional[str] = None
    resource_monitor: Optional[str] = None
    scaling_policy: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

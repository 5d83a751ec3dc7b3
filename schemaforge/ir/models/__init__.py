"""Pydantic models for the schema graph."""

from .data_types import (
    DataType,
    DEFAULT_DATA_TYPE,
    classify_data_type,
    is_known_data_type,
    normalize_data_type,
)
from .schema import (
    Column,
    ColumnReference,
    Dialect,
    IssueSeverity,
    Position,
    ReferentialAction,
    Relationship,
    SchemaIssue,
    SchemaState,
    Table,
    TableColor,
)

__all__ = [
    "DataType",
    "DEFAULT_DATA_TYPE",
    "classify_data_type",
    "is_known_data_type",
    "normalize_data_type",
    "Column",
    "ColumnReference",
    "Dialect",
    "IssueSeverity",
    "Position",
    "ReferentialAction",
    "Relationship",
    "SchemaIssue",
    "SchemaState",
    "Table",
    "TableColor",
]

"""Intermediate representation of a schema: the models every stage reads and returns."""

from .models import (
    Column,
    ColumnReference,
    DataType,
    Dialect,
    IssueSeverity,
    Position,
    ReferentialAction,
    Relationship,
    SchemaIssue,
    SchemaState,
    Table,
    TableColor,
    classify_data_type,
)

__all__ = [
    "Column",
    "ColumnReference",
    "DataType",
    "Dialect",
    "IssueSeverity",
    "Position",
    "ReferentialAction",
    "Relationship",
    "SchemaIssue",
    "SchemaState",
    "Table",
    "TableColor",
    "classify_data_type",
]

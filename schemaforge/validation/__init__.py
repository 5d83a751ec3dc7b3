"""Structural schema validation."""

from .schema_validation import (
    ValidationReport,
    build_validation_report,
    has_blocking_issues,
    select_tables,
    validate_schema,
)

__all__ = [
    "ValidationReport",
    "build_validation_report",
    "has_blocking_issues",
    "select_tables",
    "validate_schema",
]

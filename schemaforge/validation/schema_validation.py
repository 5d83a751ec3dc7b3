"""Structural validation of a table subset before compilation."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from schemaforge.ir.models import IssueSeverity, SchemaIssue, Table
from schemaforge.utils.logging import get_logger

logger = get_logger(__name__)


class ValidationReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    issues: List[SchemaIssue] = Field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == IssueSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == IssueSeverity.WARNING)

    @property
    def can_compile(self) -> bool:
        return self.error_count == 0


def has_blocking_issues(issues: Iterable[SchemaIssue]) -> bool:
    return any(issue.severity == IssueSeverity.ERROR for issue in issues)


def select_tables(tables: Sequence[Table], selected_table_ids: Optional[Iterable[str]] = None) -> List[Table]:
    """Tables in the subset, kept in display order. ``None`` selects everything."""
    if selected_table_ids is None:
        return list(tables)
    selected = set(selected_table_ids)
    return [table for table in tables if table.id in selected]


class _IssueCollector:
    def __init__(self) -> None:
        self.issues: List[SchemaIssue] = []

    def add(self, severity: IssueSeverity, title: str, description: str, table_id: Optional[str]) -> None:
        self.issues.append(
            SchemaIssue(
                id=f"issue-{len(self.issues) + 1}",
                severity=severity,
                title=title,
                description=description,
                affected_table_id=table_id,
            )
        )


def validate_schema(
    tables: Sequence[Table],
    selected_table_ids: Optional[Iterable[str]] = None,
) -> List[SchemaIssue]:
    """
    Check a table subset for structural problems.

    Table checks run in table order, column checks in column order. An empty table
    is reported once as empty; the primary key and column checks are skipped for it.

    Args:
        tables: All tables, in display order
        selected_table_ids: Optional subset to check (None checks every table)

    Returns:
        Issues in emission order with ids ``issue-1``, ``issue-2``, ...
    """
    subset = select_tables(tables, selected_table_ids)
    collector = _IssueCollector()
    seen_table_names = set()

    for table in subset:
        display_name = table.name or "Unnamed"
        normalized = table.name.strip().lower()

        if not table.name.strip():
            collector.add(
                IssueSeverity.ERROR,
                "Unnamed table",
                f"Table with ID {table.id[:4]}... is unnamed.",
                table.id,
            )
        elif normalized in seen_table_names:
            collector.add(
                IssueSeverity.ERROR,
                "Duplicate table name",
                f'Duplicate table name: "{table.name}".',
                table.id,
            )
        else:
            seen_table_names.add(normalized)

        if not table.columns:
            collector.add(
                IssueSeverity.WARNING,
                "Empty table",
                f'Table "{display_name}" has no columns.',
                table.id,
            )
            continue

        if not table.primary_key_columns():
            collector.add(
                IssueSeverity.WARNING,
                "Missing primary key",
                f'Table "{display_name}" has no Primary Key.',
                table.id,
            )

        seen_column_names = set()
        for column in table.columns:
            column_name = column.name.strip().lower()
            if not column_name:
                collector.add(
                    IssueSeverity.ERROR,
                    "Unnamed column",
                    f'Table "{display_name}" contains an unnamed column.',
                    table.id,
                )
                continue
            if column_name in seen_column_names:
                collector.add(
                    IssueSeverity.ERROR,
                    "Duplicate column",
                    f'Table "{display_name}" has duplicate column: "{column.name}".',
                    table.id,
                )
            seen_column_names.add(column_name)

    if collector.issues:
        logger.debug(f"Validation of {len(subset)} table(s) produced {len(collector.issues)} issue(s)")
    return collector.issues


def build_validation_report(
    tables: Sequence[Table],
    selected_table_ids: Optional[Iterable[str]] = None,
) -> ValidationReport:
    return ValidationReport(issues=validate_schema(tables, selected_table_ids))

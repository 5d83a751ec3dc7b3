"""DDL compilation.

Generate CREATE TABLE and ALTER TABLE ... FOREIGN KEY statements from tables and
relationships. Deterministic: the same input always yields byte-identical SQL.
Identifiers and column types are emitted exactly as stored; the dialect only
labels the script for now.
"""

from __future__ import annotations

from typing import Iterable, List, Literal, Optional, Sequence, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from schemaforge.config.settings import get_compilation_settings
from schemaforge.ir.models import (
    Column,
    Dialect,
    IssueSeverity,
    ReferentialAction,
    Relationship,
    SchemaIssue,
    SchemaState,
    Table,
)
from schemaforge.relationships.resolver import ResolvedRelationship, resolve_relationships
from schemaforge.utils.error_handling import CompilationBlockedError
from schemaforge.utils.logging import get_logger
from schemaforge.validation.schema_validation import has_blocking_issues, select_tables, validate_schema

logger = get_logger(__name__)

StatementStyle = Literal["pretty", "compact"]


class CompilationOptions(BaseModel):
    """Knobs for one compilation; unset values come from config.yaml."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    dialect: Optional[Dialect] = None
    on_delete: Optional[ReferentialAction] = None
    on_update: Optional[ReferentialAction] = None
    statement_style: Optional[StatementStyle] = None
    include_header: Optional[bool] = None


class DDLCompilationOutput(BaseModel):
    """Output structure for DDL compilation."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    script: str = Field(description="Complete SQL script")
    create_statements: List[str] = Field(description="CREATE TABLE statements in table order")
    constraint_statements: List[str] = Field(description="ALTER TABLE statements in resolution order")
    resolved_relationships: List[ResolvedRelationship] = Field(default_factory=list)
    dialect: Dialect


class ExportResult(BaseModel):
    """Outcome of an export request: SQL when nothing blocks it, always the issues."""
    model_config = ConfigDict(frozen=True)

    sql: Optional[str] = None
    issues: List[SchemaIssue] = Field(default_factory=list)
    dialect: Dialect = Dialect.POSTGRESQL

    @property
    def can_export(self) -> bool:
        return self.sql is not None

    def require_sql(self) -> str:
        """Return the SQL or raise ``CompilationBlockedError`` with the blocking issues."""
        if self.sql is None:
            raise CompilationBlockedError(issues=list(self.issues))
        return self.sql


def render_column_type(column: Column, dialect: Dialect) -> str:
    """Column type as it appears in DDL. Types are not translated between dialects."""
    return column.data_type


def render_column_definition(column: Column, dialect: Dialect) -> str:
    definition = f"{column.name} {render_column_type(column, dialect)}"
    if column.is_primary_key:
        definition += " PRIMARY KEY"
    elif not column.is_nullable:
        definition += " NOT NULL"
    return definition


def render_create_table(
    table: Table,
    dialect: Dialect,
    statement_style: StatementStyle = "pretty",
    indent: str = "  ",
) -> str:
    definitions = [render_column_definition(column, dialect) for column in table.columns]
    if statement_style == "compact":
        body = ", ".join(definitions)
        return f"CREATE TABLE {table.name} ( {body} );" if body else f"CREATE TABLE {table.name} ( );"
    lines = [f"CREATE TABLE {table.name} ("]
    if definitions:
        lines.append(",\n".join(f"{indent}{definition}" for definition in definitions))
    lines.append(");")
    return "\n".join(lines)


def constraint_name(resolved: ResolvedRelationship) -> str:
    return f"fk_{resolved.child_table}_{resolved.parent_table}_{resolved.child_column}"


def render_foreign_key(
    resolved: ResolvedRelationship,
    on_delete: ReferentialAction = ReferentialAction.NO_ACTION,
    on_update: ReferentialAction = ReferentialAction.NO_ACTION,
) -> str:
    statement = (
        f"ALTER TABLE {resolved.child_table} ADD CONSTRAINT {constraint_name(resolved)} "
        f"FOREIGN KEY ({resolved.child_column}) REFERENCES {resolved.parent_table}({resolved.parent_column})"
    )
    if on_delete != ReferentialAction.NO_ACTION:
        statement += f" ON DELETE {on_delete.value}"
    if on_update != ReferentialAction.NO_ACTION:
        statement += f" ON UPDATE {on_update.value}"
    return statement + ";"


def render_header(dialect: Dialect) -> str:
    return f"-- Generated by SchemaForge ({dialect.value})"


def _filter_relationships(tables: Sequence[Table], relationships: Iterable[Relationship]) -> List[Relationship]:
    included = {table.id for table in tables}
    return [rel for rel in relationships if rel.source in included and rel.target in included]


def _dedupe_resolutions(resolved: Iterable[ResolvedRelationship]) -> List[ResolvedRelationship]:
    seen: Set[Tuple[str, str, str]] = set()
    unique = []
    for item in resolved:
        if item.constraint_key in seen:
            logger.debug(f"Relationship {item.relationship_id} duplicates constraint {constraint_name(item)}")
            continue
        seen.add(item.constraint_key)
        unique.append(item)
    return unique


def compile_ddl(
    tables: Sequence[Table],
    relationships: Iterable[Relationship],
    dialect: Union[Dialect, str, None] = None,
    on_delete: Union[ReferentialAction, str, None] = None,
    on_update: Union[ReferentialAction, str, None] = None,
    *,
    statement_style: Optional[StatementStyle] = None,
    include_header: Optional[bool] = None,
) -> DDLCompilationOutput:
    """
    Compile tables and relationships into a SQL script.

    Relationships are kept only when both ends are among ``tables``; those whose
    columns cannot be found are skipped. Foreign keys are deduplicated on
    (child table, parent table, child column), first one wins.

    Args:
        tables: Tables to emit, in output order
        relationships: Candidate relationships
        dialect: Target dialect label (defaults to config)
        on_delete: Referential action for ON DELETE (defaults to config)
        on_update: Referential action for ON UPDATE (defaults to config)
        statement_style: "pretty" (one column per line) or "compact" (single line)
        include_header: Whether to start the script with a dialect comment

    Returns:
        DDLCompilationOutput with the full script and its statements
    """
    settings = get_compilation_settings()
    dialect = Dialect(dialect or settings.dialect)
    on_delete = ReferentialAction(on_delete or settings.on_delete)
    on_update = ReferentialAction(on_update or settings.on_update)
    statement_style = statement_style or settings.statement_style
    if include_header is None:
        include_header = settings.include_header

    tables = list(tables)
    create_statements = [render_create_table(table, dialect, statement_style, settings.indent) for table in tables]

    candidates = _filter_relationships(tables, relationships)
    resolved = _dedupe_resolutions(resolve_relationships(tables, candidates))
    constraint_statements = [render_foreign_key(item, on_delete, on_update) for item in resolved]

    script = ""
    if include_header:
        script += render_header(dialect) + "\n\n"
    for statement in create_statements:
        script += statement + "\n\n"
    if constraint_statements:
        script += "-- Relationships\n" + "\n".join(constraint_statements) + "\n"

    logger.info(
        f"DDL compilation completed: {len(create_statements)} CREATE TABLE and "
        f"{len(constraint_statements)} foreign key statement(s) for {dialect.value}"
    )
    return DDLCompilationOutput(
        script=script,
        create_statements=create_statements,
        constraint_statements=constraint_statements,
        resolved_relationships=resolved,
        dialect=dialect,
    )


def export_schema(
    state: SchemaState,
    selected_table_ids: Optional[Iterable[str]] = None,
    options: Optional[CompilationOptions] = None,
) -> ExportResult:
    """
    Validate and compile a subset of a schema.

    Args:
        state: Current schema snapshot
        selected_table_ids: Tables to export (None exports all)
        options: Compilation options; the dialect defaults to the state's dialect

    Returns:
        ExportResult with ``sql`` set to None when validation found errors
    """
    options = options or CompilationOptions()
    dialect = options.dialect or state.dialect
    tables = select_tables(state.tables, selected_table_ids)

    issues = validate_schema(tables)
    if has_blocking_issues(issues):
        errors = sum(1 for issue in issues if issue.severity == IssueSeverity.ERROR)
        logger.info(f"Export blocked: {errors} error(s) in {len(tables)} table(s)")
        return ExportResult(sql=None, issues=issues, dialect=dialect)

    output = compile_ddl(
        tables,
        state.relationships,
        dialect=dialect,
        on_delete=options.on_delete,
        on_update=options.on_update,
        statement_style=options.statement_style,
        include_header=options.include_header,
    )
    return ExportResult(sql=output.script, issues=issues, dialect=dialect)

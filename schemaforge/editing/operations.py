"""Pure editing operations over a SchemaState.

Every operation takes a snapshot and returns a new one. Relationships are pruned
whenever a table or column they point at disappears, so a returned state never
carries a dangling edge.
"""

from __future__ import annotations

import uuid
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from schemaforge.config.settings import get_editing_settings
from schemaforge.ir.models import (
    Column,
    Dialect,
    Position,
    Relationship,
    SchemaState,
    Table,
)
from schemaforge.layout.layered_layout import auto_layout, needs_layout
from schemaforge.relationships.resolver import apply_resolution, derive_relationships, resolve_relationship
from schemaforge.utils.error_handling import ErrorContext, SchemaOperationError
from schemaforge.utils.logging import get_logger

logger = get_logger(__name__)

IdFactory = Callable[[], str]

TABLE_FIELDS = {"name", "position", "color", "description"}
COLUMN_FIELDS = {"name", "data_type", "is_primary_key", "is_foreign_key", "is_nullable", "references"}
RELATIONSHIP_FIELDS = {"source", "target", "source_column_ref", "target_column_ref", "label"}


def generate_id() -> str:
    """Short random identifier for tables, columns and relationships."""
    return uuid.uuid4().hex[:9]


def unique_name(base: str, taken: Iterable[str]) -> str:
    """``base``, or ``base_1``, ``base_2`` ... until no case-insensitive collision."""
    taken_lower = {name.lower() for name in taken}
    name = base
    suffix = 1
    while name.lower() in taken_lower:
        name = f"{base}_{suffix}"
        suffix += 1
    return name


def _fail(operation: str, message: str, **context: Any) -> SchemaOperationError:
    return SchemaOperationError(message=message, context=ErrorContext(operation=operation, **context))


def _require_table(state: SchemaState, table_id: str, operation: str) -> Tuple[int, Table]:
    index = state.table_index(table_id)
    if index < 0:
        raise _fail(operation, f"Table '{table_id}' does not exist", table_id=table_id)
    return index, state.tables[index]


def _require_column(table: Table, column_id: str, operation: str) -> Column:
    column = table.column_by_id(column_id)
    if column is None:
        raise _fail(
            operation,
            f"Column '{column_id}' does not exist on table '{table.name}'",
            table_id=table.id,
            column_id=column_id,
        )
    return column


def _check_changes(changes: Mapping[str, Any], allowed: set, operation: str, **context: Any) -> None:
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise _fail(operation, f"Unsupported field(s): {', '.join(unknown)}", **context)


def _revalidate(model_cls, current, changes: Mapping[str, Any], operation: str, **context: Any):
    # Rebuild through validation so type normalization and reference clean-up apply to updates too.
    try:
        return model_cls.model_validate({**current.model_dump(), **changes})
    except ValidationError as e:
        raise SchemaOperationError(
            message=f"Invalid value: {e.errors()[0].get('msg', str(e))}",
            context=ErrorContext(operation=operation, **context),
            original_exception=e,
        ) from e


def _with_table(state: SchemaState, index: int, table: Table) -> SchemaState:
    tables = list(state.tables)
    tables[index] = table
    return state.model_copy(update={"tables": tables})


def _coerce_column(value: Union[Column, Mapping[str, Any]], id_factory: IdFactory) -> Column:
    if isinstance(value, Column):
        return value
    data = dict(value)
    data.setdefault("id", id_factory())
    return Column.model_validate(data)


def _coerce_table(value: Union[Table, Mapping[str, Any]], id_factory: IdFactory) -> Table:
    if isinstance(value, Table):
        return value
    data = dict(value)
    data.setdefault("id", id_factory())
    data["columns"] = [_coerce_column(column, id_factory) for column in data.get("columns") or []]
    return Table.model_validate(data)


def default_columns(id_factory: IdFactory = generate_id) -> List[Column]:
    return [Column(id=id_factory(), name="id", data_type="INT", is_primary_key=True, is_nullable=False)]


def add_table(
    state: SchemaState,
    name: Optional[str] = None,
    columns: Optional[Sequence[Union[Column, Mapping[str, Any]]]] = None,
    position: Optional[Union[Position, Mapping[str, float]]] = None,
    color: Optional[str] = None,
    description: Optional[str] = None,
    table_id: Optional[str] = None,
    id_factory: IdFactory = generate_id,
) -> SchemaState:
    """
    Append a table.

    Args:
        state: Current snapshot
        name: Requested name; blank becomes the configured default, collisions get a suffix
        columns: Initial columns (defaults to a single ``id INT PRIMARY KEY``)
        position: Top-left corner (defaults to the configured spawn point)
        color: Optional visual tag
        description: Optional free text
        table_id: Explicit id (generated when omitted)
        id_factory: Id generator for the table and any generated column ids

    Returns:
        New snapshot with the table appended

    Raises:
        SchemaOperationError: If ``table_id`` is already taken
    """
    settings = get_editing_settings()
    base = (name or "").strip() or settings.default_table_name
    final_name = unique_name(base, [table.name for table in state.tables])

    table_id = table_id or id_factory()
    if state.table_by_id(table_id) is not None:
        raise _fail("add_table", f"Table id '{table_id}' is already in use", table_id=table_id)

    if columns is None:
        new_columns = default_columns(id_factory)
    else:
        new_columns = [_coerce_column(column, id_factory) for column in columns]

    if position is None:
        position = Position.model_validate(settings.spawn_position)
    elif not isinstance(position, Position):
        position = Position.model_validate(position)

    table = Table(
        id=table_id,
        name=final_name,
        columns=new_columns,
        position=position,
        color=color,
        description=description,
    )
    logger.debug(f"Added table {final_name} ({table_id})")
    return state.model_copy(update={"tables": [*state.tables, table]})


def update_table(state: SchemaState, table_id: str, **changes: Any) -> SchemaState:
    """Apply ``name``, ``position``, ``color`` or ``description`` changes to a table."""
    _check_changes(changes, TABLE_FIELDS, "update_table", table_id=table_id)
    index, table = _require_table(state, table_id, "update_table")
    updated = _revalidate(Table, table, changes, "update_table", table_id=table_id)
    return _with_table(state, index, updated)


def rename_table(state: SchemaState, table_id: str, name: str) -> SchemaState:
    """Rename a table. Uniqueness is not re-checked; the validator reports collisions."""
    return update_table(state, table_id, name=name)


def remove_table(state: SchemaState, table_id: str) -> SchemaState:
    """Drop a table and every relationship that starts or ends at it."""
    _require_table(state, table_id, "remove_table")
    tables = [table for table in state.tables if table.id != table_id]
    relationships = [rel for rel in state.relationships if not rel.touches_table(table_id)]
    pruned = len(state.relationships) - len(relationships)
    if pruned:
        logger.debug(f"Removing table {table_id} pruned {pruned} relationship(s)")
    return state.model_copy(update={"tables": tables, "relationships": relationships})


def add_column(
    state: SchemaState,
    table_id: str,
    name: Optional[str] = None,
    data_type: Optional[str] = None,
    is_primary_key: bool = False,
    is_foreign_key: bool = False,
    is_nullable: bool = True,
    references: Optional[Mapping[str, str]] = None,
    column_id: Optional[str] = None,
    id_factory: IdFactory = generate_id,
) -> SchemaState:
    """Append a column; a colliding name gets a ``_1``, ``_2`` ... suffix within the table."""
    settings = get_editing_settings()
    index, table = _require_table(state, table_id, "add_column")

    column_id = column_id or id_factory()
    if table.column_by_id(column_id) is not None:
        raise _fail("add_column", f"Column id '{column_id}' is already in use", table_id=table_id, column_id=column_id)

    base = (name or "").strip() or settings.default_column_name
    column = Column.model_validate(
        {
            "id": column_id,
            "name": unique_name(base, [c.name for c in table.columns]),
            "data_type": data_type or settings.default_column_type,
            "is_primary_key": is_primary_key,
            "is_foreign_key": is_foreign_key,
            "is_nullable": is_nullable,
            "references": references,
        }
    )
    updated = table.model_copy(update={"columns": [*table.columns, column]})
    return _with_table(state, index, updated)


def update_column(state: SchemaState, table_id: str, column_id: str, **changes: Any) -> SchemaState:
    """Apply field changes to one column; setting ``references`` to None clears it."""
    _check_changes(changes, COLUMN_FIELDS, "update_column", table_id=table_id, column_id=column_id)
    index, table = _require_table(state, table_id, "update_column")
    column = _require_column(table, column_id, "update_column")
    updated_column = _revalidate(Column, column, changes, "update_column", table_id=table_id, column_id=column_id)
    columns = [updated_column if c.id == column_id else c for c in table.columns]
    return _with_table(state, index, table.model_copy(update={"columns": columns}))


def remove_column(state: SchemaState, table_id: str, column_id: str) -> SchemaState:
    """Drop a column and every relationship that uses it as an endpoint."""
    index, table = _require_table(state, table_id, "remove_column")
    _require_column(table, column_id, "remove_column")
    columns = [c for c in table.columns if c.id != column_id]
    relationships = [rel for rel in state.relationships if not rel.touches_column(table_id, column_id)]
    state = _with_table(state, index, table.model_copy(update={"columns": columns}))
    return state.model_copy(update={"relationships": relationships})


def _check_endpoints(state: SchemaState, relationship: Relationship, operation: str) -> None:
    _, source = _require_table(state, relationship.source, operation)
    _, target = _require_table(state, relationship.target, operation)
    _require_column(source, relationship.source_column_ref, operation)
    _require_column(target, relationship.target_column_ref, operation)


def add_relationship(
    state: SchemaState,
    source: str,
    target: str,
    source_column_ref: str,
    target_column_ref: str,
    label: Optional[str] = None,
    relationship_id: Optional[str] = None,
    id_factory: IdFactory = generate_id,
) -> SchemaState:
    """
    Append an edge between two existing columns.

    Raises:
        SchemaOperationError: If an endpoint table or column is missing, or the id is taken
    """
    relationship_id = relationship_id or id_factory()
    if state.relationship_by_id(relationship_id) is not None:
        raise _fail(
            "add_relationship",
            f"Relationship id '{relationship_id}' is already in use",
            relationship_id=relationship_id,
        )
    relationship = Relationship(
        id=relationship_id,
        source=source,
        target=target,
        source_column_ref=source_column_ref,
        target_column_ref=target_column_ref,
        label=label,
    )
    _check_endpoints(state, relationship, "add_relationship")
    return state.model_copy(update={"relationships": [*state.relationships, relationship]})


def connect_columns(
    state: SchemaState,
    source: str,
    source_column_ref: str,
    target: str,
    target_column_ref: str,
    label: Optional[str] = None,
    relationship_id: Optional[str] = None,
    id_factory: IdFactory = generate_id,
) -> SchemaState:
    """
    Record that the user connected two columns.

    Adds the edge, decides which end is the child and writes ``references`` (and the
    foreign key flag) onto the child column.
    """
    state = add_relationship(
        state,
        source=source,
        target=target,
        source_column_ref=source_column_ref,
        target_column_ref=target_column_ref,
        label=label,
        relationship_id=relationship_id,
        id_factory=id_factory,
    )
    relationship = state.relationships[-1]
    resolved = resolve_relationship(state.tables_by_id(), relationship)
    if resolved is None:
        return state
    logger.debug(
        f"Connected {resolved.child_table}.{resolved.child_column} -> "
        f"{resolved.parent_table}.{resolved.parent_column} ({resolved.rule.value})"
    )
    return state.model_copy(update={"tables": apply_resolution(state.tables, resolved)})


def update_relationship(state: SchemaState, relationship_id: str, **changes: Any) -> SchemaState:
    _check_changes(changes, RELATIONSHIP_FIELDS, "update_relationship", relationship_id=relationship_id)
    relationship = state.relationship_by_id(relationship_id)
    if relationship is None:
        raise _fail(
            "update_relationship",
            f"Relationship '{relationship_id}' does not exist",
            relationship_id=relationship_id,
        )
    updated = _revalidate(Relationship, relationship, changes, "update_relationship", relationship_id=relationship_id)
    _check_endpoints(state, updated, "update_relationship")
    relationships = [updated if rel.id == relationship_id else rel for rel in state.relationships]
    return state.model_copy(update={"relationships": relationships})


def remove_relationship(state: SchemaState, relationship_id: str) -> SchemaState:
    if state.relationship_by_id(relationship_id) is None:
        raise _fail(
            "remove_relationship",
            f"Relationship '{relationship_id}' does not exist",
            relationship_id=relationship_id,
        )
    relationships = [rel for rel in state.relationships if rel.id != relationship_id]
    return state.model_copy(update={"relationships": relationships})


def set_dialect(state: SchemaState, dialect: Union[Dialect, str]) -> SchemaState:
    try:
        value = Dialect(dialect)
    except ValueError as e:
        raise _fail("set_dialect", f"Unknown dialect '{dialect}'") from e
    return state.model_copy(update={"dialect": value})


def prune_relationships(tables: Sequence[Table], relationships: Iterable[Relationship]) -> List[Relationship]:
    """Keep edges whose tables and columns all exist; log the ones dropped."""
    tables_by_id: Dict[str, Table] = {table.id: table for table in tables}
    kept = []
    for rel in relationships:
        source = tables_by_id.get(rel.source)
        target = tables_by_id.get(rel.target)
        if (
            source is None
            or target is None
            or source.column_by_id(rel.source_column_ref) is None
            or target.column_by_id(rel.target_column_ref) is None
        ):
            logger.warning(f"Dropping dangling relationship {rel.id} ({rel.source} -> {rel.target})")
            continue
        kept.append(rel)
    return kept


def load_schema(
    tables: Sequence[Union[Table, Mapping[str, Any]]],
    relationships: Optional[Sequence[Union[Relationship, Mapping[str, Any]]]] = None,
    dialect: Union[Dialect, str] = Dialect.POSTGRESQL,
    should_layout: Optional[bool] = None,
    id_factory: IdFactory = generate_id,
) -> SchemaState:
    """
    Build a snapshot from externally generated tables.

    Args:
        tables: Tables (models or dicts); missing ids are generated
        relationships: Edges; when None they are derived from column references
        dialect: Dialect for the new snapshot
        should_layout: Force (True) or skip (False) auto-layout; None lays out only
            when every table sits at the origin
        id_factory: Id generator for missing ids

    Returns:
        New snapshot

    Raises:
        SchemaOperationError: If a table, column or relationship cannot be parsed
            or the dialect is unknown
    """
    try:
        new_tables = [_coerce_table(table, id_factory) for table in tables]
        parsed = None
        if relationships is not None:
            parsed = [rel if isinstance(rel, Relationship) else Relationship.model_validate(rel) for rel in relationships]
    except ValidationError as e:
        raise SchemaOperationError(
            message=f"Invalid value: {e.errors()[0].get('msg', str(e))}",
            context=ErrorContext(operation="load_schema"),
            original_exception=e,
        ) from e

    try:
        new_dialect = Dialect(dialect)
    except ValueError as e:
        raise _fail("load_schema", f"Unknown dialect '{dialect}'") from e

    if parsed is None:
        new_relationships = derive_relationships(new_tables)
        logger.debug(f"Derived {len(new_relationships)} relationship(s) from column references")
    else:
        new_relationships = prune_relationships(new_tables, parsed)

    state = SchemaState(tables=new_tables, relationships=new_relationships, dialect=new_dialect)

    if should_layout is None:
        should_layout = needs_layout(new_tables)
    if should_layout:
        state = auto_layout(state)

    logger.info(f"Loaded schema with {len(new_tables)} table(s) and {len(new_relationships)} relationship(s)")
    return state

"""Relationship resolution: which end of a connection is the foreign key.

An edge only records the columns the user connected. Whether the source or the
target column is the child (the side that holds the FOREIGN KEY) is decided here,
and only here, so interactive connections, DDL compilation and edges derived from
``references`` all agree.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from schemaforge.ir.models import Column, ColumnReference, Relationship, Table
from schemaforge.utils.logging import get_logger

logger = get_logger(__name__)


class ResolutionRule(str, Enum):
    REFERENCE_POINTER = "reference_pointer"
    FOREIGN_KEY_FLAG = "foreign_key_flag"
    PRIMARY_KEY_FLAG = "primary_key_flag"
    SOURCE_TARGET_FALLBACK = "source_target_fallback"


class Orientation(NamedTuple):
    child_is_source: bool
    rule: ResolutionRule


class ResolvedRelationship(BaseModel):
    """A relationship with its child (FK holder) and parent (referenced) ends named."""
    model_config = ConfigDict(frozen=True)

    relationship_id: str
    child_table_id: str
    child_table: str
    child_column_id: str
    child_column: str
    parent_table_id: str
    parent_table: str
    parent_column_id: str
    parent_column: str
    rule: ResolutionRule

    @property
    def constraint_key(self) -> Tuple[str, str, str]:
        return (self.child_table, self.parent_table, self.child_column)

    @property
    def signature(self) -> Tuple[str, str, str, str]:
        return (self.child_table_id, self.child_column_id, self.parent_table_id, self.parent_column_id)


def _ambiguous_orientation() -> Orientation:
    # Both or neither column is flagged: the drawn direction decides.
    return Orientation(child_is_source=True, rule=ResolutionRule.SOURCE_TARGET_FALLBACK)


def _points_at(column: Column, table: Optional[Table], other: Column) -> bool:
    ref = column.references
    if ref is None or table is None:
        return False
    return ref.table.lower() == table.name.lower() and ref.column.lower() == other.name.lower()


def orient_columns(
    source_column: Column,
    target_column: Column,
    source_table: Optional[Table] = None,
    target_table: Optional[Table] = None,
) -> Orientation:
    """
    Decide which of two connected columns is the child.

    Rules (first match wins):
    - exactly one column's reference names the other end -> it is the child
      (needs the tables; skipped when they are not given)
    - exactly one is a foreign key (flag or reference) -> it is the child
    - exactly one is a primary key -> the other one is the child
    - otherwise -> the source column is the child

    Args:
        source_column: Column on the edge's source table
        target_column: Column on the edge's target table
        source_table: Table holding ``source_column``
        target_table: Table holding ``target_column``

    Returns:
        Orientation with ``child_is_source`` and the rule that decided it
    """
    source_points = _points_at(source_column, target_table, target_column)
    target_points = _points_at(target_column, source_table, source_column)
    if source_points != target_points:
        return Orientation(child_is_source=source_points, rule=ResolutionRule.REFERENCE_POINTER)

    source_fk = source_column.is_effective_foreign_key
    target_fk = target_column.is_effective_foreign_key
    if source_fk != target_fk:
        return Orientation(child_is_source=source_fk, rule=ResolutionRule.FOREIGN_KEY_FLAG)

    if source_column.is_primary_key != target_column.is_primary_key:
        return Orientation(child_is_source=not source_column.is_primary_key, rule=ResolutionRule.PRIMARY_KEY_FLAG)

    return _ambiguous_orientation()


def resolve_relationship(
    tables_by_id: Mapping[str, Table],
    relationship: Relationship,
) -> Optional[ResolvedRelationship]:
    """Resolve one edge; ``None`` when a table or column it names is missing."""
    source_table = tables_by_id.get(relationship.source)
    target_table = tables_by_id.get(relationship.target)
    if source_table is None or target_table is None:
        logger.debug(f"Relationship {relationship.id} skipped: endpoint table not available")
        return None

    source_column = source_table.column_by_id(relationship.source_column_ref)
    target_column = target_table.column_by_id(relationship.target_column_ref)
    if source_column is None or target_column is None:
        logger.debug(f"Relationship {relationship.id} skipped: endpoint column not found")
        return None

    orientation = orient_columns(source_column, target_column, source_table, target_table)
    if orientation.child_is_source:
        child_table, child_column, parent_table, parent_column = source_table, source_column, target_table, target_column
    else:
        child_table, child_column, parent_table, parent_column = target_table, target_column, source_table, source_column

    return ResolvedRelationship(
        relationship_id=relationship.id,
        child_table_id=child_table.id,
        child_table=child_table.name,
        child_column_id=child_column.id,
        child_column=child_column.name,
        parent_table_id=parent_table.id,
        parent_table=parent_table.name,
        parent_column_id=parent_column.id,
        parent_column=parent_column.name,
        rule=orientation.rule,
    )


def resolve_relationships(
    tables: Sequence[Table],
    relationships: Iterable[Relationship],
) -> List[ResolvedRelationship]:
    """Resolve every edge in order, dropping the ones that cannot be resolved."""
    tables_by_id = {table.id: table for table in tables}
    resolved = []
    for relationship in relationships:
        result = resolve_relationship(tables_by_id, relationship)
        if result is not None:
            resolved.append(result)
    return resolved


def apply_resolution(tables: Sequence[Table], resolved: ResolvedRelationship) -> List[Table]:
    """Write ``references`` (and the FK flag) onto the child column of a resolved edge."""
    updated = []
    for table in tables:
        if table.id != resolved.child_table_id:
            updated.append(table)
            continue
        columns = []
        for column in table.columns:
            if column.id == resolved.child_column_id:
                column = column.model_copy(
                    update={
                        "is_foreign_key": True,
                        "references": ColumnReference(table=resolved.parent_table, column=resolved.parent_column),
                    }
                )
            columns.append(column)
        updated.append(table.model_copy(update={"columns": columns}))
    return updated


def apply_references(tables: Sequence[Table], relationships: Iterable[Relationship]) -> List[Table]:
    """Synthesize ``references`` on child columns from a list of edges."""
    current = list(tables)
    for relationship in relationships:
        resolved = resolve_relationship({table.id: table for table in current}, relationship)
        if resolved is not None:
            current = apply_resolution(current, resolved)
    return current


def find_table_by_name(tables: Sequence[Table], name: str) -> Optional[Table]:
    wanted = (name or "").lower()
    for table in tables:
        if table.name.lower() == wanted:
            return table
    return None


def find_parent_column(parent_table: Table, column_name: str) -> Optional[Column]:
    """Referenced column by name, else the table's single primary key column."""
    column = parent_table.column_by_name(column_name)
    if column is not None:
        return column
    primary_keys = parent_table.primary_key_columns()
    if len(primary_keys) == 1:
        return primary_keys[0]
    return None


def derived_relationship_id(child_table_id: str, parent_table_id: str, child_column_id: str) -> str:
    return f"e-{child_table_id}-{parent_table_id}-{child_column_id}"


def derive_relationships(tables: Sequence[Table]) -> List[Relationship]:
    """
    Materialize edges from column ``references``.

    Each referencing column yields one edge with the child as source and the parent
    as target. References naming an unknown table, or a column that cannot be found
    (and no single primary key to fall back on), produce no edge.

    Args:
        tables: Tables in display order

    Returns:
        Relationships in table order, then column order
    """
    relationships = []
    for table in tables:
        for column in table.columns:
            if column.references is None:
                continue
            parent_table = find_table_by_name(tables, column.references.table)
            if parent_table is None:
                logger.debug(
                    f"Reference {table.name}.{column.name} -> {column.references.table} left unresolved: no such table"
                )
                continue
            parent_column = find_parent_column(parent_table, column.references.column)
            if parent_column is None:
                logger.debug(
                    f"Reference {table.name}.{column.name} -> {parent_table.name}.{column.references.column} "
                    f"left unresolved: no matching column"
                )
                continue
            relationships.append(
                Relationship(
                    id=derived_relationship_id(table.id, parent_table.id, column.id),
                    source=table.id,
                    target=parent_table.id,
                    source_column_ref=column.id,
                    target_column_ref=parent_column.id,
                )
            )
    return relationships


def relationship_signatures(
    tables: Sequence[Table],
    relationships: Iterable[Relationship],
) -> List[Tuple[str, str, str, str]]:
    """Sorted (child table, child column, parent table, parent column) id tuples."""
    return sorted({resolved.signature for resolved in resolve_relationships(tables, relationships)})

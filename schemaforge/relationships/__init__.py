"""Parent/child resolution for column-to-column relationships."""

from .resolver import (
    Orientation,
    ResolutionRule,
    ResolvedRelationship,
    apply_references,
    apply_resolution,
    derive_relationships,
    derived_relationship_id,
    find_parent_column,
    find_table_by_name,
    orient_columns,
    relationship_signatures,
    resolve_relationship,
    resolve_relationships,
)

__all__ = [
    "Orientation",
    "ResolutionRule",
    "ResolvedRelationship",
    "apply_references",
    "apply_resolution",
    "derive_relationships",
    "derived_relationship_id",
    "find_parent_column",
    "find_table_by_name",
    "orient_columns",
    "relationship_signatures",
    "resolve_relationship",
    "resolve_relationships",
]

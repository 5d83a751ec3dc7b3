"""Editing operations and reducer commands over SchemaState."""

from .operations import (
    add_column,
    add_relationship,
    add_table,
    connect_columns,
    generate_id,
    load_schema,
    prune_relationships,
    remove_column,
    remove_relationship,
    remove_table,
    rename_table,
    set_dialect,
    unique_name,
    update_column,
    update_relationship,
    update_table,
)
from .commands import SchemaCommand, apply_command, apply_commands, parse_command

__all__ = [
    "add_column",
    "add_relationship",
    "add_table",
    "connect_columns",
    "generate_id",
    "load_schema",
    "prune_relationships",
    "remove_column",
    "remove_relationship",
    "remove_table",
    "rename_table",
    "set_dialect",
    "unique_name",
    "update_column",
    "update_relationship",
    "update_table",
    "SchemaCommand",
    "apply_command",
    "apply_commands",
    "parse_command",
]

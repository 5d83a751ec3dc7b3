"""Reducer commands: one pydantic model per editing operation.

Callers outside the engine (the HTTP layer, a canvas adapter) send commands as
dicts discriminated on ``type``; ``apply_command`` is the single entry point that
turns a snapshot plus a command into the next snapshot.
"""

from __future__ import annotations

from typing import Annotated, Any, Callable, Dict, List, Literal, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from schemaforge.ir.models import ColumnReference, Dialect, Position, SchemaState
from schemaforge.layout.layered_layout import auto_layout
from schemaforge.utils.error_handling import ErrorContext, SchemaOperationError
from schemaforge.utils.logging import get_logger

from . import operations
from .operations import IdFactory, generate_id

logger = get_logger(__name__)


class _Command(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid", frozen=True)

    def changes(self, *exclude: str) -> Dict[str, Any]:
        """Fields the caller actually sent, minus routing fields."""
        return self.model_dump(exclude_unset=True, exclude={"type", *exclude})


class AddTableCommand(_Command):
    type: Literal["add_table"] = "add_table"
    name: Optional[str] = None
    columns: Optional[List[Dict[str, Any]]] = None
    position: Optional[Position] = None
    color: Optional[str] = None
    description: Optional[str] = None
    table_id: Optional[str] = None


class RenameTableCommand(_Command):
    type: Literal["rename_table"] = "rename_table"
    table_id: str
    name: str


class UpdateTableCommand(_Command):
    type: Literal["update_table"] = "update_table"
    table_id: str
    name: Optional[str] = None
    position: Optional[Position] = None
    color: Optional[str] = None
    description: Optional[str] = None


class RemoveTableCommand(_Command):
    type: Literal["remove_table"] = "remove_table"
    table_id: str


class AddColumnCommand(_Command):
    type: Literal["add_column"] = "add_column"
    table_id: str
    name: Optional[str] = None
    data_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("dataType", "data_type", "columnType"))
    is_primary_key: bool = False
    is_foreign_key: bool = False
    is_nullable: bool = True
    references: Optional[ColumnReference] = None
    column_id: Optional[str] = None


class UpdateColumnCommand(_Command):
    type: Literal["update_column"] = "update_column"
    table_id: str
    column_id: str
    name: Optional[str] = None
    data_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("dataType", "data_type", "columnType"))
    is_primary_key: Optional[bool] = None
    is_foreign_key: Optional[bool] = None
    is_nullable: Optional[bool] = None
    references: Optional[ColumnReference] = None


class RemoveColumnCommand(_Command):
    type: Literal["remove_column"] = "remove_column"
    table_id: str
    column_id: str


class AddRelationshipCommand(_Command):
    type: Literal["add_relationship"] = "add_relationship"
    source: str
    target: str
    source_column_ref: str
    target_column_ref: str
    label: Optional[str] = None
    relationship_id: Optional[str] = None


class ConnectColumnsCommand(_Command):
    type: Literal["connect_columns"] = "connect_columns"
    source: str
    source_column_ref: str
    target: str
    target_column_ref: str
    label: Optional[str] = None
    relationship_id: Optional[str] = None


class UpdateRelationshipCommand(_Command):
    type: Literal["update_relationship"] = "update_relationship"
    relationship_id: str
    source: Optional[str] = None
    target: Optional[str] = None
    source_column_ref: Optional[str] = None
    target_column_ref: Optional[str] = None
    label: Optional[str] = None


class RemoveRelationshipCommand(_Command):
    type: Literal["remove_relationship"] = "remove_relationship"
    relationship_id: str


class SetDialectCommand(_Command):
    type: Literal["set_dialect"] = "set_dialect"
    dialect: Dialect


class AutoLayoutCommand(_Command):
    type: Literal["auto_layout"] = "auto_layout"


SchemaCommand = Annotated[
    Union[
        AddTableCommand,
        RenameTableCommand,
        UpdateTableCommand,
        RemoveTableCommand,
        AddColumnCommand,
        UpdateColumnCommand,
        RemoveColumnCommand,
        AddRelationshipCommand,
        ConnectColumnsCommand,
        UpdateRelationshipCommand,
        RemoveRelationshipCommand,
        SetDialectCommand,
        AutoLayoutCommand,
    ],
    Field(discriminator="type"),
]

_COMMAND_ADAPTER: TypeAdapter = TypeAdapter(SchemaCommand)


def parse_command(payload: Mapping[str, Any]) -> SchemaCommand:
    """
    Parse a raw command dict.

    Raises:
        SchemaOperationError: If the payload is not a valid command
    """
    try:
        return _COMMAND_ADAPTER.validate_python(dict(payload))
    except ValidationError as e:
        raise SchemaOperationError(
            message=f"Invalid command: {e.errors()[0].get('msg', str(e))}",
            context=ErrorContext(operation="parse_command", additional_context={"type": payload.get("type")}),
            original_exception=e,
        ) from e


def _add_table(state: SchemaState, cmd: AddTableCommand, id_factory: IdFactory) -> SchemaState:
    return operations.add_table(
        state,
        name=cmd.name,
        columns=cmd.columns,
        position=cmd.position,
        color=cmd.color,
        description=cmd.description,
        table_id=cmd.table_id,
        id_factory=id_factory,
    )


def _add_column(state: SchemaState, cmd: AddColumnCommand, id_factory: IdFactory) -> SchemaState:
    return operations.add_column(
        state,
        cmd.table_id,
        name=cmd.name,
        data_type=cmd.data_type,
        is_primary_key=cmd.is_primary_key,
        is_foreign_key=cmd.is_foreign_key,
        is_nullable=cmd.is_nullable,
        references=cmd.references.model_dump() if cmd.references else None,
        column_id=cmd.column_id,
        id_factory=id_factory,
    )


def _add_relationship(state: SchemaState, cmd: AddRelationshipCommand, id_factory: IdFactory) -> SchemaState:
    return operations.add_relationship(state, id_factory=id_factory, **cmd.changes())


def _connect_columns(state: SchemaState, cmd: ConnectColumnsCommand, id_factory: IdFactory) -> SchemaState:
    return operations.connect_columns(state, id_factory=id_factory, **cmd.changes())


_HANDLERS: Dict[str, Callable[[SchemaState, Any, IdFactory], SchemaState]] = {
    "add_table": _add_table,
    "rename_table": lambda state, cmd, _: operations.rename_table(state, cmd.table_id, cmd.name),
    "update_table": lambda state, cmd, _: operations.update_table(state, cmd.table_id, **cmd.changes("table_id")),
    "remove_table": lambda state, cmd, _: operations.remove_table(state, cmd.table_id),
    "add_column": _add_column,
    "update_column": lambda state, cmd, _: operations.update_column(
        state, cmd.table_id, cmd.column_id, **cmd.changes("table_id", "column_id")
    ),
    "remove_column": lambda state, cmd, _: operations.remove_column(state, cmd.table_id, cmd.column_id),
    "add_relationship": _add_relationship,
    "connect_columns": _connect_columns,
    "update_relationship": lambda state, cmd, _: operations.update_relationship(
        state, cmd.relationship_id, **cmd.changes("relationship_id")
    ),
    "remove_relationship": lambda state, cmd, _: operations.remove_relationship(state, cmd.relationship_id),
    "set_dialect": lambda state, cmd, _: operations.set_dialect(state, cmd.dialect),
    "auto_layout": lambda state, cmd, _: auto_layout(state),
}


def apply_command(
    state: SchemaState,
    command: Union[SchemaCommand, Mapping[str, Any]],
    id_factory: IdFactory = generate_id,
) -> SchemaState:
    """
    Apply one command to a snapshot.

    Args:
        state: Current snapshot
        command: A command model or its dict form
        id_factory: Id generator for commands that create things

    Returns:
        The next snapshot

    Raises:
        SchemaOperationError: If the command is malformed or targets something missing
    """
    if not isinstance(command, BaseModel):
        command = parse_command(command)
    logger.debug(f"Applying command {command.type}")
    return _HANDLERS[command.type](state, command, id_factory)


def apply_commands(
    state: SchemaState,
    commands: List[Union[SchemaCommand, Mapping[str, Any]]],
    id_factory: IdFactory = generate_id,
) -> SchemaState:
    for command in commands:
        state = apply_command(state, command, id_factory)
    return state

"""Schema graph models: tables, columns, relationships and validation issues.

Every model is frozen; editing operations return new instances instead of mutating.
Fields are snake_case in Python and camelCase on the wire, which is the shape the
canvas persists (``isPrimaryKey``, ``sourceColumnRef`` ...).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .data_types import DataType, classify_data_type, normalize_data_type


_WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
    extra="ignore",
)

_HANDLE_PREFIXES = ("source-", "target-")


class Dialect(str, Enum):
    POSTGRESQL = "PostgreSQL"
    MYSQL = "MySQL"
    SQLITE = "SQLite"
    SQL_SERVER = "SQL Server"


class ReferentialAction(str, Enum):
    NO_ACTION = "NO ACTION"
    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    RESTRICT = "RESTRICT"


class IssueSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class TableColor(str, Enum):
    BLUE = "blue"
    WHITE = "white"
    YELLOW = "yellow"
    RED = "red"
    GREEN = "green"
    PURPLE = "purple"
    PINK = "pink"


def _blank_if_none(value: Any) -> Any:
    # Generators emit null for "no name"; the validator reports it as blank
    return "" if value is None else value


class Position(BaseModel):
    """Top-left corner of a table box on the canvas."""
    model_config = _WIRE_CONFIG

    x: float = 0.0
    y: float = 0.0


class ColumnReference(BaseModel):
    """By-name pointer from a foreign key column to its parent column."""
    model_config = _WIRE_CONFIG

    table: str
    column: str


class Column(BaseModel):
    model_config = _WIRE_CONFIG

    id: str
    name: str = ""
    data_type: str = Field(
        default=DataType.VARCHAR.value,
        validation_alias=AliasChoices("type", "dataType", "data_type"),
        serialization_alias="type",
    )
    is_primary_key: bool = False
    is_foreign_key: bool = False
    is_nullable: bool = True
    references: Optional[ColumnReference] = None

    @field_validator("name", mode="before")
    @classmethod
    def _null_name(cls, value: Any) -> Any:
        return _blank_if_none(value)

    @field_validator("data_type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> str:
        return normalize_data_type(value)

    @field_validator("references", mode="before")
    @classmethod
    def _drop_blank_reference(cls, value: Any) -> Any:
        # Canvas payloads carry {"table": "", "column": ""} for "no reference"
        if isinstance(value, dict) and not str(value.get("table") or "").strip():
            return None
        return value

    @property
    def is_effective_foreign_key(self) -> bool:
        """A column is a foreign key if flagged as one or if it carries a reference."""
        return self.is_foreign_key or self.references is not None

    @property
    def type_category(self) -> DataType:
        return classify_data_type(self.data_type)


class Table(BaseModel):
    model_config = _WIRE_CONFIG

    id: str
    name: str = ""
    columns: List[Column] = Field(default_factory=list)
    position: Position = Field(default_factory=Position)
    color: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _null_name(cls, value: Any) -> Any:
        return _blank_if_none(value)

    def column_by_id(self, column_id: str) -> Optional[Column]:
        for column in self.columns:
            if column.id == column_id:
                return column
        return None

    def column_by_name(self, name: str) -> Optional[Column]:
        """Case-insensitive lookup; first match wins."""
        wanted = (name or "").lower()
        for column in self.columns:
            if column.name.lower() == wanted:
                return column
        return None

    def primary_key_columns(self) -> List[Column]:
        return [column for column in self.columns if column.is_primary_key]


class Relationship(BaseModel):
    """Directed edge between a column of ``source`` and a column of ``target``.

    The direction is whatever the user drew; which side is the child is decided by the
    relationship resolver, not by this model.
    """
    model_config = _WIRE_CONFIG

    id: str
    source: str
    target: str
    source_column_ref: str = Field(
        validation_alias=AliasChoices("sourceColumnRef", "source_column_ref", "sourceHandle"),
    )
    target_column_ref: str = Field(
        validation_alias=AliasChoices("targetColumnRef", "target_column_ref", "targetHandle"),
    )
    label: Optional[str] = None

    @field_validator("source_column_ref", "target_column_ref", mode="before")
    @classmethod
    def _strip_handle_prefix(cls, value: Any) -> Any:
        if isinstance(value, str):
            for prefix in _HANDLE_PREFIXES:
                if value.startswith(prefix):
                    return value[len(prefix):]
        return value

    @property
    def source_handle(self) -> str:
        return f"source-{self.source_column_ref}"

    @property
    def target_handle(self) -> str:
        return f"target-{self.target_column_ref}"

    def touches_table(self, table_id: str) -> bool:
        return self.source == table_id or self.target == table_id

    def touches_column(self, table_id: str, column_id: str) -> bool:
        return (self.source == table_id and self.source_column_ref == column_id) or (
            self.target == table_id and self.target_column_ref == column_id
        )


class SchemaIssue(BaseModel):
    model_config = _WIRE_CONFIG

    id: str
    severity: IssueSeverity
    title: str
    description: str
    affected_table_id: Optional[str] = None


class SchemaState(BaseModel):
    """A complete, immutable schema snapshot."""
    model_config = _WIRE_CONFIG

    tables: List[Table] = Field(default_factory=list)
    relationships: List[Relationship] = Field(default_factory=list)
    dialect: Dialect = Dialect.POSTGRESQL

    def table_by_id(self, table_id: str) -> Optional[Table]:
        for table in self.tables:
            if table.id == table_id:
                return table
        return None

    def table_index(self, table_id: str) -> int:
        for index, table in enumerate(self.tables):
            if table.id == table_id:
                return index
        return -1

    def tables_by_id(self) -> Dict[str, Table]:
        return {table.id: table for table in self.tables}

    def relationship_by_id(self, relationship_id: str) -> Optional[Relationship]:
        for relationship in self.relationships:
            if relationship.id == relationship_id:
                return relationship
        return None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

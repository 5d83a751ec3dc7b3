"""Tests for the schema models and data type classification."""

import pytest
from pydantic import ValidationError

from schemaforge.ir.models import (
    Column,
    ColumnReference,
    DataType,
    Dialect,
    Relationship,
    SchemaState,
    Table,
    classify_data_type,
    is_known_data_type,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("INT", DataType.INT),
        ("varchar(255)", DataType.VARCHAR),
        ("DECIMAL(10, 2)", DataType.DECIMAL),
        ("jsonb", DataType.JSONB),
        ("CITEXT", DataType.UNKNOWN),
        ("DOUBLE PRECISION", DataType.UNKNOWN),
        ("", DataType.UNKNOWN),
    ],
)
def test_classify_data_type(raw, expected):
    assert classify_data_type(raw) is expected


def test_unknown_type_is_stored_verbatim():
    column = Column(id="c1", name="tags", data_type="text[]")
    assert column.data_type == "text[]"
    assert column.type_category is DataType.UNKNOWN
    assert not is_known_data_type(column.data_type)


def test_blank_type_falls_back_to_varchar():
    assert Column(id="c1", name="x", data_type="  ").data_type == "VARCHAR"
    assert Column.model_validate({"id": "c1", "name": "x", "type": None}).data_type == "VARCHAR"


def test_column_reads_canvas_shape():
    column = Column.model_validate(
        {
            "id": "c2",
            "name": "user_id",
            "type": "INT",
            "isPrimaryKey": False,
            "isForeignKey": True,
            "isNullable": False,
            "references": {"table": "users", "column": "id"},
        }
    )
    assert column.is_foreign_key
    assert column.is_nullable is False
    assert column.references == ColumnReference(table="users", column="id")


def test_reference_implies_foreign_key():
    column = Column(id="c1", name="user_id", references=ColumnReference(table="users", column="id"))
    assert column.is_foreign_key is False
    assert column.is_effective_foreign_key is True


def test_blank_reference_is_dropped():
    column = Column.model_validate({"id": "c1", "name": "x", "references": {"table": "", "column": ""}})
    assert column.references is None


def test_column_serializes_with_camel_case_aliases():
    dumped = Column(id="c1", name="id", data_type="INT", is_primary_key=True).model_dump(by_alias=True)
    assert dumped["type"] == "INT"
    assert dumped["isPrimaryKey"] is True
    assert "data_type" not in dumped


def test_relationship_strips_handle_prefixes():
    rel = Relationship.model_validate(
        {"id": "e1", "source": "t1", "target": "t2", "sourceHandle": "source-c3", "targetHandle": "target-c1"}
    )
    assert rel.source_column_ref == "c3"
    assert rel.target_column_ref == "c1"
    assert rel.source_handle == "source-c3"


def test_models_are_frozen():
    table = Table(id="t1", name="users")
    with pytest.raises(ValidationError):
        table.name = "people"


def test_state_lookups(users_orders_state):
    assert users_orders_state.table_by_id("t2").name == "orders"
    assert users_orders_state.table_index("missing") == -1
    assert users_orders_state.relationship_by_id("r1").target == "t2"
    assert users_orders_state.dialect is Dialect.POSTGRESQL


def test_column_lookup_by_name_is_case_insensitive(users_table):
    assert users_table.column_by_name("EMAIL").id == "c2"
    assert users_table.column_by_name("missing") is None


def test_state_to_wire_round_trips(users_orders_state):
    wire = users_orders_state.to_wire()
    assert wire["relationships"][0]["sourceColumnRef"] == "c1"
    assert SchemaState.model_validate(wire) == users_orders_state

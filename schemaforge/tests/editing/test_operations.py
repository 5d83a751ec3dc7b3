"""Tests for pure editing operations."""

import pytest

from schemaforge.editing import (
    add_column,
    add_relationship,
    add_table,
    connect_columns,
    load_schema,
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
from schemaforge.ir.models import ColumnReference, Dialect, Position, SchemaState
from schemaforge.utils.error_handling import SchemaOperationError
from schemaforge.validation import validate_schema


def test_unique_name_suffixes_case_insensitively():
    assert unique_name("users", []) == "users"
    assert unique_name("users", ["Users"]) == "users_1"
    assert unique_name("users", ["users", "USERS_1"]) == "users_2"


def test_add_table_defaults(id_factory):
    state = add_table(SchemaState(), id_factory=id_factory)
    table = state.tables[0]
    assert table.id == "id1"
    assert table.name == "new_table"
    assert table.position == Position(x=100, y=100)
    [column] = table.columns
    assert (column.name, column.data_type, column.is_primary_key, column.is_nullable) == ("id", "INT", True, False)


def test_add_table_suffixes_colliding_names(id_factory):
    state = SchemaState()
    for _ in range(3):
        state = add_table(state, name="Users", id_factory=id_factory)
    assert [t.name for t in state.tables] == ["Users", "Users_1", "Users_2"]


def test_add_table_does_not_mutate_input(id_factory):
    original = SchemaState()
    add_table(original, name="users", id_factory=id_factory)
    assert original.tables == []


def test_add_table_rejects_taken_id(users_orders_state):
    with pytest.raises(SchemaOperationError) as exc_info:
        add_table(users_orders_state, name="x", table_id="t1")
    assert exc_info.value.context.operation == "add_table"


def test_add_table_accepts_column_dicts(id_factory):
    state = add_table(
        SchemaState(),
        name="tags",
        columns=[{"name": "label", "type": "TEXT"}],
        position={"x": 5, "y": 6},
        id_factory=id_factory,
    )
    table = state.tables[0]
    assert table.columns[0].data_type == "TEXT"
    assert table.columns[0].id == "id2"
    assert table.position == Position(x=5, y=6)


def test_rename_table_skips_uniqueness_check(users_orders_state):
    state = rename_table(users_orders_state, "t2", "users")
    assert [t.name for t in state.tables] == ["users", "users"]


def test_update_table_fields(users_orders_state):
    state = update_table(users_orders_state, "t1", color="green", position={"x": 40, "y": 50}, description="People")
    table = state.table_by_id("t1")
    assert table.color == "green"
    assert table.position == Position(x=40, y=50)
    assert table.description == "People"


def test_update_table_rejects_unknown_field(users_orders_state):
    with pytest.raises(SchemaOperationError, match="Unsupported field"):
        update_table(users_orders_state, "t1", columns=[])


def test_unknown_table_raises(users_orders_state):
    with pytest.raises(SchemaOperationError) as exc_info:
        rename_table(users_orders_state, "nope", "x")
    assert exc_info.value.context.table_id == "nope"


def test_remove_table_cascades_relationships(users_orders_state):
    state = remove_table(users_orders_state, "t1")
    assert [t.id for t in state.tables] == ["t2"]
    assert state.relationships == []
    assert all(rel.source != "t1" and rel.target != "t1" for rel in state.relationships)


def test_add_column_defaults_and_suffix(users_orders_state, id_factory):
    state = add_column(users_orders_state, "t1", id_factory=id_factory)
    state = add_column(state, "t1", id_factory=id_factory)
    state = add_column(state, "t1", name="EMAIL", data_type="TEXT", id_factory=id_factory)
    names = [c.name for c in state.table_by_id("t1").columns]
    assert names == ["id", "email", "new_column", "new_column_1", "EMAIL_1"]
    new_column = state.table_by_id("t1").columns[2]
    assert new_column.data_type == "VARCHAR"
    assert new_column.is_nullable is True


def test_update_column_normalizes_and_clears(users_orders_state):
    state = update_column(
        users_orders_state, "t2", "c2", references={"table": "users", "column": "id"}, data_type=""
    )
    column = state.table_by_id("t2").column_by_id("c2")
    assert column.references == ColumnReference(table="users", column="id")
    assert column.data_type == "VARCHAR"

    cleared = update_column(state, "t2", "c2", references=None)
    assert cleared.table_by_id("t2").column_by_id("c2").references is None


def test_update_unknown_column_raises(users_orders_state):
    with pytest.raises(SchemaOperationError) as exc_info:
        update_column(users_orders_state, "t1", "zzz", name="x")
    assert exc_info.value.context.column_id == "zzz"


def test_remove_column_prunes_relationships(users_orders_state):
    state = remove_column(users_orders_state, "t2", "c2")
    assert [c.id for c in state.table_by_id("t2").columns] == ["c1"]
    assert state.relationships == []


def test_remove_unrelated_column_keeps_relationships(users_orders_state):
    state = remove_column(users_orders_state, "t1", "c2")
    assert len(state.relationships) == 1


def test_add_relationship_refuses_dangling_endpoints(users_orders_state):
    with pytest.raises(SchemaOperationError):
        add_relationship(users_orders_state, "t1", "ghost", "c1", "c1")
    with pytest.raises(SchemaOperationError):
        add_relationship(users_orders_state, "t1", "t2", "c1", "missing")


def test_add_relationship_allows_self_reference(users_orders_state, id_factory):
    state = add_relationship(users_orders_state, "t1", "t1", "c2", "c1", id_factory=id_factory)
    assert state.relationships[-1].source == state.relationships[-1].target == "t1"


def test_connect_columns_writes_reference_on_child(users_table, orders_table, id_factory):
    state = SchemaState(tables=[users_table, orders_table])
    # Drawn from the parent PK to the child FK column
    state = connect_columns(state, "t1", "c1", "t2", "c2", id_factory=id_factory)
    child = state.table_by_id("t2").column_by_id("c2")
    assert child.references == ColumnReference(table="users", column="id")
    assert child.is_foreign_key
    assert state.table_by_id("t1").column_by_id("c1").references is None
    assert state.relationships[0].id == "id1"


def test_connect_columns_primary_key_rule(users_table, orders_table, id_factory):
    state = SchemaState(tables=[users_table, orders_table])
    state = connect_columns(state, "t1", "c2", "t2", "c1", id_factory=id_factory)
    # users.email is not a key and orders.id is, so email becomes the child
    assert state.table_by_id("t1").column_by_id("c2").references == ColumnReference(table="orders", column="id")


def test_update_and_remove_relationship(users_orders_state):
    state = update_relationship(users_orders_state, "r1", label="places")
    assert state.relationships[0].label == "places"
    with pytest.raises(SchemaOperationError):
        update_relationship(state, "r1", target_column_ref="missing")
    state = remove_relationship(state, "r1")
    assert state.relationships == []
    with pytest.raises(SchemaOperationError):
        remove_relationship(state, "r1")


def test_set_dialect(users_orders_state):
    assert set_dialect(users_orders_state, "MySQL").dialect is Dialect.MYSQL
    with pytest.raises(SchemaOperationError):
        set_dialect(users_orders_state, "Oracle")


def test_load_schema_derives_relationships_and_lays_out(referencing_tables):
    state = load_schema(referencing_tables)
    assert [rel.id for rel in state.relationships] == ["e-o-u-o2"]
    positions = {t.id: t.position for t in state.tables}
    # orders references users, so it is laid out to the left
    assert positions["o"].x < positions["u"].x


def test_load_schema_keeps_trusted_positions(table_factory):
    tables = [table_factory("a", "a", x=10, y=20)]
    state = load_schema(tables, relationships=[])
    assert state.tables[0].position == Position(x=10, y=20)


def test_load_schema_prunes_dangling_relationships(table_factory):
    tables = [table_factory("a", "a"), table_factory("b", "b")]
    relationships = [
        {"id": "ok", "source": "a", "target": "b", "sourceHandle": "source-ac0", "targetHandle": "target-bc0"},
        {"id": "bad", "source": "a", "target": "zzz", "sourceColumnRef": "ac0", "targetColumnRef": "x"},
    ]
    state = load_schema(tables, relationships, should_layout=False)
    assert [rel.id for rel in state.relationships] == ["ok"]


def test_load_schema_reports_null_names_as_blank():
    state = load_schema(
        [{"id": "t", "name": None, "columns": [{"id": "c", "name": None, "type": "INT"}]}],
        should_layout=False,
    )

    assert state.tables[0].name == ""
    assert state.tables[0].columns[0].name == ""
    titles = [issue.title for issue in validate_schema(state.tables)]
    assert titles == ["Unnamed table", "Missing primary key", "Unnamed column"]


@pytest.mark.parametrize(
    "tables, relationships",
    [
        ([{"id": "t", "name": "t", "columns": [{"id": "c", "isPrimaryKey": "maybe"}]}], None),
        ([{"id": "t", "name": "t", "position": {"x": "left"}}], None),
        ([{"id": "t", "name": "t"}], [{"id": "r", "source": "t"}]),
    ],
)
def test_load_schema_wraps_invalid_input(tables, relationships):
    with pytest.raises(SchemaOperationError) as exc_info:
        load_schema(tables, relationships, should_layout=False)

    assert exc_info.value.context.operation == "load_schema"
    assert exc_info.value.message.startswith("Invalid value")


def test_load_schema_rejects_unknown_dialect():
    with pytest.raises(SchemaOperationError, match="Unknown dialect"):
        load_schema([], dialect="Oracle")

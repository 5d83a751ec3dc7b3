"""Tests for schema-to-Graphviz compilation."""

import pytest

from schemaforge.diagram import render_schema_diagram, schema_to_graphviz
from schemaforge.ir.models import Column, SchemaState, Table


def test_schema_to_graphviz(users_orders_state):
    graph = schema_to_graphviz(users_orders_state)

    assert graph.name == "Schema"
    dot_source = graph.source
    assert "rankdir=LR" in dot_source
    assert "users" in dot_source
    assert "<U>id</U>" in dot_source
    # Child column port points at the parent column port
    assert "T_t2:P_c2 -> T_t1:P_c1" in dot_source


def test_foreign_key_marker(users_orders_state):
    dot_source = schema_to_graphviz(users_orders_state).source
    assert ">FK<" in dot_source
    assert ">PK<" in dot_source


def test_subset_omits_relationships(users_orders_state):
    dot_source = schema_to_graphviz(users_orders_state, selected_table_ids=["t2"]).source
    assert "T_t1" not in dot_source
    assert "->" not in dot_source


def test_names_are_html_escaped():
    state = SchemaState(tables=[Table(id="t1", name="a<b", columns=[Column(id="c1", name="x&y")])])
    dot_source = schema_to_graphviz(state).source
    assert "a&lt;b" in dot_source
    assert "x&amp;y" in dot_source


def test_unsupported_format_raises(users_orders_state):
    with pytest.raises(ValueError, match="Unsupported diagram format"):
        render_schema_diagram(users_orders_state, format="bmp")

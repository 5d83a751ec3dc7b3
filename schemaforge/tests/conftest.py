"""Shared fixtures for engine tests."""

import itertools

import pytest

from schemaforge.ir.models import Column, ColumnReference, Position, Relationship, SchemaState, Table


@pytest.fixture
def id_factory():
    """Deterministic ids: id1, id2, ..."""
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


@pytest.fixture
def users_table():
    return Table(
        id="t1",
        name="users",
        columns=[
            Column(id="c1", name="id", data_type="INT", is_primary_key=True, is_nullable=False),
            Column(id="c2", name="email", data_type="VARCHAR", is_nullable=False),
        ],
    )


@pytest.fixture
def orders_table():
    return Table(
        id="t2",
        name="orders",
        columns=[
            Column(id="c1", name="id", data_type="INT", is_primary_key=True, is_nullable=False),
            Column(id="c2", name="user_id", data_type="INT", is_foreign_key=True, is_nullable=False),
        ],
    )


@pytest.fixture
def users_orders_state(users_table, orders_table):
    """users(id PK) <- orders(user_id FK), edge drawn from users.id to orders.user_id."""
    return SchemaState(
        tables=[users_table, orders_table],
        relationships=[
            Relationship(id="r1", source="t1", target="t2", source_column_ref="c1", target_column_ref="c2"),
        ],
    )


@pytest.fixture
def referencing_tables():
    """Tables linked only through column references (no edges)."""
    return [
        Table(
            id="u",
            name="users",
            columns=[Column(id="u1", name="id", data_type="INT", is_primary_key=True, is_nullable=False)],
        ),
        Table(
            id="o",
            name="orders",
            columns=[
                Column(id="o1", name="id", data_type="INT", is_primary_key=True, is_nullable=False),
                Column(
                    id="o2",
                    name="user_id",
                    data_type="INT",
                    is_nullable=False,
                    references=ColumnReference(table="Users", column="id"),
                ),
            ],
        ),
    ]


def make_table(table_id, name, column_count=1, x=0.0, y=0.0):
    columns = [
        Column(id=f"{table_id}c{i}", name="id" if i == 0 else f"col_{i}", is_primary_key=(i == 0))
        for i in range(column_count)
    ]
    return Table(id=table_id, name=name, columns=columns, position=Position(x=x, y=y))


@pytest.fixture
def table_factory():
    return make_table

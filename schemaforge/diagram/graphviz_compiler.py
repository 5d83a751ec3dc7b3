"""Schema Diagram Compiler - Compiles a SchemaState to a Graphviz diagram.

Features:
- Table = HTML-like record, one row per column
- Primary key = underlined column name
- Foreign key = "FK" marker in the key cell
- Relationship = edge from the child column's port to the parent column's port
- Left-to-right rank direction, matching the canvas layout
"""

from __future__ import annotations

import re
from html import escape
from typing import Dict, Iterable, Optional

from graphviz import Digraph

from schemaforge.ir.models import Column, SchemaState, Table
from schemaforge.relationships.resolver import resolve_relationships
from schemaforge.validation.schema_validation import select_tables

SUPPORTED_FORMATS = ("svg", "png", "pdf", "jpg")

# Header fill per table color tag
HEADER_COLORS: Dict[str, str] = {
    "blue": "#DBEAFE",
    "white": "#F8FAFC",
    "yellow": "#FEF9C3",
    "red": "#FEE2E2",
    "green": "#DCFCE7",
    "purple": "#F3E8FF",
    "pink": "#FCE7F3",
}
DEFAULT_HEADER_COLOR = "#E2E8F0"


# ---- Helper functions ----

def _tid(table_id: str) -> str:
    """Generate table node ID."""
    return f"T_{re.sub(r'[^0-9A-Za-z_]', '_', table_id)}"


def _port(column_id: str) -> str:
    """Generate column port name."""
    return f"P_{re.sub(r'[^0-9A-Za-z_]', '_', column_id)}"


def _html_underline(text: str) -> str:
    """Wrap text in underline tags; only reliable in SVG output."""
    return f"<U>{text}</U>"


def _key_marker(column: Column) -> str:
    markers = []
    if column.is_primary_key:
        markers.append("PK")
    if column.is_effective_foreign_key:
        markers.append("FK")
    return " ".join(markers)


def _table_label(table: Table) -> str:
    header_color = HEADER_COLORS.get((table.color or "").lower(), DEFAULT_HEADER_COLOR)
    rows = [
        f'<TR><TD COLSPAN="3" BGCOLOR="{header_color}"><B>{escape(table.name or "Unnamed")}</B></TD></TR>'
    ]
    for column in table.columns:
        name = escape(column.name)
        if column.is_primary_key:
            name = _html_underline(name)
        rows.append(
            f'<TR>'
            f'<TD ALIGN="LEFT">{_key_marker(column)}</TD>'
            f'<TD ALIGN="LEFT" PORT="{_port(column.id)}">{name}</TD>'
            f'<TD ALIGN="LEFT"><FONT COLOR="#64748B">{escape(column.data_type)}</FONT></TD>'
            f'</TR>'
        )
    return '<<TABLE BORDER="0" CELLBORDER="1" CELLSPACING="0" CELLPADDING="4">' + "".join(rows) + "</TABLE>>"


# ---- Main compiler ----

def schema_to_graphviz(state: SchemaState, selected_table_ids: Optional[Iterable[str]] = None) -> Digraph:
    """Compile a schema (or a table subset of it) to a Graphviz Digraph.

    Args:
        state: Schema snapshot
        selected_table_ids: Optional subset of tables to draw

    Returns:
        Graphviz Digraph object ready for rendering
    """
    g = Digraph(
        "Schema",
        graph_attr={
            "rankdir": "LR",
            "splines": "ortho",
            "nodesep": "0.6",
            "ranksep": "0.9",
            "pad": "0.25",
        },
    )
    g.attr("node", shape="plaintext", fontname="Helvetica", fontsize="11")
    g.attr("edge", fontname="Helvetica", fontsize="10", arrowhead="crow", arrowtail="none")

    tables = select_tables(state.tables, selected_table_ids)
    for table in tables:
        g.node(_tid(table.id), _table_label(table))

    included = {table.id for table in tables}
    relationships = [rel for rel in state.relationships if rel.source in included and rel.target in included]
    labels = {rel.id: rel.label for rel in relationships}
    for resolved in resolve_relationships(tables, relationships):
        edge_kw = {}
        if labels.get(resolved.relationship_id):
            edge_kw["label"] = labels[resolved.relationship_id]
        g.edge(
            f"{_tid(resolved.child_table_id)}:{_port(resolved.child_column_id)}",
            f"{_tid(resolved.parent_table_id)}:{_port(resolved.parent_column_id)}",
            **edge_kw,
        )

    return g


# ---- Rendering functions ----

def render_schema_diagram(
    state: SchemaState,
    format: str = "svg",
    selected_table_ids: Optional[Iterable[str]] = None,
    output_path: Optional[str] = None,
    cleanup: bool = True,
) -> bytes:
    """Render a schema diagram to image bytes.

    Args:
        state: Schema snapshot
        format: Output format - "svg" (recommended for underlines), "png", "jpg", or "pdf"
        selected_table_ids: Optional subset of tables to draw
        output_path: Optional path to save the file (without extension)
        cleanup: If True, remove intermediate .dot file after rendering

    Returns:
        Image bytes in the specified format

    Raises:
        ValueError: If format is not supported
    """
    if format not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported diagram format '{format}'. Use one of: {', '.join(SUPPORTED_FORMATS)}")

    g = schema_to_graphviz(state, selected_table_ids)

    if output_path:
        result_path = g.render(output_path, format=format, cleanup=cleanup)
        with open(result_path, "rb") as f:
            return f.read()
    return g.pipe(format=format)

"""Graphviz rendering of schema diagrams."""

from .graphviz_compiler import SUPPORTED_FORMATS, render_schema_diagram, schema_to_graphviz

__all__ = ["SUPPORTED_FORMATS", "render_schema_diagram", "schema_to_graphviz"]

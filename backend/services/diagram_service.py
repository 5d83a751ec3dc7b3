"""Diagram service - renders schema diagrams through Graphviz."""

from typing import Iterable, Optional

from schemaforge.diagram import render_schema_diagram, schema_to_graphviz
from schemaforge.ir.models import SchemaState

MEDIA_TYPES = {
    "dot": "text/vnd.graphviz",
    "svg": "image/svg+xml",
    "png": "image/png",
}


class DiagramService:
    """Generates schema diagram sources and images."""

    async def generate_diagram(
        self,
        state: SchemaState,
        format: str = "svg",
        selected_table_ids: Optional[Iterable[str]] = None,
    ) -> bytes:
        """Generate a diagram from a snapshot.

        ``dot`` returns the Graphviz source and needs no Graphviz binaries;
        ``svg`` and ``png`` render through the ``dot`` executable.

        Raises:
            ValueError: If the format is not one of ``MEDIA_TYPES``
        """
        if format not in MEDIA_TYPES:
            raise ValueError(f"Unsupported diagram format '{format}'. Use one of: {', '.join(MEDIA_TYPES)}")
        if format == "dot":
            return schema_to_graphviz(state, selected_table_ids).source.encode("utf-8")
        return render_schema_diagram(state, format=format, selected_table_ids=selected_table_ids)

    @staticmethod
    def media_type(format: str) -> str:
        return MEDIA_TYPES[format]

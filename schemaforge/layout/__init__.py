"""Auto-layout for table nodes."""

from .layered_layout import (
    EdgeRoute,
    LayoutEdge,
    LayoutNode,
    LayoutResult,
    assign_ranks,
    auto_layout,
    build_layout_graph,
    find_back_edges,
    layout_graph,
    layout_schema,
    needs_layout,
    node_height,
    order_ranks,
    route_edges,
)

__all__ = [
    "EdgeRoute",
    "LayoutEdge",
    "LayoutNode",
    "LayoutResult",
    "assign_ranks",
    "auto_layout",
    "build_layout_graph",
    "find_back_edges",
    "layout_graph",
    "layout_schema",
    "needs_layout",
    "node_height",
    "order_ranks",
    "route_edges",
]

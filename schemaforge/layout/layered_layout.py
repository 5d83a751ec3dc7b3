"""Layered left-to-right layout for table nodes.

Tables that hold foreign keys sit to the left of the tables they reference. The
procedure is a plain layering heuristic:

1. Cycles are broken by a DFS over nodes in input order; edges that point back
   into the DFS stack (including self-loops) do not constrain ranks.
2. Ranks are longest-path depths over the remaining DAG.
3. Nodes in a rank are ordered by the barycenter of their predecessors, with input
   order breaking ties, and stacked with ``node_sep`` between boxes.
4. Ranks are centered on the tallest one; centers are converted to top-left
   corners using each node's own size.

Positions depend only on the graph, so laying out an already laid-out schema
returns the same coordinates.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field

from schemaforge.config.settings import LayoutSettings, get_layout_settings
from schemaforge.ir.models import Position, SchemaState, Table
from schemaforge.relationships.resolver import resolve_relationship
from schemaforge.utils.logging import get_logger

logger = get_logger(__name__)


class LayoutNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    width: float
    height: float
    position: Position = Field(default_factory=Position)


class LayoutEdge(BaseModel):
    """Edge between two nodes; rows anchor the route at a column instead of the box center."""
    model_config = ConfigDict(frozen=True)

    id: str
    source: str
    target: str
    source_row: Optional[int] = None
    target_row: Optional[int] = None


class EdgeRoute(BaseModel):
    model_config = ConfigDict(frozen=True)

    edge_id: str
    points: List[Position]
    label_position: Position


class LayoutResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    nodes: List[LayoutNode]
    edges: List[LayoutEdge]
    routes: List[EdgeRoute] = Field(default_factory=list)
    ranks: Dict[str, int] = Field(default_factory=dict)
    width: float = 0.0
    height: float = 0.0

    def position_of(self, node_id: str) -> Optional[Position]:
        for node in self.nodes:
            if node.id == node_id:
                return node.position
        return None


def node_height(column_count: int, settings: Optional[LayoutSettings] = None) -> float:
    settings = settings or get_layout_settings()
    return settings.header_height + column_count * settings.row_height + settings.padding


def needs_layout(tables: Sequence[Table]) -> bool:
    """True when positions carry no information: every table sits at the origin."""
    return bool(tables) and all(table.position.x == 0 and table.position.y == 0 for table in tables)


def find_back_edges(node_ids: Sequence[str], edges: Sequence[LayoutEdge]) -> Set[int]:
    """
    Indices of edges that close a cycle.

    Iterative DFS visiting roots and successors in input order. An edge whose target
    is still on the DFS stack is a back edge; a self-loop always is.
    """
    adjacency: Dict[str, List[Tuple[int, str]]] = {node_id: [] for node_id in node_ids}
    for index, edge in enumerate(edges):
        if edge.source in adjacency and edge.target in adjacency:
            adjacency[edge.source].append((index, edge.target))

    # 0 = unvisited, 1 = on stack, 2 = finished
    marks: Dict[str, int] = {}
    back_edges: Set[int] = set()
    for root in node_ids:
        if marks.get(root):
            continue
        marks[root] = 1
        stack = [(root, iter(adjacency[root]))]
        while stack:
            node, successors = stack[-1]
            descended = False
            for index, successor in successors:
                mark = marks.get(successor, 0)
                if mark == 1:
                    back_edges.add(index)
                elif mark == 0:
                    marks[successor] = 1
                    stack.append((successor, iter(adjacency[successor])))
                    descended = True
                    break
            if not descended:
                marks[node] = 2
                stack.pop()
    return back_edges


def _forward_edges(node_ids: Sequence[str], edges: Sequence[LayoutEdge]) -> List[LayoutEdge]:
    known = set(node_ids)
    back_edges = find_back_edges(node_ids, edges)
    return [
        edge
        for index, edge in enumerate(edges)
        if index not in back_edges and edge.source in known and edge.target in known
    ]


def assign_ranks(node_ids: Sequence[str], edges: Sequence[LayoutEdge]) -> Dict[str, int]:
    """Longest-path rank of every node; sources and isolated nodes get rank 0."""
    forward = _forward_edges(node_ids, edges)
    successors: Dict[str, List[str]] = {node_id: [] for node_id in node_ids}
    indegree: Dict[str, int] = {node_id: 0 for node_id in node_ids}
    for edge in forward:
        successors[edge.source].append(edge.target)
        indegree[edge.target] += 1

    ranks = {node_id: 0 for node_id in node_ids}
    queue = [node_id for node_id in node_ids if indegree[node_id] == 0]
    head = 0
    while head < len(queue):
        node = queue[head]
        head += 1
        for successor in successors[node]:
            ranks[successor] = max(ranks[successor], ranks[node] + 1)
            indegree[successor] -= 1
            if indegree[successor] == 0:
                queue.append(successor)

    if len(queue) != len(node_ids):
        # Nodes never reached keep rank 0
        logger.warning(f"Layout ranking visited {len(queue)} of {len(node_ids)} nodes")
    return ranks


def _barycenter(
    node_id: str,
    predecessors: Sequence[str],
    slot: Dict[str, int],
    input_index: Dict[str, int],
) -> Tuple[float, int]:
    placed = [slot[p] for p in predecessors if p in slot]
    center = sum(placed) / len(placed) if placed else float(input_index[node_id])
    return (center, input_index[node_id])


def order_ranks(
    node_ids: Sequence[str],
    edges: Sequence[LayoutEdge],
    ranks: Dict[str, int],
) -> List[List[str]]:
    """Group nodes per rank, ordering each rank by predecessor barycenter."""
    input_index = {node_id: index for index, node_id in enumerate(node_ids)}
    predecessors: Dict[str, List[str]] = {node_id: [] for node_id in node_ids}
    for edge in _forward_edges(node_ids, edges):
        predecessors[edge.target].append(edge.source)

    rank_count = max(ranks.values()) + 1 if ranks else 0
    layers: List[List[str]] = [[] for _ in range(rank_count)]
    for node_id in node_ids:
        layers[ranks[node_id]].append(node_id)

    slot: Dict[str, int] = {node_id: index for index, node_id in enumerate(layers[0])} if layers else {}
    for rank in range(1, rank_count):
        layers[rank].sort(key=lambda node_id: _barycenter(node_id, predecessors[node_id], slot, input_index))
        for index, node_id in enumerate(layers[rank]):
            slot[node_id] = index
    return layers


def _anchor_y(node: LayoutNode, row: Optional[int], settings: LayoutSettings) -> float:
    if row is None:
        return node.position.y + node.height / 2
    return node.position.y + settings.header_height + row * settings.row_height + settings.row_height / 2


def route_edges(
    nodes: Sequence[LayoutNode],
    edges: Sequence[LayoutEdge],
    settings: Optional[LayoutSettings] = None,
) -> List[EdgeRoute]:
    """
    Orthogonal routes leaving the source's right side and entering the target's left side.

    Forward edges bend once at the horizontal midpoint (three segments). Edges whose
    target is not to the right of the source detour below both boxes.
    """
    settings = settings or get_layout_settings()
    by_id = {node.id: node for node in nodes}
    routes = []
    for edge in edges:
        source = by_id.get(edge.source)
        target = by_id.get(edge.target)
        if source is None or target is None:
            continue
        start = Position(x=source.position.x + source.width, y=_anchor_y(source, edge.source_row, settings))
        end = Position(x=target.position.x, y=_anchor_y(target, edge.target_row, settings))

        if end.x > start.x:
            mid_x = (start.x + end.x) / 2
            points = [start, Position(x=mid_x, y=start.y), Position(x=mid_x, y=end.y), end]
            label = Position(x=mid_x, y=(start.y + end.y) / 2)
        else:
            out_x = start.x + settings.edge_detour
            in_x = end.x - settings.edge_detour
            below = max(source.position.y + source.height, target.position.y + target.height) + settings.node_sep / 2
            points = [
                start,
                Position(x=out_x, y=start.y),
                Position(x=out_x, y=below),
                Position(x=in_x, y=below),
                Position(x=in_x, y=end.y),
                end,
            ]
            label = Position(x=(out_x + in_x) / 2, y=below)
        routes.append(EdgeRoute(edge_id=edge.id, points=points, label_position=label))
    return routes


def layout_graph(
    nodes: Sequence[LayoutNode],
    edges: Sequence[LayoutEdge],
    settings: Optional[LayoutSettings] = None,
) -> LayoutResult:
    """
    Position nodes left to right by rank.

    Args:
        nodes: Nodes with their sizes; incoming positions are ignored
        edges: Directed edges; unknown endpoints and cycles are tolerated

    Returns:
        LayoutResult with top-left positions, edge routes and the overall extent
    """
    settings = settings or get_layout_settings()
    if not nodes:
        return LayoutResult(nodes=[], edges=list(edges))

    node_ids = [node.id for node in nodes]
    by_id = {node.id: node for node in nodes}
    ranks = assign_ranks(node_ids, edges)
    layers = order_ranks(node_ids, edges, ranks)

    layer_widths = [max(by_id[node_id].width for node_id in layer) for layer in layers]
    layer_heights = [
        sum(by_id[node_id].height for node_id in layer) + settings.node_sep * (len(layer) - 1) for layer in layers
    ]
    tallest = max(layer_heights)

    placed: Dict[str, LayoutNode] = {}
    left = settings.margin
    for layer, layer_width, layer_height in zip(layers, layer_widths, layer_heights):
        center_x = left + layer_width / 2
        top = settings.margin + (tallest - layer_height) / 2
        for node_id in layer:
            node = by_id[node_id]
            center_y = top + node.height / 2
            position = Position(x=center_x - node.width / 2, y=center_y - node.height / 2)
            placed[node_id] = node.model_copy(update={"position": position})
            top += node.height + settings.node_sep
        left += layer_width + settings.rank_sep

    positioned = [placed[node_id] for node_id in node_ids]
    width = sum(layer_widths) + settings.rank_sep * (len(layers) - 1) + 2 * settings.margin
    height = tallest + 2 * settings.margin
    routes = route_edges(positioned, edges, settings)

    logger.debug(f"Laid out {len(positioned)} node(s) in {len(layers)} rank(s)")
    return LayoutResult(
        nodes=positioned,
        edges=list(edges),
        routes=routes,
        ranks=ranks,
        width=width,
        height=height,
    )


def build_layout_graph(
    state: SchemaState,
    settings: Optional[LayoutSettings] = None,
) -> Tuple[List[LayoutNode], List[LayoutEdge]]:
    """
    Nodes sized from column counts and edges anchored on their column rows.

    Resolvable relationships point from the child table to the parent table whatever
    direction they were drawn in; the rest keep their drawn direction.
    """
    settings = settings or get_layout_settings()
    nodes = [
        LayoutNode(
            id=table.id,
            width=settings.node_width,
            height=node_height(len(table.columns), settings),
            position=table.position,
        )
        for table in state.tables
    ]
    row_of: Dict[Tuple[str, str], int] = {
        (table.id, column.id): index for table in state.tables for index, column in enumerate(table.columns)
    }
    tables_by_id = state.tables_by_id()
    edges = []
    for rel in state.relationships:
        resolved = resolve_relationship(tables_by_id, rel)
        if resolved is None:
            ends = (rel.source, rel.source_column_ref, rel.target, rel.target_column_ref)
        else:
            ends = (
                resolved.child_table_id,
                resolved.child_column_id,
                resolved.parent_table_id,
                resolved.parent_column_id,
            )
        source, source_column, target, target_column = ends
        edges.append(
            LayoutEdge(
                id=rel.id,
                source=source,
                target=target,
                source_row=row_of.get((source, source_column)),
                target_row=row_of.get((target, target_column)),
            )
        )
    return nodes, edges


def layout_schema(state: SchemaState, settings: Optional[LayoutSettings] = None) -> LayoutResult:
    nodes, edges = build_layout_graph(state, settings)
    return layout_graph(nodes, edges, settings)


def auto_layout(state: SchemaState, settings: Optional[LayoutSettings] = None) -> SchemaState:
    """Return a copy of ``state`` with every table moved to its layered position."""
    if not state.tables:
        return state
    result = layout_schema(state, settings)
    positions = {node.id: node.position for node in result.nodes}
    tables = [table.model_copy(update={"position": positions[table.id]}) for table in state.tables]
    logger.info(f"Auto-layout placed {len(tables)} table(s)")
    return state.model_copy(update={"tables": tables})

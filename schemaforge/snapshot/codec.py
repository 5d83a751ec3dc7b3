"""Persisted snapshot format.

Two shapes are accepted on load:

- the engine shape ``{"tables": [...], "relationships": [...], "dialect": ...}``
- the canvas shape ``{"nodes": [{"id", "position", "data": {...table}}], "edges": [...]}``
  where edges name columns through ``sourceHandle`` / ``targetHandle``

Saving always writes the engine shape, or the canvas shape on request.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from schemaforge.editing.operations import prune_relationships
from schemaforge.ir.models import Dialect, Relationship, SchemaState, Table
from schemaforge.relationships.resolver import derive_relationships
from schemaforge.utils.error_handling import SnapshotError
from schemaforge.utils.logging import get_logger

logger = get_logger(__name__)

TABLE_NODE_TYPE = "tableNode"
EDGE_TYPE = "smoothstep"


def _table_from_node(node: Mapping[str, Any]) -> Dict[str, Any]:
    data = dict(node.get("data") or {})
    data["id"] = node.get("id", data.get("id"))
    if "position" in node:
        data["position"] = node["position"]
    return data


def _parse_relationships(raw_edges: List[Any]) -> List[Relationship]:
    relationships = []
    for raw in raw_edges:
        if not isinstance(raw, Mapping):
            raise SnapshotError(f"Relationship entry must be an object, got {type(raw).__name__}")
        has_source_ref = raw.get("sourceColumnRef") or raw.get("source_column_ref") or raw.get("sourceHandle")
        has_target_ref = raw.get("targetColumnRef") or raw.get("target_column_ref") or raw.get("targetHandle")
        if not has_source_ref or not has_target_ref:
            logger.warning(f"Dropping relationship {raw.get('id')} without column handles")
            continue
        relationships.append(Relationship.model_validate(raw))
    return relationships


def state_from_snapshot(data: Mapping[str, Any]) -> SchemaState:
    """
    Hydrate a SchemaState from either persisted shape.

    Dangling relationships are pruned; when the snapshot carries no relationships at
    all they are derived from column references.

    Raises:
        SnapshotError: If the payload is not a valid snapshot
    """
    if not isinstance(data, Mapping):
        raise SnapshotError(f"Snapshot must be an object, got {type(data).__name__}")

    try:
        if "tables" in data:
            raw_tables = data.get("tables") or []
            raw_edges = data.get("relationships", data.get("edges"))
        else:
            raw_tables = [_table_from_node(node) for node in data.get("nodes") or []]
            raw_edges = data.get("edges")

        tables = [Table.model_validate(raw) for raw in raw_tables]
        if raw_edges is None:
            relationships = derive_relationships(tables)
        else:
            relationships = prune_relationships(tables, _parse_relationships(list(raw_edges)))
        dialect = Dialect(data.get("dialect") or Dialect.POSTGRESQL)
    except SnapshotError:
        raise
    except ValidationError as e:
        raise SnapshotError(f"Invalid snapshot: {e.errors()[0].get('msg', str(e))}") from e
    except ValueError as e:
        raise SnapshotError(f"Invalid snapshot: {e}") from e

    return SchemaState(tables=tables, relationships=relationships, dialect=dialect)


def snapshot_from_state(state: SchemaState) -> Dict[str, Any]:
    """Engine-shaped JSON-ready dict."""
    return state.to_wire()


def canvas_snapshot_from_state(state: SchemaState) -> Dict[str, Any]:
    """Canvas-shaped JSON-ready dict: table nodes plus handle-addressed edges."""
    nodes = []
    for table in state.tables:
        data = table.model_dump(mode="json", by_alias=True)
        position = data.pop("position")
        nodes.append({"id": table.id, "type": TABLE_NODE_TYPE, "position": position, "data": data})
    edges = [
        {
            "id": rel.id,
            "source": rel.source,
            "target": rel.target,
            "type": EDGE_TYPE,
            "sourceHandle": rel.source_handle,
            "targetHandle": rel.target_handle,
            **({"label": rel.label} if rel.label is not None else {}),
        }
        for rel in state.relationships
    ]
    return {"nodes": nodes, "edges": edges, "dialect": state.dialect.value}


def dumps_snapshot(state: SchemaState, canvas: bool = False, indent: Optional[int] = 2) -> str:
    payload = canvas_snapshot_from_state(state) if canvas else snapshot_from_state(state)
    return json.dumps(payload, indent=indent, ensure_ascii=False)


def loads_snapshot(text: str) -> SchemaState:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Snapshot is not valid JSON: {e}") from e
    return state_from_snapshot(data)

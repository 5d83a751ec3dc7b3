"""Snapshot persistence in the engine and canvas shapes."""

from .codec import (
    canvas_snapshot_from_state,
    dumps_snapshot,
    loads_snapshot,
    snapshot_from_state,
    state_from_snapshot,
)

__all__ = [
    "canvas_snapshot_from_state",
    "dumps_snapshot",
    "loads_snapshot",
    "snapshot_from_state",
    "state_from_snapshot",
]

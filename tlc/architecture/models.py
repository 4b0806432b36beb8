"""Data models for dependency graphs and circular dependency detection."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Any

NO_CYCLES_MESSAGE = "No circular dependencies detected."


def relative_name(node_id: str, base_path: Path) -> str:
    """Return an absolute path relative to ``base_path``; other ids verbatim."""
    if not node_id:
        return ""
    if not PurePath(node_id).is_absolute():
        return node_id
    try:
        return os.path.relpath(node_id, base_path)
    except ValueError:
        return node_id


@dataclass(frozen=True)
class GraphEdge:
    """Directed import edge: ``source`` imports ``target``."""

    source: str
    target: str

    def to_dict(self) -> dict[str, str]:
        """Serialize edge to dict."""
        return {"from": self.source, "to": self.target}


@dataclass(frozen=True)
class Graph:
    """Immutable module graph handed to the detector."""

    nodes: tuple[str, ...] = ()
    edges: tuple[GraphEdge, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize graph to dict."""
        return {
            "nodes": list(self.nodes),
            "edges": [edge.to_dict() for edge in self.edges],
        }


@dataclass
class AdjacencyEntry:
    """Outgoing and incoming edges of one node."""

    imports: list[str] = field(default_factory=list)
    imported_by: list[str] = field(default_factory=list)

    @property
    def fan_in(self) -> int:
        """Number of importers of this node."""
        return len(self.imported_by)


@dataclass(frozen=True)
class CycleReport:
    """One canonical cycle with display names."""

    path: list[str]
    path_names: list[str]

    @property
    def length(self) -> int:
        """Number of distinct nodes in the cycle."""
        return len(self.path)

    @property
    def closed_length(self) -> int:
        """Path length including the repeated closing node."""
        return len(self.path) + 1

    def chain(self) -> str:
        """Render the cycle as an arrow chain back to its first node."""
        if not self.path_names:
            return ""
        return " -> ".join([*self.path_names, self.path_names[0]])

    def to_dict(self) -> dict[str, Any]:
        """Serialize cycle report to dict."""
        return {
            "path": list(self.path),
            "pathNames": list(self.path_names),
            "length": self.length,
            "closedLength": self.closed_length,
        }


@dataclass(frozen=True)
class RemoveImport:
    """Import edge proposed for removal."""

    source: str
    target: str
    source_name: str
    target_name: str

    def to_dict(self) -> dict[str, str]:
        """Serialize proposed removal to dict."""
        return {
            "from": self.source,
            "to": self.target,
            "fromName": self.source_name,
            "toName": self.target_name,
        }


@dataclass(frozen=True)
class BreakSuggestion:
    """Suggested break point for a single cycle."""

    cycle_index: int
    break_at: str
    break_at_name: str
    remove_import: RemoveImport | None
    reason: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize suggestion to dict."""
        return {
            "cycleIndex": self.cycle_index,
            "breakAt": self.break_at,
            "breakAtName": self.break_at_name,
            "removeImport": self.remove_import.to_dict() if self.remove_import else None,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class DetectionStats:
    """Counters describing the analysed graph."""

    total_nodes: int
    total_edges: int
    nodes_in_cycles: int

    def to_dict(self) -> dict[str, int]:
        """Serialize stats to dict."""
        return {
            "totalNodes": self.total_nodes,
            "totalEdges": self.total_edges,
            "nodesInCycles": self.nodes_in_cycles,
        }


@dataclass(frozen=True)
class DetectionResult:
    """Full output of one detection run."""

    cycles: list[CycleReport]
    suggestions: list[BreakSuggestion]
    visualization: str
    stats: DetectionStats

    @property
    def has_cycles(self) -> bool:
        """Whether at least one cycle was found."""
        return bool(self.cycles)

    @property
    def cycle_count(self) -> int:
        """Number of distinct cycles found."""
        return len(self.cycles)

    def to_dict(self) -> dict[str, Any]:
        """Serialize detection result to dict."""
        return {
            "hasCycles": self.has_cycles,
            "cycleCount": self.cycle_count,
            "cycles": [cycle.to_dict() for cycle in self.cycles],
            "suggestions": [suggestion.to_dict() for suggestion in self.suggestions],
            "visualization": self.visualization,
            "stats": self.stats.to_dict(),
        }

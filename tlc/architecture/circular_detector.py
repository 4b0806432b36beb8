"""Circular dependency detection over module import graphs."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from tlc.architecture.models import (
    NO_CYCLES_MESSAGE,
    AdjacencyEntry,
    BreakSuggestion,
    CycleReport,
    DetectionResult,
    DetectionStats,
    Graph,
    RemoveImport,
    relative_name,
)
from tlc.architecture.sources import coerce_graph
from tlc.logging_utils import get_logger

LOGGER = get_logger(__name__)

_KEY_SEPARATOR = "|"
_BANNER_WIDTH = 50


class CircularDetector:
    """Finds distinct import cycles and proposes an edge to break in each.

    Every call is a pure function of its input graph: adjacency and traversal
    state are rebuilt per call, so one instance can be shared freely.
    """

    def __init__(self, base_path: Path | None = None) -> None:
        """Initialize detector with the base path used for display names."""
        self.base_path = (base_path or Path.cwd()).expanduser()

    def detect(self, graph_or_source: Any) -> DetectionResult:
        """Detect all circular dependencies with suggestions and a visualization."""
        graph = coerce_graph(graph_or_source)
        adjacency = self.build_adjacency(graph)
        cycles = self._find_all_cycles(adjacency)
        suggestions = self.generate_suggestions(cycles, adjacency)
        result = DetectionResult(
            cycles=[
                CycleReport(path=cycle, path_names=[self.display_name(n) for n in cycle])
                for cycle in cycles
            ],
            suggestions=suggestions,
            visualization=self.visualize(cycles),
            stats=DetectionStats(
                total_nodes=len(graph.nodes),
                total_edges=len(graph.edges),
                nodes_in_cycles=len({node for cycle in cycles for node in cycle}),
            ),
        )
        LOGGER.debug(
            "Circular dependency detection finished",
            extra={
                "total_nodes": result.stats.total_nodes,
                "total_edges": result.stats.total_edges,
                "cycle_count": result.cycle_count,
            },
        )
        return result

    def has_cycles(self, graph_or_source: Any) -> bool:
        """Return whether the graph has any cycle, preferring a source's own check."""
        check = getattr(graph_or_source, "has_circular", None)
        if callable(check):
            return bool(check())
        return self.detect(graph_or_source).has_cycles

    def get_cycles(self, graph_or_source: Any) -> list[list[str]]:
        """Return canonical cycle paths only, without suggestions or visualization."""
        adjacency = self.build_adjacency(coerce_graph(graph_or_source))
        return self._find_all_cycles(adjacency)

    @staticmethod
    def build_adjacency(graph: Graph) -> dict[str, AdjacencyEntry]:
        """Build per-node imports/importers, ignoring endpoints missing from nodes."""
        adjacency = {node: AdjacencyEntry() for node in graph.nodes}
        for edge in graph.edges:
            if edge.source in adjacency:
                adjacency[edge.source].imports.append(edge.target)
            if edge.target in adjacency:
                adjacency[edge.target].imported_by.append(edge.source)
        return adjacency

    def _find_all_cycles(self, adjacency: dict[str, AdjacencyEntry]) -> list[list[str]]:
        raw_cycles: list[list[str]] = []
        for start in adjacency:
            raw_cycles.extend(_search_from(start, adjacency))
        return self.deduplicate_cycles(raw_cycles)

    def deduplicate_cycles(self, cycles: list[list[str]]) -> list[list[str]]:
        """Collapse rotations of the same cycle, keeping first-seen order."""
        seen: set[str] = set()
        unique: list[list[str]] = []
        for cycle in cycles:
            normalized = self.normalize_cycle(cycle)
            key = _KEY_SEPARATOR.join(normalized)
            if key not in seen:
                seen.add(key)
                unique.append(normalized)
        return unique

    @staticmethod
    def normalize_cycle(cycle: list[str]) -> list[str]:
        """Drop the closing node and rotate to the lexicographically smallest form."""
        clean = cycle[:-1]
        if not clean:
            return list(cycle)
        best = clean
        best_key = _KEY_SEPARATOR.join(clean)
        for offset in range(1, len(clean)):
            rotated = clean[offset:] + clean[:offset]
            key = _KEY_SEPARATOR.join(rotated)
            if key < best_key:
                best, best_key = rotated, key
        return best

    def generate_suggestions(
        self,
        cycles: list[list[str]],
        adjacency: dict[str, AdjacencyEntry],
    ) -> list[BreakSuggestion]:
        """Build one independent break suggestion per cycle."""
        return [
            self.suggest_break_point(cycle, adjacency, cycle_index=index)
            for index, cycle in enumerate(cycles)
        ]

    def suggest_break_point(
        self,
        cycle: list[str],
        adjacency: dict[str, AdjacencyEntry],
        *,
        cycle_index: int = 0,
    ) -> BreakSuggestion:
        """Pick the cycle edge whose importing module has the smallest fan-in.

        Ties keep the first edge in cycle order.
        """
        best_node = cycle[0] if cycle else ""
        best_score: int | None = None
        best_edge: tuple[str, str] | None = None
        for index, source in enumerate(cycle):
            target = cycle[(index + 1) % len(cycle)]
            entry = adjacency.get(source)
            if entry is None:
                continue
            if best_score is None or entry.fan_in < best_score:
                best_score = entry.fan_in
                best_node = source
                best_edge = (source, target)

        remove_import = None
        if best_edge is not None:
            remove_import = RemoveImport(
                source=best_edge[0],
                target=best_edge[1],
                source_name=self.display_name(best_edge[0]),
                target_name=self.display_name(best_edge[1]),
            )
        score_label = "unknown" if best_score is None else str(best_score)
        return BreakSuggestion(
            cycle_index=cycle_index,
            break_at=best_node,
            break_at_name=self.display_name(best_node),
            remove_import=remove_import,
            reason=(
                f"{self.display_name(best_node)} has fewest dependents ({score_label}), "
                "making it safer to refactor"
            ),
        )

    def visualize(self, cycles: list[list[str]]) -> str:
        """Render all cycles as arrow chains plus ASCII box diagrams."""
        if not cycles:
            return NO_CYCLES_MESSAGE
        lines = [
            "=" * _BANNER_WIDTH,
            "CIRCULAR DEPENDENCIES DETECTED",
            "=" * _BANNER_WIDTH,
            "",
        ]
        for index, cycle in enumerate(cycles, start=1):
            lines.append(f"Cycle {index}:")
            lines.append(self.visualize_cycle(cycle))
            lines.append("")
        return "\n".join(lines)

    def visualize_cycle(self, cycle: list[str]) -> str:
        """Render a single cycle."""
        names = [self.display_name(node) for node in cycle]
        if not names:
            return ""
        width = max(len(name) for name in names)
        border = f"  +{'-' * (width + 2)}+"
        lines = [f"  {' -> '.join([*names, names[0]])}", ""]
        for index, name in enumerate(names):
            lines.extend([border, f"  | {name.ljust(width)} |", border, "       |"])
            if index < len(names) - 1:
                lines.append("       v")
            else:
                lines.append(f"       ^-- (back to {names[0]})")
        return "\n".join(lines)

    def display_name(self, node_id: str) -> str:
        """Return the display name of a node id."""
        return relative_name(node_id, self.base_path)


def _search_from(start: str, adjacency: dict[str, AdjacencyEntry]) -> list[list[str]]:
    """Depth-first search from ``start`` recording every back edge as a cycle.

    Uses an explicit frame stack; visit order matches the recursive form.
    """
    found: list[list[str]] = []
    visited: set[str] = set()
    path: list[str] = []
    on_path: dict[str, int] = {}

    def enter(node: str) -> bool:
        if node in on_path:
            found.append([*path[on_path[node] :], node])
            return False
        if node in visited:
            return False
        visited.add(node)
        on_path[node] = len(path)
        path.append(node)
        return True

    if not enter(start):
        return found
    frames = [iter(adjacency[start].imports)]
    while frames:
        target = next(frames[-1], None)
        if target is None:
            frames.pop()
            del on_path[path.pop()]
            continue
        if target in adjacency and enter(target):
            frames.append(iter(adjacency[target].imports))
    return found

"""Detect local import cycles in the tlc package."""

from __future__ import annotations

from pathlib import Path

from tlc.architecture.circular_detector import CircularDetector
from tlc.architecture.dependency_graph import DependencyGraph

PKG = "tlc"


def main() -> None:
    root = Path(__file__).resolve().parents[1]
    graph = DependencyGraph(root)
    graph.build_from_directory(root / PKG)
    result = CircularDetector(root).detect(graph)
    if result.has_cycles:
        chains = "; ".join(cycle.chain() for cycle in result.cycles)
        raise SystemExit(f"Import cycle detected: {chains}")
    print(f"No import cycles detected across {result.stats.total_nodes} modules.")


if __name__ == "__main__":
    main()

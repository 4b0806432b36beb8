"""Tests for circular dependency detection, canonicalization and suggestions."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import networkx as nx
import pytest

from tlc.architecture.circular_detector import CircularDetector
from tlc.architecture.models import NO_CYCLES_MESSAGE, Graph, GraphEdge


def _graph(nodes: list[str], edges: list[tuple[str, str]]) -> dict[str, Any]:
    return {
        "nodes": [{"id": node, "name": node} for node in nodes],
        "edges": [{"from": source, "to": target} for source, target in edges],
    }


@pytest.fixture()
def detector() -> CircularDetector:
    return CircularDetector(base_path=Path("/project"))


def test_detects_direct_two_node_cycle_once(detector: CircularDetector) -> None:
    graph = _graph(
        ["/project/a.py", "/project/b.py"],
        [("/project/a.py", "/project/b.py"), ("/project/b.py", "/project/a.py")],
    )

    result = detector.detect(graph)

    assert result.has_cycles is True
    assert result.cycle_count == 1
    assert result.cycles[0].path == ["/project/a.py", "/project/b.py"]
    assert result.cycles[0].path_names == ["a.py", "b.py"]
    assert result.cycles[0].length == 2


def test_two_node_cycle_is_independent_of_start_node(detector: CircularDetector) -> None:
    forward = detector.get_cycles(_graph(["A", "B"], [("A", "B"), ("B", "A")]))
    backward = detector.get_cycles(_graph(["B", "A"], [("B", "A"), ("A", "B")]))

    assert forward == backward == [["A", "B"]]


def test_three_node_cycle_example(detector: CircularDetector) -> None:
    result = detector.detect(_graph(["A", "B", "C"], [("A", "B"), ("B", "C"), ("C", "A")]))

    assert result.has_cycles is True
    assert result.cycle_count == 1
    assert result.cycles[0].path == ["A", "B", "C"]
    assert result.cycles[0].length == 3
    assert result.cycles[0].closed_length == 4
    assert result.stats.nodes_in_cycles == 3


@pytest.mark.parametrize(
    "node_order",
    [["A", "B", "C"], ["B", "C", "A"], ["C", "A", "B"], ["C", "B", "A"]],
)
def test_three_node_canonical_form_ignores_search_start(
    detector: CircularDetector, node_order: list[str]
) -> None:
    cycles = detector.get_cycles(_graph(node_order, [("B", "C"), ("C", "A"), ("A", "B")]))

    assert cycles == [["A", "B", "C"]]


def test_detects_long_chain_cycle(detector: CircularDetector) -> None:
    nodes = ["a", "b", "c", "d", "e"]
    edges = [(nodes[i], nodes[(i + 1) % len(nodes)]) for i in range(len(nodes))]

    result = detector.detect(_graph(nodes, edges))

    assert result.cycle_count == 1
    assert result.cycles[0].length == 5


def test_self_import_is_a_cycle(detector: CircularDetector) -> None:
    result = detector.detect(_graph(["/project/a.py"], [("/project/a.py", "/project/a.py")]))

    assert result.has_cycles is True
    assert result.cycles[0].path == ["/project/a.py"]
    assert result.cycles[0].length == 1


def test_independent_cycles_get_own_suggestions(detector: CircularDetector) -> None:
    result = detector.detect(
        _graph(["A", "B", "C", "D"], [("A", "B"), ("B", "A"), ("C", "D"), ("D", "C")])
    )

    assert result.cycle_count == 2
    assert [suggestion.cycle_index for suggestion in result.suggestions] == [0, 1]
    for cycle, suggestion in zip(result.cycles, result.suggestions, strict=True):
        assert suggestion.remove_import is not None
        assert {suggestion.remove_import.source, suggestion.remove_import.target} <= set(
            cycle.path
        )
        assert suggestion.break_at in cycle.path


def test_acyclic_graph_has_no_cycles(detector: CircularDetector) -> None:
    result = detector.detect(_graph(["A", "B", "C"], [("A", "B"), ("A", "C"), ("B", "C")]))

    assert result.has_cycles is False
    assert result.cycle_count == 0
    assert result.cycles == []
    assert result.suggestions == []


def test_one_way_edge_reports_clean_visualization(detector: CircularDetector) -> None:
    result = detector.detect(_graph(["A", "B"], [("A", "B")]))

    assert result.has_cycles is False
    assert result.visualization == NO_CYCLES_MESSAGE


def test_isolated_and_empty_graphs(detector: CircularDetector) -> None:
    assert detector.detect(_graph(["A", "B"], [])).has_cycles is False
    empty = detector.detect({"nodes": [], "edges": []})
    assert empty.cycle_count == 0
    assert empty.stats.total_nodes == 0


def test_break_point_prefers_smallest_fan_in(detector: CircularDetector) -> None:
    graph = _graph(
        ["A", "B", "C", "X", "Y"],
        [("A", "B"), ("B", "C"), ("C", "A"), ("X", "B"), ("Y", "B"), ("X", "C")],
    )

    result = detector.detect(graph)
    suggestion = result.suggestions[0]

    assert suggestion.break_at == "A"
    assert suggestion.remove_import is not None
    assert (suggestion.remove_import.source, suggestion.remove_import.target) == ("A", "B")
    assert suggestion.reason == "A has fewest dependents (1), making it safer to refactor"


def test_break_point_has_minimal_fan_in_within_cycle(detector: CircularDetector) -> None:
    edges = [("A", "B"), ("B", "C"), ("C", "D"), ("D", "A"), ("E", "A"), ("E", "B"), ("E", "D")]
    graph = Graph(
        nodes=("A", "B", "C", "D", "E"),
        edges=tuple(GraphEdge(source, target) for source, target in edges),
    )
    adjacency = detector.build_adjacency(graph)

    result = detector.detect(graph)

    for cycle, suggestion in zip(result.cycles, result.suggestions, strict=True):
        assert suggestion.break_at in cycle.path
        chosen = adjacency[suggestion.break_at].fan_in
        assert all(chosen <= adjacency[node].fan_in for node in cycle.path)
    assert result.suggestions[0].break_at == "C"


def test_tied_fan_in_keeps_first_edge_in_cycle_order(detector: CircularDetector) -> None:
    result = detector.detect(_graph(["C", "B", "A"], [("A", "B"), ("B", "C"), ("C", "A")]))

    suggestion = result.suggestions[0]
    assert suggestion.break_at == "A"
    assert suggestion.remove_import is not None
    assert suggestion.remove_import.target == "B"


def test_dangling_edges_are_ignored(detector: CircularDetector) -> None:
    graph = _graph(["A", "B"], [("A", "B"), ("B", "A"), ("B", "Z"), ("Z", "A"), ("Q", "R")])

    result = detector.detect(graph)

    assert result.cycle_count == 1
    assert result.cycles[0].path == ["A", "B"]
    assert result.stats.total_edges == 5
    assert result.stats.nodes_in_cycles == 2
    # Z still counts as an importer of A, so B is the lower fan-in break point.
    assert result.suggestions[0].break_at == "B"


@pytest.mark.parametrize(
    "value",
    [None, 42, "graph", {}, {"nodes": None, "edges": "oops"}, {"nodes": {"a": 1}}],
)
def test_malformed_input_degrades_to_empty(detector: CircularDetector, value: Any) -> None:
    result = detector.detect(value)

    assert result.has_cycles is False
    assert result.stats.total_nodes == 0
    assert result.stats.total_edges == 0
    assert result.visualization == NO_CYCLES_MESSAGE


def test_unreadable_entries_are_skipped(detector: CircularDetector) -> None:
    graph = {
        "nodes": ["A", 5, {"id": "B"}, {"name": "no-id"}, None],
        "edges": [{"from": "A", "to": "B"}, ("B", "A"), ["A"], None, {"from": "A"}],
    }

    result = detector.detect(graph)

    assert result.stats.total_nodes == 2
    assert result.stats.total_edges == 2
    assert result.cycle_count == 1


def test_stats_report_counts(detector: CircularDetector) -> None:
    result = detector.detect(
        _graph(
            ["/project/a.py", "/project/b.py", "/project/c.py"],
            [("/project/a.py", "/project/b.py"), ("/project/b.py", "/project/a.py")],
        )
    )

    assert result.stats.total_nodes == 3
    assert result.stats.total_edges == 2
    assert result.stats.nodes_in_cycles == 2


def test_get_cycles_matches_detect(detector: CircularDetector) -> None:
    graph = _graph(
        ["A", "B", "C", "D", "E"],
        [("A", "B"), ("B", "C"), ("C", "A"), ("C", "D"), ("D", "C"), ("B", "A"), ("E", "E")],
    )

    detected = detector.detect(graph)

    assert detector.get_cycles(graph) == [cycle.path for cycle in detected.cycles]
    assert len(detected.suggestions) == detected.cycle_count


def test_visualization_lists_full_chain(detector: CircularDetector) -> None:
    result = detector.detect(
        _graph(
            ["/project/a.py", "/project/b.py"],
            [("/project/a.py", "/project/b.py"), ("/project/b.py", "/project/a.py")],
        )
    )

    assert "CIRCULAR DEPENDENCIES DETECTED" in result.visualization
    assert "Cycle 1:" in result.visualization
    assert "a.py -> b.py -> a.py" in result.visualization
    assert "| a.py |" in result.visualization
    assert "^-- (back to a.py)" in result.visualization


def test_path_names_are_relative_to_base_path(detector: CircularDetector) -> None:
    first, second = "/project/src/a.py", "/project/src/b.py"

    result = detector.detect(_graph([first, second], [(first, second), (second, first)]))

    assert result.cycles[0].path_names == ["src/a.py", "src/b.py"]
    assert result.suggestions[0].break_at_name == "src/a.py"


def test_display_name_keeps_non_path_ids(detector: CircularDetector) -> None:
    assert detector.display_name("pkg.module") == "pkg.module"
    assert detector.display_name("src/a.py") == "src/a.py"
    assert detector.display_name("/other/x.py") == "../other/x.py"


def test_has_cycles_delegates_to_source_check(detector: CircularDetector) -> None:
    class CachedGraph:
        def get_graph(self) -> dict[str, list[str]]:
            return {"nodes": [], "edges": []}

        def has_circular(self) -> bool:
            return True

    assert detector.has_cycles(CachedGraph()) is True


def test_has_cycles_falls_back_to_detection(detector: CircularDetector) -> None:
    class Source:
        def get_graph(self) -> dict[str, Any]:
            return _graph(["A", "B"], [("A", "B"), ("B", "A")])

    assert detector.has_cycles(Source()) is True
    assert detector.has_cycles(_graph(["A", "B"], [("A", "B")])) is False


def test_has_cycles_ignores_non_callable_check_attribute(detector: CircularDetector) -> None:
    class Source:
        has_circular = True

        def get_graph(self) -> dict[str, Any]:
            return _graph(["A", "B"], [("A", "B")])

    assert detector.has_cycles(Source()) is False


def test_accepts_networkx_digraph(detector: CircularDetector) -> None:
    graph = nx.DiGraph([("A", "B"), ("B", "C"), ("C", "B")])

    assert detector.get_cycles(graph) == [["B", "C"]]


def test_deep_acyclic_chain_does_not_hit_recursion_limit(detector: CircularDetector) -> None:
    nodes = [f"m{index:05d}" for index in range(1500)]
    edges = list(zip(nodes, nodes[1:], strict=False))

    result = detector.detect(_graph(nodes, edges))

    assert result.has_cycles is False
    assert result.stats.total_edges == 1499


def test_result_serializes_to_documented_shape(detector: CircularDetector) -> None:
    payload = detector.detect(_graph(["A", "B"], [("A", "B"), ("B", "A")])).to_dict()

    assert payload["hasCycles"] is True
    assert payload["cycleCount"] == 1
    assert payload["cycles"][0]["pathNames"] == ["A", "B"]
    assert payload["suggestions"][0]["removeImport"] == {
        "from": "A",
        "to": "B",
        "fromName": "A",
        "toName": "B",
    }
    assert payload["stats"] == {"totalNodes": 2, "totalEdges": 2, "nodesInCycles": 2}

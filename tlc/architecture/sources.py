"""Graph source contracts and tolerant graph coercion."""

from __future__ import annotations

from collections.abc import Mapping, Sequence, Set
from typing import Any, Protocol, runtime_checkable

import networkx as nx

from tlc.architecture.models import Graph, GraphEdge


@runtime_checkable
class GraphSource(Protocol):
    """Collaborator that can produce a ``{nodes, edges}`` graph."""

    def get_graph(self) -> Any:
        """Return graph data in any shape accepted by :func:`coerce_graph`."""
        ...


@runtime_checkable
class CycleCheckSource(Protocol):
    """Collaborator that keeps its own fast cycle-existence check."""

    def has_circular(self) -> bool:
        """Return True when the collaborator's graph contains a cycle."""
        ...


def coerce_graph(value: Any) -> Graph:
    """Normalize any supported graph shape into a :class:`Graph`.

    Accepted inputs are a ``Graph``, a ``networkx.DiGraph``, a mapping with
    ``nodes``/``edges`` keys, or a :class:`GraphSource` returning one of those.
    Anything unreadable degrades to empty collections instead of raising.
    """
    if isinstance(value, GraphSource) and not isinstance(value, Mapping):
        value = value.get_graph()
    return _coerce_data(value)


def _coerce_data(value: Any) -> Graph:
    if isinstance(value, Graph):
        return value
    if isinstance(value, nx.DiGraph):
        return Graph(
            nodes=tuple(str(node) for node in value.nodes),
            edges=tuple(GraphEdge(str(u), str(v)) for u, v in value.edges()),
        )
    if not isinstance(value, Mapping):
        return Graph()
    nodes = [node_id for node_id in map(_node_id, _items(value.get("nodes"))) if node_id]
    edges = [edge for edge in map(_edge, _items(value.get("edges"))) if edge is not None]
    return Graph(nodes=tuple(nodes), edges=tuple(edges))


def _items(value: Any) -> list[Any]:
    if isinstance(value, (str, bytes, Mapping)):
        return []
    if isinstance(value, (Sequence, Set)):
        return list(value)
    return []


def _node_id(item: Any) -> str | None:
    if isinstance(item, str):
        return item
    if isinstance(item, Mapping):
        node_id = item.get("id")
        if isinstance(node_id, str):
            return node_id
    return None


def _edge(item: Any) -> GraphEdge | None:
    if isinstance(item, GraphEdge):
        return item
    source: Any = None
    target: Any = None
    if isinstance(item, Mapping):
        source = item.get("from", item.get("source"))
        target = item.get("to", item.get("target"))
    elif isinstance(item, Sequence) and not isinstance(item, (str, bytes)) and len(item) == 2:
        source, target = item
    if isinstance(source, str) and isinstance(target, str):
        return GraphEdge(source=source, target=target)
    return None

"""Architecture analysis: dependency graphs and circular dependency detection."""

from tlc.architecture.circular_detector import CircularDetector
from tlc.architecture.command import ArchitectureCommand, ArchitectureResult
from tlc.architecture.config import ArchitectureConfig
from tlc.architecture.dependency_graph import DependencyGraph
from tlc.architecture.models import (
    BreakSuggestion,
    CycleReport,
    DetectionResult,
    DetectionStats,
    Graph,
    GraphEdge,
    RemoveImport,
)
from tlc.architecture.sources import CycleCheckSource, GraphSource, coerce_graph

__all__ = [
    "ArchitectureCommand",
    "ArchitectureConfig",
    "ArchitectureResult",
    "BreakSuggestion",
    "CircularDetector",
    "CycleCheckSource",
    "CycleReport",
    "DependencyGraph",
    "DetectionResult",
    "DetectionStats",
    "Graph",
    "GraphEdge",
    "GraphSource",
    "RemoveImport",
    "coerce_graph",
]

"""Architecture analysis command orchestration."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from tlc.architecture.circular_detector import CircularDetector
from tlc.architecture.config import ArchitectureConfig
from tlc.architecture.dependency_graph import DependencyGraph
from tlc.architecture.models import DetectionResult
from tlc.architecture.report import render_report
from tlc.config_validation import validate_report_format
from tlc.logging_utils import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification emitted while a command runs."""

    phase: str
    message: str


@dataclass
class ArchitectureResult:
    """Outcome envelope of one architecture command run."""

    success: bool = True
    target_path: str | None = None
    graph: dict[str, Any] | None = None
    circular: DetectionResult | None = None
    report: str | None = None
    error: str | None = None


class ArchitectureCommand:
    """Builds the dependency graph, detects cycles and renders a report."""

    def __init__(
        self,
        config: ArchitectureConfig,
        *,
        dependency_graph: DependencyGraph | None = None,
        circular_detector: CircularDetector | None = None,
        on_progress: Callable[[ProgressEvent], None] | None = None,
    ) -> None:
        """Initialize command with config and optional injected collaborators."""
        self.config = config
        self.dependency_graph = dependency_graph or DependencyGraph(
            config.base_path,
            ignore=config.ignore,
            source_roots=config.source_roots,
        )
        self.circular_detector = circular_detector or CircularDetector(config.base_path)
        self.on_progress = on_progress or (lambda _event: None)

    def run(
        self,
        *,
        target_path: str | None = None,
        output_format: str = "text",
    ) -> ArchitectureResult:
        """Run circular dependency analysis and render the requested report."""
        validate_report_format(output_format)
        result = ArchitectureResult(target_path=target_path)
        scan_path = self.config.base_path / target_path if target_path else self.config.base_path
        try:
            self._progress("building-graph", "Building dependency graph...")
            self.dependency_graph.build_from_directory(scan_path)
            result.graph = self.dependency_graph.get_graph()

            self._progress("detecting-cycles", "Detecting circular dependencies...")
            result.circular = self.circular_detector.detect(self.dependency_graph)
        except (OSError, ValueError) as exc:
            LOGGER.exception("Architecture analysis failed", extra={"scan_path": str(scan_path)})
            result.success = False
            result.error = str(exc)

        result.report = render_report(result, output_format, max_cycles=self.config.max_cycles)
        if result.success:
            self._progress("complete", "Analysis complete")
        return result

    def _progress(self, phase: str, message: str) -> None:
        LOGGER.info(message, extra={"phase": phase})
        self.on_progress(ProgressEvent(phase=phase, message=message))

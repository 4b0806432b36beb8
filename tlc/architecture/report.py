"""Render architecture analysis results as text, JSON or markdown."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from tlc.config_validation import validate_report_format

if TYPE_CHECKING:
    from tlc.architecture.command import ArchitectureResult

_RULE = "=" * 50
_SUBRULE = "-" * 30


def render_report(result: ArchitectureResult, output_format: str, *, max_cycles: int = 5) -> str:
    """Render a result in the requested format."""
    validate_report_format(output_format)
    if output_format == "json":
        return render_json(result)
    if output_format == "markdown":
        return render_markdown(result, max_cycles=max_cycles)
    return render_text(result, max_cycles=max_cycles)


def _summary(result: ArchitectureResult) -> dict[str, int]:
    stats: dict[str, Any] = (result.graph or {}).get("stats", {})
    return {
        "files": int(stats.get("totalFiles", 0)),
        "dependencies": int(stats.get("totalEdges", 0)),
        "external": int(stats.get("externalDeps", 0)),
        "cycles": result.circular.cycle_count if result.circular else 0,
    }


def render_json(result: ArchitectureResult) -> str:
    """Render the result as an indented JSON document."""
    payload = {
        "success": result.success,
        "targetPath": result.target_path,
        "stats": (result.graph or {}).get("stats"),
        "circular": result.circular.to_dict() if result.circular else None,
        "error": result.error,
    }
    return json.dumps(payload, indent=2)


def render_markdown(result: ArchitectureResult, *, max_cycles: int = 5) -> str:
    """Render the result as a markdown document."""
    lines = ["# Architecture Analysis Report", ""]
    if not result.success:
        lines.extend([f"**Error:** {result.error}", ""])
        return "\n".join(lines)

    summary = _summary(result)
    lines.extend(
        [
            "## Summary",
            "",
            "| Metric | Value |",
            "|--------|-------|",
            f"| Total Files | {summary['files']} |",
            f"| Total Dependencies | {summary['dependencies']} |",
            f"| External Dependencies | {summary['external']} |",
            f"| Circular Dependencies | {summary['cycles']} |",
            "",
        ]
    )

    circular = result.circular
    if circular is None or not circular.has_cycles:
        lines.extend(["No circular dependencies detected.", ""])
        return "\n".join(lines)

    lines.extend(["## Circular Dependencies", "", f"Found {circular.cycle_count} cycle(s):", ""])
    for index, cycle in enumerate(circular.cycles[:max_cycles]):
        lines.extend([f"### Cycle {index + 1}", "```", cycle.chain(), "```"])
        if index < len(circular.suggestions):
            lines.append(f"**Suggestion:** {circular.suggestions[index].reason}")
        lines.append("")
    hidden = circular.cycle_count - max_cycles
    if hidden > 0:
        lines.extend([f"_... and {hidden} more_", ""])
    return "\n".join(lines)


def render_text(result: ArchitectureResult, *, max_cycles: int = 5) -> str:
    """Render the result as plain text."""
    lines = ["ARCHITECTURE ANALYSIS REPORT", _RULE, ""]
    if not result.success:
        lines.append(f"ERROR: {result.error}")
        return "\n".join(lines)

    summary = _summary(result)
    lines.extend(
        [
            "SUMMARY",
            _SUBRULE,
            f"Total Files:           {summary['files']}",
            f"Total Dependencies:    {summary['dependencies']}",
            f"External Dependencies: {summary['external']}",
            f"Circular Dependencies: {summary['cycles']}",
            "",
        ]
    )

    circular = result.circular
    if circular is not None and circular.has_cycles:
        lines.extend(["CIRCULAR DEPENDENCIES", _SUBRULE, f"Found {circular.cycle_count} cycle(s)"])
        for index, cycle in enumerate(circular.cycles[:max_cycles]):
            lines.append(f"  {cycle.chain()}")
            if index < len(circular.suggestions):
                lines.append(f"    suggestion: {circular.suggestions[index].reason}")
        hidden = circular.cycle_count - max_cycles
        if hidden > 0:
            lines.append(f"  ... and {hidden} more")
        lines.append("")
    return "\n".join(lines)

"""Configuration for architecture analysis commands."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from tlc.architecture.dependency_graph import DEFAULT_IGNORE
from tlc.config_validation import parse_positive_int, require_positive_int, split_csv

TLC_BASE_PATH_ENV = "TLC_BASE_PATH"
TLC_ARCH_IGNORE_ENV = "TLC_ARCH_IGNORE"
TLC_ARCH_MAX_CYCLES_ENV = "TLC_ARCH_MAX_CYCLES"
DEFAULT_MAX_CYCLES = 5


@dataclass(frozen=True)
class ArchitectureConfig:
    """Resolved settings for one architecture analysis run."""

    base_path: Path
    ignore: tuple[str, ...] = DEFAULT_IGNORE
    source_roots: tuple[Path, ...] = ()
    max_cycles: int = DEFAULT_MAX_CYCLES

    def __post_init__(self) -> None:
        """Validate numeric settings."""
        require_positive_int(self.max_cycles, "max_cycles")

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> ArchitectureConfig:
        """Build config from environment variables, with ``base_path`` taking priority."""
        if base_path is None:
            env_base = os.environ.get(TLC_BASE_PATH_ENV)
            base_path = Path(env_base) if env_base else Path.cwd()
        extra_ignore = split_csv(os.environ.get(TLC_ARCH_IGNORE_ENV))
        raw_max_cycles = os.environ.get(TLC_ARCH_MAX_CYCLES_ENV)
        max_cycles = (
            parse_positive_int(raw_max_cycles, TLC_ARCH_MAX_CYCLES_ENV)
            if raw_max_cycles
            else DEFAULT_MAX_CYCLES
        )
        return cls(
            base_path=base_path.expanduser().resolve(),
            ignore=DEFAULT_IGNORE + tuple(p for p in extra_ignore if p not in DEFAULT_IGNORE),
            max_cycles=max_cycles,
        )

    def with_overrides(
        self,
        *,
        max_cycles: int | None = None,
        source_roots: tuple[Path, ...] | None = None,
    ) -> ArchitectureConfig:
        """Return a copy with CLI-provided values applied."""
        return replace(
            self,
            max_cycles=self.max_cycles if max_cycles is None else max_cycles,
            source_roots=self.source_roots if source_roots is None else source_roots,
        )

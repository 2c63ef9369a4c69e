from __future__ import annotations

"""Parameter container dataclasses for the SiteMix configuration system.

Algorithm settings and I/O options live in separate immutable dataclasses. A
small mutable `RuntimeParams` bucket captures solver and verbosity flags that
can be toggled programmatically or from the command line.
"""

from dataclasses import dataclass, field
from pathlib import Path

__all__ = [
    "AlgorithmParams",
    "IOParams",
    "RuntimeParams",
    "SitemixParams",
]


# ---------------------------------------------------------------------------
# Algorithm parameters – things that influence heuristic behaviour
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AlgorithmParams:
    """Heuristic configuration options.

    The lower bound of the selection window in round ``r`` is
    ``floor_fraction * full_capacity * floor_schedule[min(r, len - 1)]``.
    A distribution center whose selected demand exceeds
    ``promote_fraction * full_capacity`` becomes a production center, so the
    early floors sit below that threshold to let distribution centers open.
    """

    selector: str = "milp"
    candidate_limit: int = 300
    floor_fraction: float = 0.5
    floor_schedule: tuple[float, ...] = (0.3, 0.3, 0.6, 1.0)
    relaxation_factor: float = 0.5
    max_relaxations: int = 4
    promote_fraction: float = 0.2
    method: str = "heuristic"

    def __post_init__(self):  # type: ignore[override]
        object.__setattr__(self, "floor_schedule", tuple(self.floor_schedule))

        if self.method not in {"heuristic", "exact"}:
            raise ValueError("AlgorithmParams.method must be 'heuristic' or 'exact'.")

        if self.candidate_limit <= 0:
            raise ValueError("AlgorithmParams.candidate_limit must be positive.")

        if not 0.0 < self.floor_fraction <= 1.0:
            raise ValueError("AlgorithmParams.floor_fraction must be within (0, 1].")

        if not self.floor_schedule:
            raise ValueError("AlgorithmParams.floor_schedule cannot be empty.")
        if any(not 0.0 < f <= 1.0 for f in self.floor_schedule):
            raise ValueError("AlgorithmParams.floor_schedule values must be within (0, 1].")

        if not 0.0 < self.relaxation_factor < 1.0:
            raise ValueError("AlgorithmParams.relaxation_factor must be within (0, 1).")

        if self.max_relaxations < 0:
            raise ValueError("AlgorithmParams.max_relaxations must be non-negative.")

        if not 0.0 <= self.promote_fraction <= 1.0:
            raise ValueError("AlgorithmParams.promote_fraction must be within [0, 1].")

    def floor_multiplier(self, round_index: int) -> float:
        """Relaxation factor applied to the window floor in ``round_index``."""
        return self.floor_schedule[min(round_index, len(self.floor_schedule) - 1)]


# ---------------------------------------------------------------------------
# IO parameters
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class IOParams:
    """Settings for data input and output pathways."""

    instance_file: str | None = None
    results_dir: Path = Path("results")
    format: str = "json"  # One of: json, csv

    def __post_init__(self):  # type: ignore[override]
        if self.format not in {"json", "csv"}:
            raise ValueError("IOParams.format must be 'json' or 'csv'.")

        results_dir = Path(self.results_dir)
        # Ensure results_dir is absolute
        if not results_dir.is_absolute():
            results_dir = (Path.cwd() / results_dir).resolve()
        object.__setattr__(self, "results_dir", results_dir)


# ---------------------------------------------------------------------------
# Runtime parameters – solver and verbosity toggles
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class RuntimeParams:
    verbose: bool = False
    debug: bool = False
    solver: str = "auto"  # One of: auto, gurobi, cbc
    gap_rel: float | None = None
    time_limit: float | None = 60

    def __post_init__(self):
        if self.solver not in {"auto", "gurobi", "cbc"}:
            raise ValueError("RuntimeParams.solver must be 'auto', 'gurobi' or 'cbc'.")


# ---------------------------------------------------------------------------
# Aggregate container
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class SitemixParams:
    """Aggregate parameter object passed throughout the codebase."""

    algorithm: AlgorithmParams = field(default_factory=AlgorithmParams)
    io: IOParams = field(default_factory=IOParams)
    runtime: RuntimeParams = field(default_factory=RuntimeParams)

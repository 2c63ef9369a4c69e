"""Protocol definitions for pluggable components in SiteMix."""

from collections.abc import Sequence
from typing import Protocol

import pulp

from sitemix.config.params import RuntimeParams
from sitemix.core_types import SelectionCandidate, SelectionResult


class BoundedSelector(Protocol):
    """Capacity-windowed minimum-score subset selection.

    Given candidates with integer weights and scores, return the subset whose
    summed weight lies in ``[lo, hi]`` with minimum summed score, or
    ``SelectionResult.infeasible()`` when no such subset exists. Ties must be
    resolved deterministically.
    """

    def select(
        self, candidates: Sequence[SelectionCandidate], lo: float, hi: float
    ) -> SelectionResult:
        ...


class SolverAdapter(Protocol):
    """Thin wrapper around PuLP solvers to provide a consistent interface."""

    def get_pulp_solver(self, params: RuntimeParams) -> pulp.LpSolver:
        """Return the underlying PuLP solver instance configured and ready to use."""
        ...

    @property
    def name(self) -> str:
        """Solver name for logging."""
        ...

    @property
    def available(self) -> bool:
        """Check if this solver is available in the environment."""
        ...

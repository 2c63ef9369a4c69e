"""
milp.py

Bounded selection as a 0/1 knapsack with a weight window, solved with PuLP:

    minimise    Σ_k s_k · x_k
    subject to  lo ≤ Σ_k w_k · x_k ≤ hi,   x_k ∈ {0, 1}

The solver is picked by :func:`sitemix.utils.solver.pick_solver` (CBC unless
Gurobi is requested and available).
"""

from collections.abc import Sequence

import pulp

from sitemix.config.params import RuntimeParams
from sitemix.core_types import SelectionCandidate, SelectionResult
from sitemix.exceptions import SelectorFailure
from sitemix.registry import register_selector
from sitemix.utils.logging import SitemixLogger
from sitemix.utils.solver import pick_solver

from .common import build_result, integer_window, trivial_result

logger = SitemixLogger.get_logger(__name__)


@register_selector("milp")
class MilpSelector:
    """Exact bounded selector backed by a MILP solver."""

    def __init__(self, runtime: RuntimeParams | None = None, solver=None):
        self.runtime = runtime or RuntimeParams()
        self._solver = solver

    def _get_solver(self):
        if self._solver is None:
            self._solver = pick_solver(self.runtime)
        return self._solver

    def select(
        self, candidates: Sequence[SelectionCandidate], lo: float, hi: float
    ) -> SelectionResult:
        trivial = trivial_result(candidates, lo, hi)
        if trivial is not None:
            return trivial

        low, high = integer_window(lo, hi)
        model, x_vars = _create_model(candidates, low, high)

        try:
            model.solve(self._get_solver())
        except pulp.PulpSolverError as exc:
            raise SelectorFailure(f"Selector solver failed: {exc}") from exc

        status_name = pulp.LpStatus[model.status]
        if model.status == pulp.LpStatusInfeasible:
            logger.debug(f"Selection window [{low}, {high}] infeasible")
            return SelectionResult.infeasible()
        if model.status != pulp.LpStatusOptimal:
            raise SelectorFailure(f"Selection failed with status: {status_name}")

        positions = [
            p for p, var in enumerate(x_vars) if var.varValue and var.varValue > 0.5
        ]
        return build_result(candidates, positions)


def _create_model(
    candidates: Sequence[SelectionCandidate], low: int, high: int
) -> tuple[pulp.LpProblem, list[pulp.LpVariable]]:
    """Create the windowed knapsack model."""
    model = pulp.LpProblem("Bounded_Selection", pulp.LpMinimize)

    x_vars = [
        pulp.LpVariable(f"x_{position}", cat="Binary")
        for position in range(len(candidates))
    ]

    model += (
        pulp.lpSum(c.score * x for c, x in zip(candidates, x_vars)),
        "Total_Score",
    )

    weight = pulp.lpSum(c.weight * x for c, x in zip(candidates, x_vars))
    model += weight >= low, "Window_Floor"
    model += weight <= high, "Window_Ceiling"

    return model, x_vars

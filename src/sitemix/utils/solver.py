"""PuLP solver selection for the exact model and the MILP selector.

CBC ships with PuLP and is always usable; Gurobi is used when ``gurobipy``
is importable and either requested explicitly or picked in ``auto`` mode.
``SITEMIX_SOLVER`` overrides the configured choice.
"""

import importlib.util
import os
from typing import Any

import pulp
import pulp.apis

from sitemix.config.params import RuntimeParams
from sitemix.registry import SOLVER_ADAPTER_REGISTRY, register_solver_adapter
from sitemix.utils.logging import SitemixLogger

logger = SitemixLogger.get_logger(__name__)


def _base_kwargs(params: RuntimeParams) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"msg": 1 if params.verbose else 0}
    # No gapRel means the solver closes the gap completely.
    if params.gap_rel is not None:
        kwargs["gapRel"] = params.gap_rel
    return kwargs


def _has_time_limit(params: RuntimeParams) -> bool:
    return params.time_limit is not None and params.time_limit > 0


@register_solver_adapter("gurobi")
class GurobiAdapter:
    """Gurobi through ``GUROBI_CMD``; the time limit goes in as a solver option."""

    def get_pulp_solver(self, params: RuntimeParams) -> pulp.LpSolver:
        kwargs = _base_kwargs(params)
        if _has_time_limit(params):
            kwargs["options"] = [("TimeLimit", params.time_limit)]
        return pulp.GUROBI_CMD(**kwargs)

    @property
    def name(self) -> str:
        return "Gurobi"

    @property
    def available(self) -> bool:
        return importlib.util.find_spec("gurobipy") is not None


@register_solver_adapter("cbc")
class CbcAdapter:
    """The CBC binary bundled with PuLP."""

    def get_pulp_solver(self, params: RuntimeParams) -> pulp.LpSolver:
        kwargs = _base_kwargs(params)
        if _has_time_limit(params):
            kwargs["timeLimit"] = params.time_limit
        return pulp.PULP_CBC_CMD(**kwargs)

    @property
    def name(self) -> str:
        return "CBC"

    @property
    def available(self) -> bool:
        return True


def pick_solver(params: RuntimeParams) -> pulp.LpSolver:
    """
    Return a configured PuLP solver.

    The choice is read from ``SITEMIX_SOLVER`` if set, else from
    ``params.solver``. Any registered adapter name is accepted; ``auto``
    tries Gurobi and falls back to CBC when Gurobi is missing or cannot be
    instantiated.

    Raises:
        ValueError: If the requested solver is not registered.
    """
    choice = (os.getenv("SITEMIX_SOLVER") or params.solver).lower()

    if choice != "auto":
        adapter_class = SOLVER_ADAPTER_REGISTRY.get(choice)
        if adapter_class is None:
            raise ValueError(
                f"Unknown solver '{choice}'. "
                f"Available: auto, {', '.join(sorted(SOLVER_ADAPTER_REGISTRY))}"
            )
        adapter = adapter_class()
        logger.debug(f"Using {adapter.name} solver")
        return adapter.get_pulp_solver(params)

    gurobi = SOLVER_ADAPTER_REGISTRY["gurobi"]()
    if gurobi.available:
        try:
            solver = gurobi.get_pulp_solver(params)
            logger.debug("Using Gurobi solver")
            return solver
        except (pulp.PulpError, OSError) as e:
            logger.warning(f"Gurobi unavailable ({e}); falling back to CBC")

    logger.debug("Using CBC solver")
    return SOLVER_ADAPTER_REGISTRY["cbc"]().get_pulp_solver(params)

"""SiteMix: capacitated two-echelon site-location heuristic."""

__version__ = "0.1.0"

# Main API
from .api import evaluate, run_heuristic, solve

# Stage functions (for advanced users)
from .assignment import assign_clients
from .clustering import cluster_distribution_centers

# Core types
from .config.params import SitemixParams
from .core_types import (
    Client,
    CostBreakdown,
    CostModel,
    DistanceMatrices,
    Distribution,
    ProblemData,
    Production,
    Site,
    SitemixSolution,
    Solution,
    Unassigned,
)
from .evaluation import evaluate_cost, validate_solution
from .exceptions import InfeasibleInstanceError, MalformedInputError, SelectorFailure
from .interfaces import BoundedSelector, SolverAdapter
from .optimization import solve_exact

# Extension system
from .registry import register_selector, register_solver_adapter
from .selection import make_selector
from .utils.data_processing import load_instance, load_solution

__all__ = [
    # Version
    "__version__",
    # Main API
    "solve",
    "evaluate",
    "run_heuristic",
    # Stage functions
    "load_instance",
    "load_solution",
    "assign_clients",
    "cluster_distribution_centers",
    "evaluate_cost",
    "validate_solution",
    "solve_exact",
    "make_selector",
    # Types
    "SitemixParams",
    "SitemixSolution",
    "ProblemData",
    "Site",
    "Client",
    "CostModel",
    "CostBreakdown",
    "DistanceMatrices",
    "Solution",
    "Unassigned",
    "Production",
    "Distribution",
    # Errors
    "MalformedInputError",
    "InfeasibleInstanceError",
    "SelectorFailure",
    # Extensions
    "register_selector",
    "register_solver_adapter",
    "BoundedSelector",
    "SolverAdapter",
]

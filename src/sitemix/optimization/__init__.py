"""
Exact MILP formulation of the site-location problem.
"""

from .exact import solve_exact

__all__ = ["solve_exact"]

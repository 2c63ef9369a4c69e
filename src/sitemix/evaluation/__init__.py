"""
Cost evaluation and validation of completed solutions.
"""

from .cost import evaluate_cost, total_cost
from .validation import check_instance, validate_solution

__all__ = [
    "check_instance",
    "evaluate_cost",
    "total_cost",
    "validate_solution",
]

"""
Greedy site opening and client assignment.
"""

from .greedy import AssignmentResult, assign_clients, rank_clients

__all__ = [
    "AssignmentResult",
    "assign_clients",
    "rank_clients",
]

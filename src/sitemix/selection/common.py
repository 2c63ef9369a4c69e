"""Helpers shared by the bounded selector implementations."""

import math
from collections.abc import Sequence

from sitemix.core_types import SelectionCandidate, SelectionResult


def integer_window(lo: float, hi: float) -> tuple[int, int]:
    """Tightest integer window contained in ``[lo, hi]`` (weights are integers)."""
    return max(0, math.ceil(lo - 1e-9)), math.floor(hi + 1e-9)


def trivial_result(
    candidates: Sequence[SelectionCandidate], lo: float, hi: float
) -> SelectionResult | None:
    """Answer the cases that need no search, or ``None`` if a search is needed."""
    low, high = integer_window(lo, hi)
    if low > high:
        return SelectionResult.infeasible()
    if not candidates:
        if low == 0:
            return SelectionResult(items=(), weight=0, score=0.0)
        return SelectionResult.infeasible()
    if sum(c.weight for c in candidates) < low:
        return SelectionResult.infeasible()
    return None


def build_result(
    candidates: Sequence[SelectionCandidate], positions: Sequence[int]
) -> SelectionResult:
    """Build a feasible result from candidate positions, kept in candidate order."""
    ordered = sorted(positions)
    return SelectionResult(
        items=tuple(candidates[p].item for p in ordered),
        weight=sum(candidates[p].weight for p in ordered),
        score=float(sum(candidates[p].score for p in ordered)),
    )

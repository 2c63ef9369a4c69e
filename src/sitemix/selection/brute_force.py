"""Exhaustive bounded selection for small candidate lists."""

from collections.abc import Sequence
from itertools import combinations

from sitemix.config.params import RuntimeParams
from sitemix.core_types import SelectionCandidate, SelectionResult
from sitemix.registry import register_selector

from .common import build_result, integer_window, trivial_result

MAX_BRUTE_FORCE_ITEMS = 20


@register_selector("brute_force")
class BruteForceSelector:
    """Enumerates every subset; smaller subsets and earlier items win ties."""

    def __init__(self, runtime: RuntimeParams | None = None, max_items: int = MAX_BRUTE_FORCE_ITEMS):
        self.runtime = runtime
        self.max_items = max_items

    def select(
        self, candidates: Sequence[SelectionCandidate], lo: float, hi: float
    ) -> SelectionResult:
        trivial = trivial_result(candidates, lo, hi)
        if trivial is not None:
            return trivial

        if len(candidates) > self.max_items:
            raise ValueError(
                f"Brute-force selection limited to {self.max_items} candidates, "
                f"got {len(candidates)}"
            )

        low, high = integer_window(lo, hi)
        best_positions: tuple[int, ...] | None = None
        best_score = float("inf")
        for size in range(len(candidates) + 1):
            for positions in combinations(range(len(candidates)), size):
                weight = sum(candidates[p].weight for p in positions)
                if not low <= weight <= high:
                    continue
                score = sum(candidates[p].score for p in positions)
                if score < best_score:
                    best_score = score
                    best_positions = positions

        if best_positions is None:
            return SelectionResult.infeasible()
        return build_result(candidates, best_positions)

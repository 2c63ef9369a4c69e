"""Exact bounded selection by dynamic programming over integer weights."""

from collections.abc import Sequence

import numpy as np

from sitemix.config.params import RuntimeParams
from sitemix.core_types import SelectionCandidate, SelectionResult
from sitemix.exceptions import SelectorFailure
from sitemix.registry import register_selector

from .common import build_result, integer_window, trivial_result

# Upper bound on the size of the (items x capacity) decision table.
MAX_TABLE_CELLS = 100_000_000


@register_selector("dp")
class DynamicProgrammingSelector:
    """Minimum-score knapsack with a weight window.

    ``best[w]`` holds the minimum score of a subset weighing exactly ``w``.
    Items are processed in candidate order and only strictly better scores
    replace earlier ones, so ties keep the subset built from earlier items.
    """

    def __init__(self, runtime: RuntimeParams | None = None):
        self.runtime = runtime

    def select(
        self, candidates: Sequence[SelectionCandidate], lo: float, hi: float
    ) -> SelectionResult:
        trivial = trivial_result(candidates, lo, hi)
        if trivial is not None:
            return trivial

        low, high = integer_window(lo, hi)
        total_weight = sum(c.weight for c in candidates)
        high = min(high, total_weight)

        n = len(candidates)
        if n * (high + 1) > MAX_TABLE_CELLS:
            raise SelectorFailure(
                f"Selection table too large ({n} items x {high + 1} weights)"
            )

        best = np.full(high + 1, np.inf)
        best[0] = 0.0
        take = np.zeros((n, high + 1), dtype=bool)

        for position, candidate in enumerate(candidates):
            weight, score = candidate.weight, candidate.score
            if weight == 0:
                if score < 0:
                    best += score
                    take[position, :] = True
                continue
            if weight > high:
                continue
            shifted = best[:-weight] + score
            improved = shifted < best[weight:]
            best[weight:] = np.where(improved, shifted, best[weight:])
            take[position, weight:] = improved

        window = best[low:]
        if not np.isfinite(window).any():
            return SelectionResult.infeasible()

        remaining = low + int(np.argmin(window))
        positions = []
        for position in range(n - 1, -1, -1):
            if take[position, remaining]:
                positions.append(position)
                remaining -= candidates[position].weight
        return build_result(candidates, positions)

"""
Bounded selectors used by the greedy assigner.
"""

from sitemix.config.params import RuntimeParams
from sitemix.core_types import SelectionCandidate, SelectionResult
from sitemix.interfaces import BoundedSelector
from sitemix.registry import SELECTOR_REGISTRY

from .brute_force import BruteForceSelector
from .dp import DynamicProgrammingSelector
from .milp import MilpSelector


def make_selector(name: str, runtime: RuntimeParams | None = None) -> BoundedSelector:
    """Instantiate a registered selector by name."""
    selector_class = SELECTOR_REGISTRY.get(name)
    if selector_class is None:
        raise ValueError(
            f"Unknown selector: {name}. Available: {', '.join(sorted(SELECTOR_REGISTRY))}"
        )
    return selector_class(runtime=runtime)


__all__ = [
    "BoundedSelector",
    "BruteForceSelector",
    "DynamicProgrammingSelector",
    "MilpSelector",
    "SelectionCandidate",
    "SelectionResult",
    "make_selector",
]

"""Registry for pluggable components in SiteMix."""

from sitemix.utils.logging import SitemixLogger

from .interfaces import BoundedSelector, SolverAdapter

logger = SitemixLogger.get_logger(__name__)

# Registries for each component type
SELECTOR_REGISTRY: dict[str, type[BoundedSelector]] = {}
SOLVER_ADAPTER_REGISTRY: dict[str, type[SolverAdapter]] = {}

__all__ = [
    "register_selector",
    "register_solver_adapter",
    # Expose registries for advanced users who need direct access
    "SELECTOR_REGISTRY",
    "SOLVER_ADAPTER_REGISTRY",
]


def register_selector(name: str):
    """Decorator to register a bounded selector implementation."""

    def decorator(cls: type[BoundedSelector]):
        if name in SELECTOR_REGISTRY:
            raise ValueError(f"Selector '{name}' is already registered")
        SELECTOR_REGISTRY[name] = cls
        logger.debug(f"Registered selector {name!r}: {cls.__name__}")
        return cls

    return decorator


def register_solver_adapter(name: str):
    """Decorator to register a solver adapter implementation."""

    def decorator(cls: type[SolverAdapter]):
        if name in SOLVER_ADAPTER_REGISTRY:
            raise ValueError(f"Solver adapter '{name}' is already registered")
        SOLVER_ADAPTER_REGISTRY[name] = cls
        logger.debug(f"Registered solver adapter {name!r}: {cls.__name__}")
        return cls

    return decorator

from __future__ import annotations

"""Utilities for loading SiteMix configuration YAML files into the
parameter dataclass hierarchy.
"""

from pathlib import Path
from typing import Any

import yaml

from sitemix.utils.logging import SitemixLogger

from .params import AlgorithmParams, IOParams, RuntimeParams, SitemixParams

logger = SitemixLogger.get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default_config.yaml"

_ALGORITHM_KEYS = {
    "selector",
    "candidate_limit",
    "floor_fraction",
    "floor_schedule",
    "relaxation_factor",
    "max_relaxations",
    "promote_fraction",
    "method",
}


# ---------------------------------------------------------------------------
# Helper parsing routines
# ---------------------------------------------------------------------------


def _parse_algorithm(raw: dict[str, Any]) -> AlgorithmParams:
    """Convert the ``algorithm`` mapping into `AlgorithmParams`."""

    unknown = set(raw) - _ALGORITHM_KEYS
    if unknown:
        raise ValueError(
            f"Unknown keys in 'algorithm' section: {', '.join(sorted(unknown))}"
        )

    kwargs = dict(raw)
    if "floor_schedule" in kwargs:
        schedule = kwargs["floor_schedule"]
        if isinstance(schedule, (int, float)):
            schedule = [schedule]
        kwargs["floor_schedule"] = tuple(float(f) for f in schedule)

    return AlgorithmParams(**kwargs)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_yaml(path: str | Path | None = None) -> SitemixParams:
    """Load YAML configuration file into `SitemixParams`.

    Without ``path`` the packaged ``default_config.yaml`` is used.
    """

    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(cfg_path)

    try:
        with cfg_path.open() as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ValueError(
            f"Error parsing YAML configuration {cfg_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"YAML configuration {cfg_path} must be a mapping.")

    # ---------------------------------------------------------------------
    # Algorithm parameters
    # ---------------------------------------------------------------------

    algorithm = _parse_algorithm(data.pop("algorithm", {}) or {})

    # ---------------------------------------------------------------------
    # IO parameters
    # ---------------------------------------------------------------------

    io_params = IOParams(
        instance_file=data.pop("instance_file", None),
        results_dir=Path(data.pop("results_dir", "results")),
        format=data.pop("format", "json"),
    )

    # ---------------------------------------------------------------------
    # Runtime parameters
    # ---------------------------------------------------------------------

    runtime = RuntimeParams(
        verbose=data.pop("verbose", False),
        debug=data.pop("debug", False),
        solver=data.pop("solver", "auto"),
        gap_rel=data.pop("gap_rel", None),
        time_limit=data.pop("time_limit", 60),
    )

    # Any remaining unknown keys will raise an error to avoid silent mistakes.
    if data:
        unknown_keys = ", ".join(sorted(data.keys()))
        raise ValueError(
            f"Unknown top-level configuration keys in YAML: {unknown_keys}"
        )

    logger.debug(
        "Loaded configuration – algorithm: %s io: %s runtime: %s",
        algorithm,
        io_params,
        runtime,
    )

    return SitemixParams(algorithm=algorithm, io=io_params, runtime=runtime)

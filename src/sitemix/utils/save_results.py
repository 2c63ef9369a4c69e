"""
save_results.py – persistence of SiteMix runs

All writes to disk after a run go through this module. Solutions are written
either as a JSON document in the KIRO solution layout (readable again with
:func:`sitemix.utils.data_processing.load_solution`) extended with summary
sections, or as CSV tables built with pandas.
"""

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

import numpy as np
import pandas as pd

from sitemix.config.params import SitemixParams
from sitemix.core_types import (
    Distribution,
    ProblemData,
    Production,
    SitemixSolution,
    Solution,
    UNASSIGNED,
)
from sitemix.utils.logging import SitemixLogger

logger = SitemixLogger.get_logger(__name__)


class NumpyEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return super().default(obj)


def solution_to_dict(solution: Solution) -> dict:
    """KIRO solution layout with 1-based ids."""
    production_centers = []
    distribution_centers = []
    for i, role in enumerate(solution.roles):
        if isinstance(role, Production):
            production_centers.append({"id": i + 1, "automation": int(role.automated)})
        elif isinstance(role, Distribution):
            distribution_centers.append(
                {"id": i + 1, "parent": None if role.parent is None else role.parent + 1}
            )
    clients = [
        {"id": k + 1, "parent": None if site == UNASSIGNED else site + 1}
        for k, site in enumerate(solution.supplier)
    ]
    return {
        "productionCenters": production_centers,
        "distributionCenters": distribution_centers,
        "clients": clients,
    }


def write_solution_json(solution: Solution, filename: str | Path) -> Path:
    """Write only the KIRO solution layout to ``filename``."""
    path = Path(filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        json.dump(solution_to_dict(solution), f, cls=NumpyEncoder, indent=2)
    return path


def _summary_metrics(
    result: SitemixSolution, problem: ProblemData, parameters: SitemixParams
) -> list[tuple[str, object]]:
    solution = result.solution
    production = solution.production_centers()
    automated = [i for i in production if solution.is_automated(i)]
    return [
        ("Instance", result.instance_name),
        ("Method", result.method),
        ("Total Cost", round(result.total_cost, 4)),
        ("Building Cost", round(result.cost.building, 4)),
        ("Production Cost", round(result.cost.production, 4)),
        ("Routing Cost", round(result.cost.routing, 4)),
        ("Capacity Cost", round(result.cost.capacity, 4)),
        ("Production Centers", len(production)),
        ("Automated Production Centers", len(automated)),
        ("Distribution Centers", len(solution.distribution_centers())),
        ("Sites", problem.n_sites),
        ("Clients", problem.n_clients),
        ("Total Demand", problem.total_demand),
        ("Valid", result.is_valid),
        ("Runtime (s)", round(result.runtime_sec, 3)),
        ("---Parameters---", ""),
        ("Selector", parameters.algorithm.selector),
        ("Candidate Limit", parameters.algorithm.candidate_limit),
        ("Floor Fraction", parameters.algorithm.floor_fraction),
        ("Floor Schedule", list(parameters.algorithm.floor_schedule)),
        ("Promote Fraction", parameters.algorithm.promote_fraction),
        ("Solver", parameters.runtime.solver),
    ]


def save_optimization_results(
    result: SitemixSolution,
    problem: ProblemData,
    parameters: SitemixParams,
    filename: str | Path | None = None,
    format: str | None = None,
) -> Path:
    """Save a run to ``filename`` (or a timestamped file under ``results_dir``).

    Returns:
        Path of the file written. For CSV this is the solution table; the
        summary goes to a sibling ``*_summary.csv``.
    """
    format = format or parameters.io.format
    if format not in {"json", "csv"}:
        raise ValueError(f"Unsupported output format: {format}")

    if filename is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_filename = (
            parameters.io.results_dir
            / f"{result.instance_name}_{result.method}_{timestamp}.{format}"
        )
    else:
        output_filename = Path(filename)

    output_filename.parent.mkdir(parents=True, exist_ok=True)
    summary = _summary_metrics(result, problem, parameters)

    time_measurements = {}
    for measurement in result.time_measurements or []:
        values = asdict(measurement)
        time_measurements[values.pop("span_name")] = values

    if format == "json":
        _write_to_json(output_filename, result, summary, time_measurements)
    else:
        _write_to_csv(output_filename, result, summary)

    logger.info(f"Results saved to {output_filename}")
    return output_filename


def _write_to_json(
    filename: Path,
    result: SitemixSolution,
    summary: list[tuple[str, object]],
    time_measurements: dict,
) -> None:
    json_data = solution_to_dict(result.solution)
    json_data["Solution Summary"] = dict(summary)
    json_data["Cost Breakdown"] = result.cost.to_dict()
    json_data["Validation"] = {
        "valid": result.validation.valid,
        "issues": result.validation.issues,
    }
    if time_measurements:
        json_data["Time Measurements"] = time_measurements

    with open(filename, "w") as f:
        json.dump(json_data, f, cls=NumpyEncoder, indent=2)


def _write_to_csv(
    filename: Path, result: SitemixSolution, summary: list[tuple[str, object]]
) -> None:
    result.solution.to_dataframe().to_csv(filename, index=False)
    summary_filename = filename.with_name(f"{filename.stem}_summary.csv")
    pd.DataFrame(summary, columns=["Metric", "Value"]).to_csv(summary_filename, index=False)

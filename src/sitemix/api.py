"""
API facade for SiteMix - provides a single entry point for programmatic usage.
"""

import dataclasses
import time
from pathlib import Path

from sitemix.assignment import assign_clients
from sitemix.clustering import cluster_distribution_centers
from sitemix.config import load_sitemix_params
from sitemix.config.params import SitemixParams
from sitemix.core_types import ProblemData, SitemixSolution, Solution
from sitemix.evaluation import check_instance, evaluate_cost, validate_solution
from sitemix.optimization import solve_exact
from sitemix.selection import make_selector
from sitemix.utils.data_processing import load_instance, load_solution
from sitemix.utils.logging import (
    ProgressTracker,
    SitemixLogger,
    log_detail,
    log_progress,
    log_warning,
)
from sitemix.utils.save_results import save_optimization_results
from sitemix.utils.time_measurement import TimeRecorder

logger = SitemixLogger.get_logger("sitemix.api")


def _resolve_params(config: str | Path | SitemixParams | None) -> SitemixParams:
    if config is None:
        return load_sitemix_params()
    if isinstance(config, SitemixParams):
        return config
    config_path = Path(config)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\n"
            f"Please check the file path and ensure it exists."
        )
    return load_sitemix_params(config_path)


def _resolve_instance(instance: str | Path | ProblemData) -> ProblemData:
    if isinstance(instance, ProblemData):
        return instance
    instance_path = Path(instance)
    if not instance_path.exists():
        raise FileNotFoundError(
            f"Instance file not found: {instance_path}\n"
            f"Please check the file path and ensure it exists."
        )
    return load_instance(instance_path)


def run_heuristic(
    problem: ProblemData,
    params: SitemixParams,
    time_recorder: TimeRecorder | None = None,
) -> Solution:
    """Phase 1 (greedy assignment) followed by phase 2 (production clustering)."""
    time_recorder = time_recorder or TimeRecorder()
    selector = make_selector(params.algorithm.selector, params.runtime)

    with time_recorder.measure("assignment"):
        assignment = assign_clients(problem, selector, params.algorithm)

    solution = assignment.solution
    with time_recorder.measure("clustering"):
        cluster_distribution_centers(problem, solution, assignment.site_demand)
    return solution


def solve(
    instance: str | Path | ProblemData,
    config: str | Path | SitemixParams | None = None,
    output_dir: str | Path | None = None,
    format: str | None = None,
    verbose: bool = False,
    selector: str | None = None,
    method: str | None = None,
    save: bool = True,
) -> SitemixSolution:
    """
    Build a solution for a site-location instance.

    Args:
        instance: Path to a KIRO JSON instance, or a `ProblemData` object.
        config: Path to a YAML configuration, a `SitemixParams` object, or
            None for the packaged defaults.
        output_dir: Directory for results (overrides ``results_dir``).
        format: Output format, "json" or "csv" (overrides the config).
        verbose: Enable verbose runtime output.
        selector: Bounded selector name, e.g. "milp" or "dp" (overrides the config).
        method: "heuristic" or "exact" (overrides the config).
        save: Write results to disk.

    Returns:
        SitemixSolution: the solution with its cost breakdown and validation report.

    Raises:
        FileNotFoundError: If the instance or config file doesn't exist.
        MalformedInputError: If the instance file is malformed.
        InfeasibleInstanceError: If a client's demand exceeds one site's capacity.

    Example:
        >>> result = solve("instances/KIRO-small.json", selector="dp", save=False)
        >>> print(f"Total cost: {result.total_cost:,.2f}")
    """
    time_recorder = TimeRecorder()
    start_time = time.time()

    with time_recorder.measure("global"):
        params = _resolve_params(config)

        algorithm_overrides = {}
        if selector is not None:
            algorithm_overrides["selector"] = selector
        if method is not None:
            algorithm_overrides["method"] = method
        if algorithm_overrides:
            params = dataclasses.replace(
                params, algorithm=dataclasses.replace(params.algorithm, **algorithm_overrides)
            )

        io_overrides = {}
        if isinstance(instance, (str, Path)):
            io_overrides["instance_file"] = str(instance)
        if output_dir is not None:
            io_overrides["results_dir"] = Path(output_dir)
        if format is not None:
            io_overrides["format"] = format
        if io_overrides:
            params = dataclasses.replace(
                params, io=dataclasses.replace(params.io, **io_overrides)
            )

        if verbose:
            params = dataclasses.replace(
                params, runtime=dataclasses.replace(params.runtime, verbose=True)
            )

        progress = (
            ProgressTracker(["Load instance", "Build solution", "Evaluate"])
            if params.runtime.verbose
            else None
        )

        with time_recorder.measure("load_instance"):
            problem = _resolve_instance(instance)
        if progress:
            progress.advance(
                f"Loaded {problem.n_sites} sites and {problem.n_clients} clients"
            )

        check_instance(problem)

        log_progress(f"Solving {problem.name} ({params.algorithm.method})")
        if params.algorithm.method == "exact":
            with time_recorder.measure("exact"):
                solution = solve_exact(problem, params.runtime)
        else:
            solution = run_heuristic(problem, params, time_recorder)
        if progress:
            progress.advance(
                f"Opened {len(solution.production_centers())} production and "
                f"{len(solution.distribution_centers())} distribution centers"
            )

        with time_recorder.measure("evaluation"):
            cost = evaluate_cost(problem, solution)
            validation = validate_solution(problem, solution)
        if progress:
            progress.advance(
                f"Total cost {cost.total:,.2f}",
                status="success" if validation.valid else "error",
            )
            progress.close()

        for component, value in cost.to_dict().items():
            log_detail(f"{component.capitalize()} cost: {value:,.2f}")

    result = SitemixSolution(
        solution=solution,
        cost=cost,
        validation=validation,
        method=params.algorithm.method,
        instance_name=problem.name,
        runtime_sec=time.time() - start_time,
        time_measurements=time_recorder.measurements,
    )
    logger.info(
        f"{problem.name}: total cost {result.total_cost:,.2f} "
        f"({'valid' if result.is_valid else 'INVALID'})"
    )

    if save:
        try:
            save_optimization_results(result, problem, params)
        except OSError as e:
            log_warning(f"Failed to save results: {e!s}")

    return result


def evaluate(
    instance: str | Path | ProblemData,
    solution: str | Path | Solution,
) -> SitemixSolution:
    """Cost and validate an existing solution file against an instance."""
    start_time = time.time()
    problem = _resolve_instance(instance)
    if not isinstance(solution, Solution):
        solution = load_solution(solution, problem)

    cost = evaluate_cost(problem, solution)
    validation = validate_solution(problem, solution)
    return SitemixSolution(
        solution=solution,
        cost=cost,
        validation=validation,
        method="evaluation",
        instance_name=problem.name,
        runtime_sec=time.time() - start_time,
    )

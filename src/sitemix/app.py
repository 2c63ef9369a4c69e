"""
Command-line interface for SiteMix using Typer.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from sitemix import __version__
from sitemix.api import evaluate as api_evaluate
from sitemix.api import solve as api_solve
from sitemix.config import load_sitemix_params
from sitemix.core_types import SitemixSolution
from sitemix.registry import SELECTOR_REGISTRY
from sitemix.utils.logging import (
    LogLevel,
    log_debug,
    log_error,
    log_info,
    log_success,
    log_warning,
    setup_logging,
)
from sitemix.utils.save_results import write_solution_json

app = typer.Typer(
    help="SiteMix: capacitated two-echelon site-location heuristic",
    add_completion=False,
)
console = Console()


def _results_table(title: str, result: SitemixSolution) -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    solution = result.solution
    production = solution.production_centers()
    automated = sum(1 for i in production if solution.is_automated(i))

    table.add_row("Total Cost", f"{result.total_cost:,.2f}")
    table.add_row("Building Cost", f"{result.cost.building:,.2f}")
    table.add_row("Production Cost", f"{result.cost.production:,.2f}")
    table.add_row("Routing Cost", f"{result.cost.routing:,.2f}")
    table.add_row("Capacity Cost", f"{result.cost.capacity:,.2f}")
    table.add_row("Production Centers", f"{len(production)} ({automated} automated)")
    table.add_row("Distribution Centers", str(len(solution.distribution_centers())))
    table.add_row("Valid", "yes" if result.is_valid else "[red]no[/red]")
    table.add_row("Runtime", f"{result.runtime_sec:.2f}s")
    return table


@app.command()
def solve(
    instance: Path = typer.Option(
        ..., "--instance", "-i", help="Path to KIRO JSON instance file"
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to configuration YAML file"
    ),
    output: Path = typer.Option("results", "--output", "-o", help="Output directory"),
    format: str = typer.Option("json", "--format", "-f", help="Output format (json, csv)"),
    selector: str | None = typer.Option(
        None, "--selector", "-s", help="Bounded selector (milp, dp, brute_force)"
    ),
    exact: bool = typer.Option(
        False, "--exact", help="Solve the full MILP instead of running the heuristic"
    ),
    solution_file: Path | None = typer.Option(
        None, "--solution", help="Also write the bare solution JSON to this path"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Minimal output (errors only)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug output"),
) -> None:
    """
    Build a solution for a site-location instance.

    Sites are opened greedily with bounded client selection, distribution
    centers are grouped under new production centers and the result is
    costed and validated.
    """
    _setup_logging_from_flags(verbose, quiet, debug)

    if not instance.exists():
        log_error(f"Instance file not found: {instance}")
        raise typer.Exit(1)

    if config and not config.exists():
        log_error(f"Config file not found: {config}")
        raise typer.Exit(1)

    if format not in ["json", "csv"]:
        log_error("Invalid format. Choose 'json' or 'csv'")
        raise typer.Exit(1)

    if selector is not None and selector not in SELECTOR_REGISTRY:
        log_error(
            f"Unknown selector '{selector}'. Choose from: {', '.join(sorted(SELECTOR_REGISTRY))}"
        )
        raise typer.Exit(1)

    # Parse config early to report YAML errors before solving
    if config is not None:
        try:
            load_sitemix_params(config)
        except ValueError as e:
            log_error(str(e))
            raise typer.Exit(1)

    kwargs = dict(
        instance=str(instance),
        config=str(config) if config else None,
        output_dir=str(output),
        format=format,
        verbose=verbose,
        selector=selector,
        method="exact" if exact else None,
    )
    log_debug(f"Solve arguments: {kwargs}")

    try:
        if not quiet:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task("Building solution...", total=None)
                result = api_solve(**kwargs)
                progress.update(task, completed=True)
        else:
            result = api_solve(**kwargs)

        if solution_file is not None:
            write_solution_json(result.solution, solution_file)

        if not quiet:
            console.print(_results_table(f"Results: {result.instance_name}", result))
        if result.is_valid:
            log_success(f"Results saved to {output}/")
        else:
            log_warning("Solution failed validation; see the warnings above")

    except FileNotFoundError as e:
        log_error(str(e))
        raise typer.Exit(1)
    except ValueError as e:
        log_error(str(e))
        raise typer.Exit(1)
    except Exception as e:
        log_error(f"Unexpected error: {e}")
        if debug:
            console.print_exception()
        raise typer.Exit(1)


@app.command()
def evaluate(
    instance: Path = typer.Option(
        ..., "--instance", "-i", help="Path to KIRO JSON instance file"
    ),
    solution: Path = typer.Option(
        ..., "--solution", "-s", help="Path to KIRO JSON solution file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Minimal output (errors only)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug output"),
) -> None:
    """
    Cost and validate an existing solution. Exits with status 2 if invalid.
    """
    _setup_logging_from_flags(verbose, quiet, debug)

    for path in (instance, solution):
        if not path.exists():
            log_error(f"File not found: {path}")
            raise typer.Exit(1)

    log_info(f"Evaluating {solution.name} against {instance.name}")
    try:
        result = api_evaluate(instance, solution)
    except ValueError as e:
        log_error(str(e))
        raise typer.Exit(1)

    if not quiet:
        console.print(_results_table(f"Evaluation: {result.instance_name}", result))
        for issue in result.validation.issues:
            console.print(f"[red]- {issue}[/red]")

    if not result.is_valid:
        raise typer.Exit(2)


@app.command()
def version() -> None:
    """
    Show the SiteMix version.
    """
    console.print(f"SiteMix version {__version__}")


def _setup_logging_from_flags(
    verbose: bool = False, quiet: bool = False, debug: bool = False
):
    """Setup logging based on CLI flags or environment variable."""
    level_from_flags: LogLevel | None = None
    if debug:
        level_from_flags = LogLevel.DEBUG
    elif verbose:
        level_from_flags = LogLevel.VERBOSE
    elif quiet:
        level_from_flags = LogLevel.QUIET

    if level_from_flags is not None:
        setup_logging(level_from_flags)
    else:
        # No flags set, let setup_logging handle it (will check env var)
        setup_logging()


if __name__ == "__main__":
    app()

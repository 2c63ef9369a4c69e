"""Instance feasibility checks and structural validation of solutions."""

from sitemix.core_types import (
    Distribution,
    ProblemData,
    Production,
    Solution,
    UNASSIGNED,
    Unassigned,
    ValidationReport,
)
from sitemix.exceptions import InfeasibleInstanceError
from sitemix.utils.logging import Symbols, SitemixLogger

logger = SitemixLogger.get_logger(__name__)


def check_instance(problem: ProblemData) -> None:
    """Reject instances in which a single client exceeds one site's capacity."""
    capacity = problem.costs.full_capacity
    oversized = [c.index for c in problem.clients if c.demand > capacity]
    if oversized:
        shown = ", ".join(str(k + 1) for k in oversized[:10])
        more = f" (and {len(oversized) - 10} more)" if len(oversized) > 10 else ""
        raise InfeasibleInstanceError(
            f"{len(oversized)} clients have demand above the full site capacity "
            f"{capacity:g}: {shown}{more}"
        )


def validate_solution(problem: ProblemData, solution: Solution) -> ValidationReport:
    """Check the structural invariants of a completed solution.

    The solution passes only if every check passes: no site is both a
    production and a distribution center, automation only on production
    centers, every distribution center has a production parent and every
    client is served by an opened center.
    """
    issues: list[str] = []

    if len(solution.roles) != problem.n_sites:
        issues.append(
            f"Solution has {len(solution.roles)} site roles for {problem.n_sites} sites"
        )
    if len(solution.supplier) != problem.n_clients:
        issues.append(
            f"Solution has {len(solution.supplier)} suppliers for {problem.n_clients} clients"
        )
    if issues:
        return _report(issues)

    arrays = solution.to_arrays()
    for site, role in enumerate(solution.roles):
        if not isinstance(role, (Unassigned, Production, Distribution)):
            issues.append(f"Site {site + 1} has unknown role {role!r}")
            continue
        if arrays["P"][site] and arrays["D"][site]:
            issues.append(f"Site {site + 1} is both production and distribution center")
        if arrays["a"][site] and not arrays["P"][site]:
            issues.append(f"Site {site + 1} is automated but not a production center")
        if isinstance(role, Distribution):
            parent = role.parent
            if parent is None:
                issues.append(f"Distribution center {site + 1} has no parent")
            elif not 0 <= parent < problem.n_sites or not solution.is_production(parent):
                issues.append(
                    f"Distribution center {site + 1} has parent {parent + 1} "
                    "which is not a production center"
                )

    for client, site in enumerate(solution.supplier):
        if site == UNASSIGNED:
            issues.append(f"Client {client + 1} has no supplier")
        elif not 0 <= site < problem.n_sites or not solution.is_opened(site):
            issues.append(
                f"Client {client + 1} is served by site {site + 1} which is not an opened center"
            )

    return _report(issues)


def _report(issues: list[str]) -> ValidationReport:
    if issues:
        logger.warning(f"{Symbols.CROSS} Solution failed validation ({len(issues)} issues)")
        for issue in issues[:20]:
            logger.warning(f"  {issue}")
    return ValidationReport(valid=not issues, issues=issues)

"""
greedy.py

Phase 1 of the constructive heuristic: open sites one at a time and assign
clients to them under the capacity of a single production center.

Each round branches on the unsatisfied demand ``R`` against the full
capacity ``U = u_P + u_A`` of one site:

* ``R > U`` (large-demand round) – every unopened site ranks the unassigned
  clients by distance and asks the bounded selector for the subset of its
  ``candidate_limit`` nearest clients minimising Σ demand·distance with
  aggregate demand in ``[floor, U]``. The site with the lowest score is opened
  as a distribution center with that subset, and promoted in place to a
  production center when its demand exceeds ``promote_fraction · U``.
* ``R ≤ U`` (small-demand round) – the unopened site nearest the centroid of
  the remaining clients is opened as a production center and takes every
  remaining client; the loop ends.

When no site can fill the window, the floor is relaxed for the whole round
(``relaxation_factor``) up to ``max_relaxations`` times; past that every site
is scored on its nearest client alone, which always fits because instances
are checked for clients larger than one site's capacity.

Typical usage
-------------
>>> from sitemix.selection import make_selector
>>> result = assign_clients(problem, make_selector("dp"), AlgorithmParams())
>>> result.solution.distribution_centers()
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from sitemix.config.params import AlgorithmParams
from sitemix.core_types import (
    Distribution,
    ProblemData,
    Production,
    SelectionCandidate,
    SelectionResult,
    Solution,
)
from sitemix.evaluation.validation import check_instance
from sitemix.exceptions import SelectorFailure
from sitemix.interfaces import BoundedSelector
from sitemix.selection.common import build_result
from sitemix.utils.geometry import centroid, nearest_index
from sitemix.utils.logging import Colors, SitemixLogger, Symbols

logger = SitemixLogger.get_logger(__name__)


@dataclass
class AssignmentResult:
    """Outcome of phase 1."""

    solution: Solution
    site_demand: dict[int, int] = field(default_factory=dict)
    rounds: int = 0


def assign_clients(
    problem: ProblemData,
    selector: BoundedSelector,
    params: AlgorithmParams,
) -> AssignmentResult:
    """Open sites greedily until every client has a supplier.

    Args:
        problem: Validated problem instance.
        selector: Bounded selector used in large-demand rounds.
        params: Algorithm parameters (candidate limit, window floor schedule,
            relaxation and promotion settings).

    Returns:
        AssignmentResult: the partial solution (distribution centers have no
        parent yet) and the demand accumulated by every opened site.

    Raises:
        InfeasibleInstanceError: If a single client exceeds one site's capacity.
    """
    check_instance(problem)

    costs = problem.costs
    capacity = costs.full_capacity
    demands = problem.demands
    solution = Solution.empty(problem.n_sites, problem.n_clients)
    site_demand: dict[int, int] = {}

    unassigned = list(range(problem.n_clients))
    remaining = int(demands.sum())
    round_index = 0

    while unassigned:
        unopened = solution.unopened_sites()
        if not unopened:
            _attach_to_nearest_opened(problem, solution, unassigned, site_demand)
            break

        if remaining > capacity:
            site, selection = _best_selection(
                problem, unopened, unassigned, selector, params, round_index
            )
            solution.roles[site] = Distribution()
            for client in selection.items:
                solution.supplier[client] = site
            site_demand[site] = selection.weight

            chosen = set(selection.items)
            unassigned = [k for k in unassigned if k not in chosen]
            remaining -= selection.weight

            if selection.weight > params.promote_fraction * capacity:
                automated = selection.weight > costs.base_capacity
                solution.roles[site] = Production(automated=automated)
                logger.debug(
                    f"Round {round_index}: site {site} opened as production center "
                    f"(demand {selection.weight}, automated={automated})"
                )
            else:
                logger.debug(
                    f"Round {round_index}: site {site} opened as distribution center "
                    f"(demand {selection.weight})"
                )
        else:
            site = _open_near_centroid(problem, solution, unopened, unassigned, remaining)
            site_demand[site] = remaining
            unassigned = []
            remaining = 0

        round_index += 1

    logger.info(
        f"{Colors.CYAN}{Symbols.FACTORY} Assigned {problem.n_clients} clients in "
        f"{round_index} rounds: {len(solution.production_centers())} production, "
        f"{len(solution.distribution_centers())} distribution centers{Colors.RESET}"
    )
    return AssignmentResult(solution=solution, site_demand=site_demand, rounds=round_index)


def rank_clients(
    problem: ProblemData, site: int, clients: Sequence[int], limit: int
) -> list[int]:
    """Nearest ``limit`` clients of ``site``; ties keep the input order."""
    distances = problem.distances.site_client[site, list(clients)]
    order = np.argsort(distances, kind="stable")[:limit]
    return [clients[int(p)] for p in order]


def _best_selection(
    problem: ProblemData,
    unopened: Sequence[int],
    unassigned: Sequence[int],
    selector: BoundedSelector,
    params: AlgorithmParams,
    round_index: int,
) -> tuple[int, SelectionResult]:
    """Score every unopened site and return the cheapest one with its clients.

    All sites of a round share the same window. If no site can fill it the
    floor is relaxed for every site; once relaxations are exhausted each site
    is scored on its nearest client alone.
    """
    capacity = problem.costs.full_capacity
    lo = params.floor_fraction * capacity * params.floor_multiplier(round_index)
    candidates = {
        site: _site_candidates(problem, site, unassigned, params.candidate_limit)
        for site in unopened
    }

    for attempt in range(params.max_relaxations + 1):
        best = _cheapest_site(candidates, selector, lo, capacity)
        if best is not None:
            site, selection = best
            logger.debug(
                f"Round {round_index}: best site {site} with {len(selection.items)} "
                f"clients, score {selection.score:.2f} (floor {lo:.1f})"
            )
            return site, selection
        logger.debug(
            f"Round {round_index}: window [{lo:.1f}, {capacity:.1f}] infeasible "
            f"for every site (attempt {attempt})"
        )
        lo *= params.relaxation_factor

    singles = {site: build_result(c, [0]) for site, c in candidates.items()}
    site = min(singles, key=lambda i: (singles[i].score, i))
    logger.debug(f"Round {round_index}: falling back to single nearest client at site {site}")
    return site, singles[site]


def _cheapest_site(
    candidates: dict[int, list[SelectionCandidate]],
    selector: BoundedSelector,
    lo: float,
    capacity: float,
) -> tuple[int, SelectionResult] | None:
    """Lowest-score non-empty selection over all sites, ``None`` if there is none.

    A site whose selector call fails is skipped; the failure propagates only
    when it happens for every site. Such a failure is a solver crash, not an
    infeasible window, so it is raised before any floor relaxation.
    """
    best_site: int | None = None
    best: SelectionResult | None = None
    last_error: SelectorFailure | None = None
    failures = 0

    for site, site_candidates in candidates.items():
        try:
            selection = selector.select(site_candidates, lo, capacity)
        except SelectorFailure as exc:
            logger.warning(f"Selector failed for site {site}: {exc}")
            last_error = exc
            failures += 1
            continue
        if not selection.feasible or not selection.items:
            continue
        if best is None or selection.score < best.score:
            best_site, best = site, selection

    if last_error is not None and failures == len(candidates):
        raise last_error
    if best_site is None or best is None:
        return None
    return best_site, best


def _site_candidates(
    problem: ProblemData, site: int, unassigned: Sequence[int], limit: int
) -> list[SelectionCandidate]:
    """Selector input for ``site``: nearest clients with demand-weighted distance."""
    distances = problem.distances.site_client[site]
    return [
        SelectionCandidate(
            item=client,
            weight=problem.clients[client].demand,
            score=float(problem.clients[client].demand * distances[client]),
        )
        for client in rank_clients(problem, site, unassigned, limit)
    ]


def _open_near_centroid(
    problem: ProblemData,
    solution: Solution,
    unopened: Sequence[int],
    unassigned: Sequence[int],
    remaining: int,
) -> int:
    """Open the site nearest the clients' centroid as a production center.

    Raises:
        ValueError: If ``unopened`` is empty.
    """
    center = centroid(problem.client_coordinates[list(unassigned)])
    site = nearest_index(problem.site_coordinates, unopened, center)
    if site is None:
        raise ValueError("No unopened site left for the remaining clients")

    automated = remaining > problem.costs.base_capacity
    solution.roles[site] = Production(automated=automated)
    for client in unassigned:
        solution.supplier[client] = site

    logger.debug(
        f"Final round: site {site} takes the last {len(unassigned)} clients "
        f"(demand {remaining}, automated={automated})"
    )
    return site


def _attach_to_nearest_opened(
    problem: ProblemData,
    solution: Solution,
    unassigned: Sequence[int],
    site_demand: dict[int, int],
) -> None:
    """Serve leftover clients from the nearest opened site once no site is left."""
    opened = [i for i in range(problem.n_sites) if solution.is_opened(i)]
    logger.warning(
        f"No unopened site left; attaching {len(unassigned)} clients to the "
        "nearest opened centers"
    )
    distances = problem.distances.site_client
    for client in unassigned:
        site = min(opened, key=lambda i: (distances[i, client], i))
        solution.supplier[client] = site
        site_demand[site] = site_demand.get(site, 0) + problem.clients[client].demand

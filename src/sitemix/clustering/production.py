"""
production.py

Phase 2 of the constructive heuristic: group the distribution centers opened
in phase 1 into proximity clusters that fit one production center, then open
a production center for each cluster.

A cluster starts from the lowest-index unclustered distribution center and
absorbs its nearest unclustered distribution centers (site-to-site distance)
while the aggregate demand stays within one site's full capacity. The
unopened site nearest the unweighted centroid of the members becomes the
cluster's production center, automated when the cluster needs more than the
base capacity.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from sitemix.core_types import Distribution, ProblemData, Production, Solution
from sitemix.utils.geometry import centroid, nearest_index
from sitemix.utils.logging import Colors, SitemixLogger, Symbols

logger = SitemixLogger.get_logger(__name__)


@dataclass
class ProductionCluster:
    """Distribution centers supplied by one production center."""

    production_site: int
    members: list[int]
    demand: int
    centroid: tuple[float, float]
    automated: bool


def cluster_distribution_centers(
    problem: ProblemData,
    solution: Solution,
    site_demand: Mapping[int, int] | None = None,
) -> list[ProductionCluster]:
    """Link every distribution center of ``solution`` to a new production center.

    The solution is updated in place.

    Args:
        problem: Problem instance providing coordinates, distances and capacity.
        solution: Phase 1 solution; its distribution centers have no parent yet.
        site_demand: Demand accumulated by each site in phase 1. Recomputed
            from the client suppliers when omitted.

    Returns:
        The clusters built, in creation order.
    """
    costs = problem.costs
    capacity = costs.full_capacity
    distances = problem.distances.site_site
    coordinates = problem.site_coordinates
    demand = _distribution_demand(problem, solution, site_demand)

    unclustered = solution.distribution_centers()
    clusters: list[ProductionCluster] = []

    while unclustered:
        seed = unclustered[0]
        members = [seed]
        total = demand[seed]

        neighbours = sorted(unclustered[1:], key=lambda j: (distances[seed, j], j))
        for candidate in neighbours:
            if total + demand[candidate] > capacity:
                break
            members.append(candidate)
            total += demand[candidate]

        in_cluster = set(members)
        unclustered = [j for j in unclustered if j not in in_cluster]

        center = centroid(coordinates[members])
        automated = total > costs.base_capacity
        production_site = nearest_index(coordinates, solution.unopened_sites(), center)
        if production_site is None:
            # No free site left: the member nearest the centroid takes the role.
            production_site = nearest_index(coordinates, members, center)
            members.remove(production_site)
            logger.warning(
                f"No unopened site for cluster seeded at {seed}; promoting "
                f"distribution center {production_site}"
            )

        solution.roles[production_site] = Production(automated=automated)
        for member in members:
            solution.roles[member] = Distribution(parent=production_site)

        clusters.append(
            ProductionCluster(
                production_site=production_site,
                members=members,
                demand=total,
                centroid=(float(center[0]), float(center[1])),
                automated=automated,
            )
        )
        logger.debug(
            f"Cluster {len(clusters)}: production site {production_site} supplies "
            f"{members} (demand {total}, automated={automated})"
        )

    if clusters:
        logger.info(
            f"{Colors.CYAN}{Symbols.TRUCK} Grouped distribution centers into "
            f"{len(clusters)} production clusters{Colors.RESET}"
        )
    return clusters


def _distribution_demand(
    problem: ProblemData,
    solution: Solution,
    site_demand: Mapping[int, int] | None,
) -> dict[int, int]:
    if site_demand is not None:
        return {j: int(site_demand.get(j, 0)) for j in solution.distribution_centers()}

    demand = {j: 0 for j in solution.distribution_centers()}
    for client, site in enumerate(solution.supplier):
        if site in demand:
            demand[site] += problem.clients[client].demand
    return demand

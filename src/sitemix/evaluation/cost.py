"""
cost.py

Recomputes the total cost of a solution from the problem data alone. Nothing
accumulated during construction is reused, so bookkeeping drift in the
heuristic shows up as a mismatch.

Cost terms
----------
* production center ``i``: ``c_Pb + c_Ab·a_i`` plus the overflow
  ``cu · max(0, served_i − u_P − u_A·a_i)``, where ``served_i`` counts direct
  clients and the clients of the distribution centers it supplies.
* distribution center: ``c_Db``.
* client ``k`` (demand ``d``) served directly by production center ``i``:
  ``d · (c_Pp − c_Ap·a_i + c_2r·dist(i, k))``.
* client served by distribution center ``j`` whose parent is ``i``:
  ``d · (c_Pp − c_Ap·a_i + c_Dp + c_1r·dist(i, j) + c_2r·dist(j, k))``.

Links missing from an invalid solution (unassigned client, distribution
center without a production parent) drop the terms that depend on them so
that a cost can still be reported next to the validation diagnostics.
"""

from sitemix.core_types import CostBreakdown, ProblemData, Solution, UNASSIGNED


def evaluate_cost(problem: ProblemData, solution: Solution) -> CostBreakdown:
    """Total cost of ``solution`` broken down by component."""
    costs = problem.costs
    site_site = problem.distances.site_site
    site_client = problem.distances.site_client
    n_sites = problem.n_sites

    breakdown = CostBreakdown()
    served = [0] * n_sites

    for client, site in enumerate(solution.supplier):
        if site == UNASSIGNED or not 0 <= site < n_sites:
            continue
        demand = problem.clients[client].demand
        breakdown.routing += demand * costs.secondary_routing * site_client[site, client]

        if solution.is_production(site):
            producer = site
        elif solution.is_distribution(site):
            breakdown.production += demand * costs.distribution_unit
            producer = solution.parent_of(site)
            if producer is not None and 0 <= producer < n_sites:
                breakdown.routing += demand * costs.primary_routing * site_site[producer, site]
            else:
                producer = None
        else:
            producer = None

        breakdown.production += demand * costs.production_unit
        if producer is not None and solution.is_production(producer):
            served[producer] += demand
            if solution.is_automated(producer):
                breakdown.production -= demand * costs.automation_unit_bonus

    for site in range(n_sites):
        if solution.is_production(site):
            automated = solution.is_automated(site)
            breakdown.building += costs.production_build
            if automated:
                breakdown.building += costs.automation_build_penalty
            overflow = served[site] - costs.capacity_of(automated)
            breakdown.capacity += costs.capacity_overflow * max(0.0, overflow)
        elif solution.is_distribution(site):
            breakdown.building += costs.distribution_build

    return breakdown


def total_cost(problem: ProblemData, solution: Solution) -> float:
    """Scalar total of :func:`evaluate_cost`."""
    return evaluate_cost(problem, solution).total

"""
exact.py

Solves the **two-echelon capacitated site-location** problem exactly as a
single mixed-integer linear programme. Intended for small instances: the
routing linearization grows with sites² × clients.

Mathematical formulation
------------------------
Objective: minimise

    Σ_i (c_Pb·P_i + c_Ab·A_i + c_Db·D_i + cu·o_i)
  + Σ_k d_k · [ Σ_i x_ik (c_Pp + c_2r·δ_ik)
              + Σ_j s_jk (c_Pp + c_Dp + c_2r·δ_jk)
              + Σ_{i≠j} z_ijk c_1r·Δ_ij
              − c_Ap Σ_i w_ik ]

subject to
* Roles – ``P_i + D_i ≤ 1`` and ``A_i ≤ P_i``
* Backbone – ``Σ_i y_ij = D_j`` and ``y_ij ≤ P_i``
* Supply – ``Σ_i x_ik + Σ_j s_jk = 1``, ``x_ik ≤ P_i``, ``s_jk ≤ D_j``
* Routing linearization – ``Σ_i z_ijk = s_jk`` and ``z_ijk ≤ y_ij``
* Automation bonus – ``w_ik = A_i ∧ u_ik`` with ``u_ik = x_ik + Σ_j z_ijk``
* Overflow – ``o_i ≥ Σ_k d_k u_ik − u_P·P_i − u_A·A_i``, ``o_i ≥ 0``

Key symbols
~~~~~~~~~~~
``P_i, A_i, D_i``  Binary roles: production, automation, distribution.
``y_ij``           Binary, production center *i* supplies distribution center *j*.
``x_ik, s_jk``     Binary, client *k* served by production *i* / distribution *j*.
``z_ijk``          Continuous, client *k* reaches distribution *j* from production *i*.
``w_ik``           Continuous, automated production *i* produces for client *k*.
``o_i``            Continuous capacity overflow of site *i*.
"""

import time
from typing import Any

import pulp

from sitemix.config.params import RuntimeParams
from sitemix.core_types import (
    Distribution,
    ProblemData,
    Production,
    Solution,
    Unassigned,
)
from sitemix.exceptions import InfeasibleInstanceError
from sitemix.utils.logging import SitemixLogger
from sitemix.utils.solver import pick_solver

logger = SitemixLogger.get_logger(__name__)


def solve_exact(
    problem: ProblemData,
    runtime: RuntimeParams | None = None,
    solver=None,
) -> Solution:
    """Solve ``problem`` to optimality with a MILP solver.

    Args:
        problem: Problem instance.
        runtime: Solver choice, time limit and verbosity.
        solver: Optional explicit `pulp` solver instance. If *None*,
            :func:`sitemix.utils.solver.pick_solver` chooses one from ``runtime``.

    Returns:
        Solution: same shape as the heuristic's output.

    Raises:
        InfeasibleInstanceError: If the model is infeasible.
        RuntimeError: If the solver ends without an optimal solution.
    """
    runtime = runtime or RuntimeParams()
    model, variables = _create_model(problem)
    logger.info(
        f"Exact model: {len(model.variables())} variables, "
        f"{len(model.constraints)} constraints"
    )

    solver = solver or pick_solver(runtime)
    start_time = time.time()
    model.solve(solver)
    logger.info(f"Exact model solved in {time.time() - start_time:.2f} seconds")

    if model.status != pulp.LpStatusOptimal:
        status_name = pulp.LpStatus[model.status]
        if status_name == "Infeasible":
            raise InfeasibleInstanceError("Exact model is infeasible!")
        raise RuntimeError(f"Exact optimization failed with status: {status_name}")

    return _extract_solution(problem, variables)


def _create_model(problem: ProblemData) -> tuple[pulp.LpProblem, dict[str, Any]]:
    """Create the MILP and return it with its variable dictionaries."""
    costs = problem.costs
    sites = range(problem.n_sites)
    clients = range(problem.n_clients)
    arcs = [(i, j) for i in sites for j in sites if i != j]
    site_site = problem.distances.site_site
    site_client = problem.distances.site_client
    demand = [client.demand for client in problem.clients]

    model = pulp.LpProblem("Two_Echelon_Site_Location", pulp.LpMinimize)

    P = pulp.LpVariable.dicts("P", sites, cat="Binary")
    A = pulp.LpVariable.dicts("A", sites, cat="Binary")
    D = pulp.LpVariable.dicts("D", sites, cat="Binary")
    y = pulp.LpVariable.dicts("y", arcs, cat="Binary")
    x = pulp.LpVariable.dicts("x", [(i, k) for i in sites for k in clients], cat="Binary")
    s = pulp.LpVariable.dicts("s", [(j, k) for j in sites for k in clients], cat="Binary")
    z = pulp.LpVariable.dicts(
        "z", [(i, j, k) for (i, j) in arcs for k in clients], lowBound=0, upBound=1
    )
    w = pulp.LpVariable.dicts(
        "w", [(i, k) for i in sites for k in clients], lowBound=0, upBound=1
    )
    o = pulp.LpVariable.dicts("o", sites, lowBound=0)

    # Production attributed to site i for client k (direct or through a distribution center)
    produced = {
        (i, k): x[i, k] + pulp.lpSum(z[i, j, k] for j in sites if j != i)
        for i in sites
        for k in clients
    }

    # Objective Function
    model += (
        pulp.lpSum(
            costs.production_build * P[i]
            + costs.automation_build_penalty * A[i]
            + costs.distribution_build * D[i]
            + costs.capacity_overflow * o[i]
            for i in sites
        )
        + pulp.lpSum(
            demand[k]
            * (
                pulp.lpSum(
                    (costs.production_unit + costs.secondary_routing * site_client[i, k])
                    * x[i, k]
                    for i in sites
                )
                + pulp.lpSum(
                    (
                        costs.production_unit
                        + costs.distribution_unit
                        + costs.secondary_routing * site_client[j, k]
                    )
                    * s[j, k]
                    for j in sites
                )
                + pulp.lpSum(
                    costs.primary_routing * site_site[i, j] * z[i, j, k] for (i, j) in arcs
                )
                - costs.automation_unit_bonus * pulp.lpSum(w[i, k] for i in sites)
            )
            for k in clients
        ),
        "Total_Cost",
    )

    # Constraints

    # 1. Site roles
    for i in sites:
        model += P[i] + D[i] <= 1, f"Role_Exclusive_{i}"
        model += A[i] <= P[i], f"Automation_Requires_Production_{i}"

    # 2. Distribution centers have exactly one production parent
    for j in sites:
        model += (
            pulp.lpSum(y[i, j] for i in sites if i != j) == D[j],
            f"Distribution_Parent_{j}",
        )
    for (i, j) in arcs:
        model += y[i, j] <= P[i], f"Parent_Is_Production_{i}_{j}"

    # 3. Every client served exactly once
    for k in clients:
        model += (
            pulp.lpSum(x[i, k] for i in sites) + pulp.lpSum(s[j, k] for j in sites) == 1,
            f"Client_Supply_{k}",
        )
        for i in sites:
            model += x[i, k] <= P[i], f"Direct_Supply_Open_{i}_{k}"
            model += s[i, k] <= D[i], f"Distribution_Supply_Open_{i}_{k}"

    # 4. Routing through distribution centers
    for j in sites:
        for k in clients:
            model += (
                pulp.lpSum(z[i, j, k] for i in sites if i != j) == s[j, k],
                f"Routing_Link_{j}_{k}",
            )
    for (i, j) in arcs:
        for k in clients:
            model += z[i, j, k] <= y[i, j], f"Routing_Arc_{i}_{j}_{k}"

    # 5. Automation bonus linearization
    for i in sites:
        for k in clients:
            model += w[i, k] <= A[i], f"Bonus_Automated_{i}_{k}"
            model += w[i, k] <= produced[i, k], f"Bonus_Produced_{i}_{k}"
            model += w[i, k] >= A[i] + produced[i, k] - 1, f"Bonus_Lower_{i}_{k}"

    # 6. Capacity overflow
    for i in sites:
        model += (
            o[i]
            >= pulp.lpSum(demand[k] * produced[i, k] for k in clients)
            - costs.base_capacity * P[i]
            - costs.automation_capacity_bonus * A[i],
            f"Overflow_{i}",
        )

    variables = {"P": P, "A": A, "D": D, "y": y, "x": x, "s": s}
    return model, variables


def _is_set(var: pulp.LpVariable) -> bool:
    return bool(var.varValue) and var.varValue > 0.5


def _extract_solution(problem: ProblemData, variables: dict[str, Any]) -> Solution:
    """Translate variable values into a :class:`Solution`."""
    P, A, D, y = variables["P"], variables["A"], variables["D"], variables["y"]
    x, s = variables["x"], variables["s"]
    sites = range(problem.n_sites)

    solution = Solution.empty(problem.n_sites, problem.n_clients)
    for i in sites:
        if _is_set(P[i]):
            solution.roles[i] = Production(automated=_is_set(A[i]))
        elif _is_set(D[i]):
            parent = next((p for p in sites if p != i and _is_set(y[p, i])), None)
            solution.roles[i] = Distribution(parent=parent)
        else:
            solution.roles[i] = Unassigned()

    for k in range(problem.n_clients):
        for i in sites:
            if _is_set(x[i, k]) or _is_set(s[i, k]):
                solution.supplier[k] = i
                break

    return solution

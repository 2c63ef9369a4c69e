"""Tests for the cost evaluator."""

import dataclasses

import hypothesis.strategies as st
import numpy as np
import pytest
from hypothesis import given, settings

from sitemix.core_types import (
    Client,
    CostModel,
    DistanceMatrices,
    Distribution,
    ProblemData,
    Production,
    Site,
    Solution,
    UNASSIGNED,
)
from sitemix.evaluation import evaluate_cost, total_cost
from sitemix.utils.data_processing import load_instance, load_solution

COSTS = CostModel(
    production_build=100.0,
    automation_build_penalty=50.0,
    distribution_build=20.0,
    production_unit=1.0,
    automation_unit_bonus=0.2,
    distribution_unit=0.5,
    primary_routing=1.0,
    secondary_routing=2.0,
    capacity_overflow=10.0,
    base_capacity=5.0,
    automation_capacity_bonus=1.0,
)


def _two_site_problem(costs=COSTS, demands=(4, 3)):
    sites = [Site(0, 0.0, 0.0), Site(1, 3.0, 4.0)]
    clients = [Client(k, d, 0.0, 0.0) for k, d in enumerate(demands)]
    site_client = np.array(
        [[1.0 + k for k in range(len(demands))], [7.0 - 5 * (k % 2) for k in range(len(demands))]]
    )
    distances = DistanceMatrices(
        site_site=np.array([[0.0, 5.0], [5.0, 0.0]]),
        site_client=site_client,
    )
    return ProblemData(sites=sites, clients=clients, costs=costs, distances=distances)


def _backbone(automated=True):
    return Solution(
        roles=[Production(automated=automated), Distribution(parent=0)],
        supplier=[0, 1],
    )


class TestCostBreakdown:
    def test_automated_production_with_distribution_center(self):
        breakdown = evaluate_cost(_two_site_problem(), _backbone(automated=True))

        assert breakdown.building == pytest.approx(170.0)
        assert breakdown.production == pytest.approx(7.1)
        assert breakdown.routing == pytest.approx(35.0)
        assert breakdown.capacity == pytest.approx(10.0)
        assert breakdown.total == pytest.approx(222.1)

    def test_manual_production_center(self):
        breakdown = evaluate_cost(_two_site_problem(), _backbone(automated=False))

        assert breakdown.building == pytest.approx(120.0)
        assert breakdown.production == pytest.approx(8.5)
        assert breakdown.capacity == pytest.approx(20.0)
        assert breakdown.total == pytest.approx(183.5)

    def test_demand_exactly_at_capacity_has_no_overflow_cost(self):
        costs = dataclasses.replace(COSTS, base_capacity=6.0)
        breakdown = evaluate_cost(_two_site_problem(costs), _backbone(automated=True))
        assert breakdown.capacity == 0.0

    def test_to_dict_reports_every_component(self):
        breakdown = evaluate_cost(_two_site_problem(), _backbone())
        assert breakdown.to_dict() == pytest.approx(
            {
                "building": 170.0,
                "production": 7.1,
                "routing": 35.0,
                "capacity": 10.0,
                "total": 222.1,
            }
        )


def test_reference_solution_cost(small_instance_path, small_solution_path):
    problem = load_instance(small_instance_path)
    solution = load_solution(small_solution_path, problem)

    breakdown = evaluate_cost(problem, solution)

    assert breakdown.building == pytest.approx(200.0)
    assert breakdown.production == pytest.approx(58.5)
    assert breakdown.routing == pytest.approx(244.0)
    assert breakdown.capacity == pytest.approx(240.0)
    assert total_cost(problem, solution) == pytest.approx(742.5)


def test_evaluation_is_repeatable_and_leaves_solution_untouched():
    problem = _two_site_problem()
    solution = _backbone()
    before = solution.copy()

    first = evaluate_cost(problem, solution)
    second = evaluate_cost(problem, solution)

    assert first == second
    assert solution == before


def test_missing_links_drop_dependent_terms():
    problem = _two_site_problem()
    solution = Solution(
        roles=[Production(automated=True), Distribution(parent=None)],
        supplier=[UNASSIGNED, 1],
    )
    breakdown = evaluate_cost(problem, solution)

    # Client 2 is charged production, distribution and last-mile routing only.
    assert breakdown.building == pytest.approx(170.0)
    assert breakdown.production == pytest.approx(3 * 1.0 + 3 * 0.5)
    assert breakdown.routing == pytest.approx(3 * 2.0 * 2.0)
    assert breakdown.capacity == 0.0


@settings(max_examples=50, deadline=None)
@given(
    demands=st.lists(st.integers(min_value=0, max_value=6), min_size=1, max_size=8),
    automated=st.booleans(),
    via_distribution=st.lists(st.booleans(), min_size=8, max_size=8),
)
def test_overflow_term_matches_served_demand(demands, automated, via_distribution):
    problem = _two_site_problem(demands=tuple(demands))
    supplier = [1 if via_distribution[k] else 0 for k in range(len(demands))]
    solution = Solution(
        roles=[Production(automated=automated), Distribution(parent=0)], supplier=supplier
    )

    breakdown = evaluate_cost(problem, solution)

    capacity = COSTS.capacity_of(automated)
    assert breakdown.capacity == pytest.approx(
        COSTS.capacity_overflow * max(0.0, sum(demands) - capacity)
    )
    assert breakdown.total == pytest.approx(
        breakdown.building + breakdown.production + breakdown.routing + breakdown.capacity
    )


@settings(max_examples=50, deadline=None)
@given(
    demands=st.lists(st.integers(min_value=0, max_value=6), min_size=2, max_size=8),
    automated=st.booleans(),
    via_distribution=st.lists(st.booleans(), min_size=8, max_size=8),
    data=st.data(),
)
def test_raising_one_demand_never_lowers_total(demands, automated, via_distribution, data):
    supplier = [1 if via_distribution[k] else 0 for k in range(len(demands))]
    # Keep at least one client behind the distribution center.
    supplier[-1] = 1
    solution = Solution(
        roles=[Production(automated=automated), Distribution(parent=0)], supplier=supplier
    )
    client = data.draw(st.integers(min_value=0, max_value=len(demands) - 1))
    bump = data.draw(st.integers(min_value=1, max_value=5))

    raised = list(demands)
    raised[client] += bump
    before = evaluate_cost(_two_site_problem(demands=tuple(demands)), solution).total
    after = evaluate_cost(_two_site_problem(demands=tuple(raised)), solution).total

    assert after >= before - 1e-9


def test_raising_demand_behind_distribution_center_costs_more():
    solution = _backbone(automated=True)
    before = evaluate_cost(_two_site_problem(demands=(4, 3)), solution)
    after = evaluate_cost(_two_site_problem(demands=(4, 6)), solution)

    # Three more units through the distribution center: unit costs plus overflow.
    assert after.production > before.production
    assert after.capacity > before.capacity
    assert after.total > before.total

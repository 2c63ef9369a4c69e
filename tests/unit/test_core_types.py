import numpy as np
import pytest

from sitemix.core_types import (
    Client,
    CostBreakdown,
    DistanceMatrices,
    Distribution,
    ProblemData,
    Production,
    SelectionResult,
    Site,
    Solution,
    Unassigned,
    UNASSIGNED,
)
from sitemix.exceptions import MalformedInputError


def test_capacity_of(cost_model):
    assert cost_model.capacity_of(False) == 10
    assert cost_model.capacity_of(True) == 15
    assert cost_model.full_capacity == 15


def test_distances_from_coordinates():
    sites = [Site(0, 0.0, 0.0), Site(1, 3.0, 4.0)]
    clients = [Client(0, 1, 0.0, 4.0)]
    distances = DistanceMatrices.from_coordinates(sites, clients)

    np.testing.assert_allclose(distances.site_site, [[0, 5], [5, 0]])
    np.testing.assert_allclose(distances.site_client, [[4], [3]])


def test_distances_without_clients():
    distances = DistanceMatrices.from_coordinates([Site(0, 1.0, 1.0)], [])
    assert distances.site_client.shape == (1, 0)


def test_non_square_site_table():
    with pytest.raises(MalformedInputError, match="must be square"):
        DistanceMatrices(site_site=np.zeros((2, 3)), site_client=np.zeros((2, 1)))


class TestProblemData:
    def test_properties(self, make_problem):
        problem = make_problem([(0, 0), (2, 0)], [(3, 1, 1), (4, 2, 2)])

        assert problem.n_sites == 2
        assert problem.n_clients == 2
        assert problem.total_demand == 7
        assert problem.demands.tolist() == [3, 4]
        assert problem.site_coordinates.shape == (2, 2)
        np.testing.assert_allclose(problem.client_coordinates, [[1, 1], [2, 2]])

    def test_no_sites(self, cost_model):
        with pytest.raises(MalformedInputError, match="no sites"):
            ProblemData(
                sites=[],
                clients=[],
                costs=cost_model,
                distances=DistanceMatrices(np.zeros((0, 0)), np.zeros((0, 0))),
            )

    def test_index_mismatch(self, cost_model):
        sites = [Site(1, 0.0, 0.0)]
        with pytest.raises(MalformedInputError, match="position 0 has index 1"):
            ProblemData(
                sites=sites,
                clients=[],
                costs=cost_model,
                distances=DistanceMatrices.from_coordinates(sites, []),
            )

    def test_negative_demand(self, cost_model):
        sites = [Site(0, 0.0, 0.0)]
        clients = [Client(0, -2, 1.0, 0.0)]
        with pytest.raises(MalformedInputError, match="negative demand"):
            ProblemData(
                sites=sites,
                clients=clients,
                costs=cost_model,
                distances=DistanceMatrices.from_coordinates(sites, clients),
            )

    def test_client_table_shape(self, cost_model):
        sites = [Site(0, 0.0, 0.0)]
        clients = [Client(0, 1, 1.0, 0.0)]
        with pytest.raises(MalformedInputError, match="expected \\(1, 1\\)"):
            ProblemData(
                sites=sites,
                clients=clients,
                costs=cost_model,
                distances=DistanceMatrices(np.zeros((1, 1)), np.zeros((1, 2))),
            )


class TestSolution:
    @pytest.fixture
    def solution(self):
        return Solution(
            roles=[Production(automated=True), Distribution(parent=0), Unassigned(), Production()],
            supplier=[1, 0, UNASSIGNED],
        )

    def test_empty(self):
        solution = Solution.empty(2, 3)
        assert solution.roles == [Unassigned(), Unassigned()]
        assert solution.unassigned_clients() == [0, 1, 2]

    def test_queries(self, solution):
        assert solution.production_centers() == [0, 3]
        assert solution.distribution_centers() == [1]
        assert solution.unopened_sites() == [2]
        assert solution.is_automated(0)
        assert not solution.is_automated(3)
        assert solution.parent_of(1) == 0
        assert solution.parent_of(0) is None
        assert solution.clients_of(1) == [0]
        assert solution.unassigned_clients() == [2]

    def test_copy_is_independent(self, solution):
        clone = solution.copy()
        clone.roles[2] = Production()
        clone.supplier[2] = 2
        assert solution.roles[2] == Unassigned()
        assert solution.supplier[2] == UNASSIGNED

    def test_to_arrays(self, solution):
        arrays = solution.to_arrays()
        assert arrays["P"] == [True, False, False, True]
        assert arrays["D"] == [False, True, False, False]
        assert arrays["a"] == [True, False, False, False]
        assert arrays["p"] == [UNASSIGNED, 0, UNASSIGNED, UNASSIGNED]
        assert arrays["s"] == [1, 0, UNASSIGNED]

    def test_to_dataframe(self, solution):
        df = solution.to_dataframe()

        assert list(df["Kind"]) == ["production", "distribution", "production"] + ["client"] * 3
        assert df.iloc[1]["Parent"] == 1
        assert df.iloc[0]["Automation"] == 1
        assert df.iloc[3]["ID"] == 1 and df.iloc[3]["Parent"] == 2


def test_cost_breakdown_total():
    cost = CostBreakdown(building=1.0, production=2.0, routing=3.0, capacity=4.0)
    assert cost.total == 10.0
    assert cost.to_dict()["total"] == 10.0


def test_infeasible_selection():
    result = SelectionResult.infeasible()
    assert not result.feasible
    assert result.items == ()
    assert result.score == float("inf")

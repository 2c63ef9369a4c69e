"""Shared fixtures: a reference cost model, a problem factory and on-disk assets."""

import os
from pathlib import Path

import pytest

from sitemix.core_types import Client, CostModel, DistanceMatrices, ProblemData, Site
from sitemix.utils.logging import LogLevel, SitemixLogger

ASSETS_DIR = Path(__file__).parent / "_assets"


@pytest.fixture(autouse=True)
def _isolate_logging_env(monkeypatch):
    """Keep log-level and solver environment variables from leaking between tests."""
    for var in ("SITEMIX_LOG_LEVEL", "SITEMIX_EFFECTIVE_LOG_LEVEL", "SITEMIX_SOLVER"):
        monkeypatch.delenv(var, raising=False)
    yield
    os.environ.pop("SITEMIX_EFFECTIVE_LOG_LEVEL", None)
    SitemixLogger.set_level(LogLevel.NORMAL)


@pytest.fixture
def cost_model() -> CostModel:
    return CostModel(
        production_build=100.0,
        automation_build_penalty=40.0,
        distribution_build=30.0,
        production_unit=2.0,
        automation_unit_bonus=0.5,
        distribution_unit=1.0,
        primary_routing=1.0,
        secondary_routing=2.0,
        capacity_overflow=20.0,
        base_capacity=10.0,
        automation_capacity_bonus=5.0,
    )


@pytest.fixture
def make_problem(cost_model):
    """Build a `ProblemData` with Euclidean distances.

    ``clients`` is a list of ``(demand, x, y)`` triples.
    """

    def _make(site_coords, clients, costs=None, name="test"):
        sites = [Site(index=i, x=float(x), y=float(y)) for i, (x, y) in enumerate(site_coords)]
        client_objs = [
            Client(index=k, demand=int(d), x=float(x), y=float(y))
            for k, (d, x, y) in enumerate(clients)
        ]
        return ProblemData(
            sites=sites,
            clients=client_objs,
            costs=costs or cost_model,
            distances=DistanceMatrices.from_coordinates(sites, client_objs),
            name=name,
        )

    return _make


@pytest.fixture
def small_instance_path() -> Path:
    return ASSETS_DIR / "small_instance.json"


@pytest.fixture
def small_solution_path() -> Path:
    return ASSETS_DIR / "small_solution.json"


@pytest.fixture
def test_config_path() -> Path:
    return ASSETS_DIR / "test_config.yaml"

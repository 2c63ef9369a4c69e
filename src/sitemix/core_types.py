"""Core data structures: problem data, site roles and solutions."""

from dataclasses import dataclass, field
from typing import Union

import numpy as np
import pandas as pd

from sitemix.exceptions import MalformedInputError
from sitemix.utils.time_measurement import TimeMeasurement

UNASSIGNED = -1


@dataclass(frozen=True)
class Site:
    """Candidate location for a production or distribution center."""

    index: int
    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Client:
    """Client with an integer demand."""

    index: int
    demand: int
    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class CostModel:
    """Scalar cost and capacity parameters of an instance."""

    production_build: float
    automation_build_penalty: float
    distribution_build: float
    production_unit: float
    automation_unit_bonus: float
    distribution_unit: float
    primary_routing: float
    secondary_routing: float
    capacity_overflow: float
    base_capacity: float
    automation_capacity_bonus: float

    @property
    def full_capacity(self) -> float:
        """Capacity of an automated production center."""
        return self.base_capacity + self.automation_capacity_bonus

    def capacity_of(self, automated: bool) -> float:
        return self.base_capacity + (self.automation_capacity_bonus if automated else 0.0)


@dataclass(frozen=True, eq=False)
class DistanceMatrices:
    """Precomputed site-site and site-client distances (read-only)."""

    site_site: np.ndarray
    site_client: np.ndarray

    def __post_init__(self):
        site_site = np.array(self.site_site, dtype=np.float64)
        site_client = np.array(self.site_client, dtype=np.float64)
        if site_site.ndim != 2 or site_site.shape[0] != site_site.shape[1]:
            raise MalformedInputError(
                f"siteSiteDistances must be square, got shape {site_site.shape}"
            )
        if site_client.ndim != 2:
            raise MalformedInputError(
                f"siteClientDistances must be 2-dimensional, got shape {site_client.shape}"
            )
        site_site.setflags(write=False)
        site_client.setflags(write=False)
        object.__setattr__(self, "site_site", site_site)
        object.__setattr__(self, "site_client", site_client)

    @classmethod
    def from_coordinates(
        cls, sites: list[Site], clients: list[Client]
    ) -> "DistanceMatrices":
        """Build Euclidean distance tables from coordinates."""
        site_xy = np.array([s.as_tuple() for s in sites], dtype=np.float64).reshape(-1, 2)
        client_xy = np.array([c.as_tuple() for c in clients], dtype=np.float64).reshape(-1, 2)
        site_site = np.linalg.norm(site_xy[:, None, :] - site_xy[None, :, :], axis=2)
        site_client = np.linalg.norm(site_xy[:, None, :] - client_xy[None, :, :], axis=2)
        return cls(site_site=site_site, site_client=site_client)


@dataclass(frozen=True, eq=False)
class ProblemData:
    """Immutable, validated problem instance."""

    sites: list[Site]
    clients: list[Client]
    costs: CostModel
    distances: DistanceMatrices
    name: str = "instance"

    def __post_init__(self):
        n_sites, n_clients = len(self.sites), len(self.clients)
        if n_sites == 0:
            raise MalformedInputError("Instance has no sites.")
        for position, site in enumerate(self.sites):
            if site.index != position:
                raise MalformedInputError(
                    f"Site at position {position} has index {site.index}."
                )
        for position, client in enumerate(self.clients):
            if client.index != position:
                raise MalformedInputError(
                    f"Client at position {position} has index {client.index}."
                )
            if client.demand < 0:
                raise MalformedInputError(
                    f"Client {position} has negative demand {client.demand}."
                )
        if self.distances.site_site.shape != (n_sites, n_sites):
            raise MalformedInputError(
                f"siteSiteDistances has shape {self.distances.site_site.shape}, "
                f"expected {(n_sites, n_sites)}."
            )
        if self.distances.site_client.shape != (n_sites, n_clients):
            raise MalformedInputError(
                f"siteClientDistances has shape {self.distances.site_client.shape}, "
                f"expected {(n_sites, n_clients)}."
            )

    @property
    def n_sites(self) -> int:
        return len(self.sites)

    @property
    def n_clients(self) -> int:
        return len(self.clients)

    @property
    def total_demand(self) -> int:
        return sum(client.demand for client in self.clients)

    @property
    def demands(self) -> np.ndarray:
        return np.array([client.demand for client in self.clients], dtype=np.int64)

    @property
    def site_coordinates(self) -> np.ndarray:
        return np.array([s.as_tuple() for s in self.sites], dtype=np.float64).reshape(-1, 2)

    @property
    def client_coordinates(self) -> np.ndarray:
        return np.array(
            [c.as_tuple() for c in self.clients], dtype=np.float64
        ).reshape(-1, 2)


# ---------------------------------------------------------------------------
# Site roles
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Unassigned:
    """Site not opened."""


@dataclass(frozen=True)
class Production:
    """Production center, optionally automated."""

    automated: bool = False


@dataclass(frozen=True)
class Distribution:
    """Distribution center supplied by ``parent`` (unset until clustering)."""

    parent: int | None = None


SiteRole = Union[Unassigned, Production, Distribution]


@dataclass
class Solution:
    """Site roles and client suppliers.

    ``roles[i]`` is the role of site ``i`` and ``supplier[k]`` the site
    serving client ``k`` (``-1`` while unassigned).
    """

    roles: list[SiteRole]
    supplier: list[int]

    @classmethod
    def empty(cls, n_sites: int, n_clients: int) -> "Solution":
        return cls(
            roles=[Unassigned() for _ in range(n_sites)],
            supplier=[UNASSIGNED] * n_clients,
        )

    def copy(self) -> "Solution":
        return Solution(roles=list(self.roles), supplier=list(self.supplier))

    def is_production(self, site: int) -> bool:
        return isinstance(self.roles[site], Production)

    def is_distribution(self, site: int) -> bool:
        return isinstance(self.roles[site], Distribution)

    def is_opened(self, site: int) -> bool:
        return not isinstance(self.roles[site], Unassigned)

    def is_automated(self, site: int) -> bool:
        role = self.roles[site]
        return isinstance(role, Production) and role.automated

    def parent_of(self, site: int) -> int | None:
        role = self.roles[site]
        return role.parent if isinstance(role, Distribution) else None

    def production_centers(self) -> list[int]:
        return [i for i in range(len(self.roles)) if self.is_production(i)]

    def distribution_centers(self) -> list[int]:
        return [i for i in range(len(self.roles)) if self.is_distribution(i)]

    def unopened_sites(self) -> list[int]:
        return [i for i in range(len(self.roles)) if not self.is_opened(i)]

    def unassigned_clients(self) -> list[int]:
        return [k for k, s in enumerate(self.supplier) if s == UNASSIGNED]

    def clients_of(self, site: int) -> list[int]:
        return [k for k, s in enumerate(self.supplier) if s == site]

    def to_arrays(self) -> dict[str, list]:
        """Parallel-array view (``P``, ``D``, ``a``, ``p``, ``s``)."""
        parents = []
        for i in range(len(self.roles)):
            parent = self.parent_of(i)
            parents.append(UNASSIGNED if parent is None else parent)
        return {
            "P": [self.is_production(i) for i in range(len(self.roles))],
            "D": [self.is_distribution(i) for i in range(len(self.roles))],
            "a": [self.is_automated(i) for i in range(len(self.roles))],
            "p": parents,
            "s": list(self.supplier),
        }

    def to_dataframe(self) -> pd.DataFrame:
        """One row per opened site and per client, ids 1-based."""
        rows = []
        for i, role in enumerate(self.roles):
            if isinstance(role, Production):
                rows.append(
                    {"Kind": "production", "ID": i + 1, "Parent": None,
                     "Automation": int(role.automated)}
                )
            elif isinstance(role, Distribution):
                rows.append(
                    {"Kind": "distribution", "ID": i + 1,
                     "Parent": None if role.parent is None else role.parent + 1,
                     "Automation": None}
                )
        for k, site in enumerate(self.supplier):
            rows.append(
                {"Kind": "client", "ID": k + 1,
                 "Parent": None if site == UNASSIGNED else site + 1,
                 "Automation": None}
            )
        return pd.DataFrame(rows, columns=["Kind", "ID", "Parent", "Automation"])


# ---------------------------------------------------------------------------
# Bounded selection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SelectionCandidate:
    """Item offered to a bounded selector."""

    item: int
    weight: int
    score: float


@dataclass(frozen=True)
class SelectionResult:
    """Outcome of a bounded selection."""

    items: tuple[int, ...]
    weight: int
    score: float
    feasible: bool = True

    @classmethod
    def infeasible(cls) -> "SelectionResult":
        return cls(items=(), weight=0, score=float("inf"), feasible=False)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class CostBreakdown:
    """Total cost split by component."""

    building: float = 0.0
    production: float = 0.0
    routing: float = 0.0
    capacity: float = 0.0

    @property
    def total(self) -> float:
        return self.building + self.production + self.routing + self.capacity

    def to_dict(self) -> dict[str, float]:
        return {
            "building": self.building,
            "production": self.production,
            "routing": self.routing,
            "capacity": self.capacity,
            "total": self.total,
        }


@dataclass
class ValidationReport:
    """Pass/fail outcome of solution validation."""

    valid: bool
    issues: list[str] = field(default_factory=list)


@dataclass
class SitemixSolution:
    """Solution of a SiteMix run with its cost and diagnostics."""

    solution: Solution
    cost: CostBreakdown
    validation: ValidationReport
    method: str = "heuristic"
    instance_name: str = "instance"
    runtime_sec: float = 0.0
    time_measurements: list[TimeMeasurement] | None = None

    @property
    def total_cost(self) -> float:
        return self.cost.total

    @property
    def is_valid(self) -> bool:
        return self.validation.valid

"""
data_processing.py

Readers for instance and solution files in the KIRO JSON format.

Instance files carry a ``parameters`` block with the cost model and
capacities, the client and site lists with coordinates, and two distance
tables (``siteSiteDistances`` and ``siteClientDistances``). Solution files
list production centers, distribution centers and clients by 1-based ``id``
with their ``automation`` flag or ``parent`` site.
"""

import json
from pathlib import Path
from typing import Any

from sitemix.core_types import (
    Client,
    CostModel,
    Distribution,
    DistanceMatrices,
    ProblemData,
    Production,
    Site,
    Solution,
    Unassigned,
)
from sitemix.exceptions import MalformedInputError
from sitemix.utils.logging import SitemixLogger

logger = SitemixLogger.get_logger(__name__)


def _read_json(path: str | Path) -> Any:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        with path.open() as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        raise MalformedInputError(f"Invalid JSON in {path}: {exc}") from exc


def _require(mapping: Any, key: str, where: str) -> Any:
    if not isinstance(mapping, dict) or key not in mapping:
        raise MalformedInputError(f"Missing field '{key}' in {where}")
    return mapping[key]


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedInputError(f"Expected a number for {where}, got {value!r}")
    return float(value)


def _coordinates(entry: dict, where: str) -> tuple[float, float]:
    coords = _require(entry, "coordinates", where)
    if not isinstance(coords, (list, tuple)) or len(coords) != 2:
        raise MalformedInputError(f"{where} coordinates must be a pair, got {coords!r}")
    return _number(coords[0], f"{where} x"), _number(coords[1], f"{where} y")


def _check_ids(entries: list, kind: str) -> None:
    """Optional ``id`` fields must match the 1-based position."""
    for position, entry in enumerate(entries):
        if isinstance(entry, dict) and "id" in entry and entry["id"] != position + 1:
            raise MalformedInputError(
                f"{kind} at position {position + 1} has id {entry['id']}"
            )


def parse_cost_model(parameters: dict) -> CostModel:
    """Build a :class:`CostModel` from the ``parameters`` block."""
    building = _require(parameters, "buildingCosts", "parameters")
    production = _require(parameters, "productionCosts", "parameters")
    routing = _require(parameters, "routingCosts", "parameters")
    capacities = _require(parameters, "capacities", "parameters")

    def get(block: dict, key: str, name: str) -> float:
        return _number(_require(block, key, name), f"{name}.{key}")

    return CostModel(
        production_build=get(building, "productionCenter", "buildingCosts"),
        automation_build_penalty=get(building, "automationPenalty", "buildingCosts"),
        distribution_build=get(building, "distributionCenter", "buildingCosts"),
        production_unit=get(production, "productionCenter", "productionCosts"),
        automation_unit_bonus=get(production, "automationBonus", "productionCosts"),
        distribution_unit=get(production, "distributionCenter", "productionCosts"),
        primary_routing=get(routing, "primary", "routingCosts"),
        secondary_routing=get(routing, "secondary", "routingCosts"),
        capacity_overflow=_number(
            _require(parameters, "capacityCost", "parameters"), "capacityCost"
        ),
        base_capacity=get(capacities, "productionCenter", "capacities"),
        automation_capacity_bonus=get(capacities, "automationBonus", "capacities"),
    )


def parse_instance(raw: dict, name: str = "instance") -> ProblemData:
    """Build :class:`ProblemData` from an already decoded instance document."""
    if not isinstance(raw, dict):
        raise MalformedInputError("Instance document must be a JSON object")

    costs = parse_cost_model(_require(raw, "parameters", "instance"))

    raw_clients = _require(raw, "clients", "instance")
    raw_sites = _require(raw, "sites", "instance")
    if not isinstance(raw_clients, list) or not isinstance(raw_sites, list):
        raise MalformedInputError("'clients' and 'sites' must be lists")
    _check_ids(raw_clients, "Client")
    _check_ids(raw_sites, "Site")

    clients = []
    for k, entry in enumerate(raw_clients):
        where = f"client {k + 1}"
        demand = _require(entry, "demand", where)
        if isinstance(demand, bool) or not isinstance(demand, (int, float)):
            raise MalformedInputError(f"Demand of {where} must be a number")
        if int(demand) != demand:
            raise MalformedInputError(f"Demand of {where} must be an integer, got {demand}")
        x, y = _coordinates(entry, where)
        clients.append(Client(index=k, demand=int(demand), x=x, y=y))

    sites = []
    for i, entry in enumerate(raw_sites):
        x, y = _coordinates(entry, f"site {i + 1}")
        sites.append(Site(index=i, x=x, y=y))

    try:
        distances = DistanceMatrices(
            site_site=_require(raw, "siteSiteDistances", "instance"),
            site_client=_require(raw, "siteClientDistances", "instance"),
        )
    except MalformedInputError:
        raise
    except (TypeError, ValueError) as exc:
        raise MalformedInputError(f"Invalid distance tables: {exc}") from exc

    return ProblemData(
        sites=sites, clients=clients, costs=costs, distances=distances, name=name
    )


def load_instance(path: str | Path) -> ProblemData:
    """Load a problem instance from a KIRO JSON file.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        MalformedInputError: If fields are missing or tables are misaligned.
    """
    path = Path(path)
    problem = parse_instance(_read_json(path), name=path.stem)
    logger.info(
        f"Loaded instance '{problem.name}': {problem.n_sites} sites, "
        f"{problem.n_clients} clients, total demand {problem.total_demand}"
    )
    return problem


def parse_solution(raw: dict, problem: ProblemData) -> Solution:
    """Build a :class:`Solution` from a decoded solution document.

    Structural violations that can still be represented (a client without a
    parent, a distribution center pointing at a non-production site) are left
    for :func:`sitemix.evaluation.validate_solution` to report. A site listed
    both as production and distribution center cannot be represented and is
    rejected here.
    """
    if not isinstance(raw, dict):
        raise MalformedInputError("Solution document must be a JSON object")

    solution = Solution.empty(problem.n_sites, problem.n_clients)

    def site_id(value: Any, where: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedInputError(f"{where} must be an integer id, got {value!r}")
        if not 1 <= value <= problem.n_sites:
            raise MalformedInputError(f"{where} {value} is not a site id")
        return value - 1

    def parent_id(value: Any, where: str) -> int | None:
        # Unset parents are written either as null or as 0.
        if value is None or (value == 0 and not isinstance(value, bool)):
            return None
        return site_id(value, where)

    for entry in raw.get("productionCenters", []):
        site = site_id(_require(entry, "id", "productionCenters"), "Production center id")
        automation = entry.get("automation", 0)
        solution.roles[site] = Production(automated=bool(automation))

    for entry in raw.get("distributionCenters", []):
        site = site_id(_require(entry, "id", "distributionCenters"), "Distribution center id")
        if not isinstance(solution.roles[site], Unassigned):
            raise MalformedInputError(
                f"Site {site + 1} is listed as both production and distribution center"
            )
        parent = entry.get("parent")
        solution.roles[site] = Distribution(
            parent=parent_id(parent, "Distribution center parent")
        )

    for entry in raw.get("clients", []):
        client = _require(entry, "id", "clients")
        if isinstance(client, bool) or not isinstance(client, int):
            raise MalformedInputError(f"Client id must be an integer, got {client!r}")
        if not 1 <= client <= problem.n_clients:
            raise MalformedInputError(f"Client id {client} is out of range")
        parent = entry.get("parent")
        supplier = parent_id(parent, "Client parent")
        if supplier is not None:
            solution.supplier[client - 1] = supplier

    return solution


def load_solution(path: str | Path, problem: ProblemData) -> Solution:
    """Load a solution file for ``problem``."""
    solution = parse_solution(_read_json(path), problem)
    logger.info(
        f"Loaded solution from {path}: {len(solution.production_centers())} production, "
        f"{len(solution.distribution_centers())} distribution centers"
    )
    return solution

import pytest
import yaml
from pathlib import Path

from sitemix.config import DEFAULT_CONFIG_PATH, load_sitemix_params
from sitemix.config.params import AlgorithmParams, IOParams, RuntimeParams, SitemixParams


def _write_yaml(tmp_path: Path, data: dict) -> Path:
    f = tmp_path / "params.yaml"
    with open(f, "w") as fp:
        yaml.dump(data, fp)
    return f


def test_default_config_matches_dataclass_defaults():
    params = load_sitemix_params()

    assert DEFAULT_CONFIG_PATH.exists()
    assert params.algorithm == AlgorithmParams()
    assert params.io.format == "json"
    assert params.runtime.solver == "auto"
    assert params.runtime.time_limit == 60


def test_load_custom_config(test_config_path):
    params = load_sitemix_params(test_config_path)

    assert params.algorithm.selector == "dp"
    assert params.algorithm.candidate_limit == 50
    assert params.algorithm.floor_schedule == (0.5, 1.0)
    assert params.algorithm.promote_fraction == 0.3
    assert params.io.format == "csv"
    assert params.io.results_dir.is_absolute()
    assert params.runtime.solver == "cbc"
    assert params.runtime.time_limit == 30


def test_scalar_floor_schedule_is_accepted(tmp_path):
    path = _write_yaml(tmp_path, {"algorithm": {"floor_schedule": 0.9}})
    assert load_sitemix_params(path).algorithm.floor_schedule == (0.9,)


def test_unknown_top_level_key(tmp_path):
    path = _write_yaml(tmp_path, {"vehicles": {}})
    with pytest.raises(ValueError, match="Unknown top-level configuration keys"):
        load_sitemix_params(path)


def test_unknown_algorithm_key(tmp_path):
    path = _write_yaml(tmp_path, {"algorithm": {"tabu_tenure": 7}})
    with pytest.raises(ValueError, match="Unknown keys in 'algorithm' section: tabu_tenure"):
        load_sitemix_params(path)


def test_invalid_yaml_syntax(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("algorithm: [unclosed\n")
    with pytest.raises(ValueError, match="Error parsing YAML"):
        load_sitemix_params(path)


def test_non_mapping_yaml(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError, match="must be a mapping"):
        load_sitemix_params(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_sitemix_params(tmp_path / "nope.yaml")


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    params = load_sitemix_params(path)
    assert isinstance(params, SitemixParams)
    assert params.algorithm == AlgorithmParams()


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"method": "annealing"}, "method"),
        ({"candidate_limit": 0}, "candidate_limit"),
        ({"floor_fraction": 1.5}, "floor_fraction"),
        ({"floor_fraction": 0.0}, "floor_fraction"),
        ({"floor_schedule": ()}, "floor_schedule cannot be empty"),
        ({"floor_schedule": (0.5, 2.0)}, "floor_schedule values"),
        ({"floor_schedule": (0.0, 1.0)}, "floor_schedule values"),
        ({"relaxation_factor": 1.0}, "relaxation_factor"),
        ({"max_relaxations": -1}, "max_relaxations"),
        ({"promote_fraction": -0.1}, "promote_fraction"),
    ],
)
def test_algorithm_params_validation(kwargs, message):
    with pytest.raises(ValueError, match=message):
        AlgorithmParams(**kwargs)


def test_floor_multiplier_repeats_last_value():
    params = AlgorithmParams(floor_schedule=(0.5, 0.75))
    assert [params.floor_multiplier(r) for r in range(4)] == [0.5, 0.75, 0.75, 0.75]


def test_io_params_validation(tmp_path):
    with pytest.raises(ValueError, match="format"):
        IOParams(format="xlsx")
    assert IOParams(results_dir=tmp_path).results_dir == tmp_path


def test_runtime_params_validation():
    with pytest.raises(ValueError, match="solver"):
        RuntimeParams(solver="glpk")


def test_default_early_floors_sit_below_promotion_threshold():
    params = AlgorithmParams()
    first_floor = params.floor_fraction * params.floor_multiplier(0)
    assert first_floor < params.promote_fraction
    assert params.floor_fraction * params.floor_multiplier(10) == params.floor_fraction

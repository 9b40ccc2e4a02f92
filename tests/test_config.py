from pathlib import Path

import numpy as np
import pytest

from config_paths import (
    CONFIG_ROOT_KEY,
    get_config_path,
    load_config,
    results_directory,
    sanitize_run_directory,
)
from dice_errors import InvalidConfiguration
from dice_model import ScenarioConfig, SubmodelParameters


def test_from_config_defaults():
    config = ScenarioConfig.from_config({"number_of_times": 50})
    assert config.number_of_times == 50
    assert np.all(config.abatement == 0.03)
    assert config.discount_rate == 0.03
    assert config.external_forcing == 0.5
    assert config.value_accumulation == "period"
    assert config.initial_carbon.atmosphere == 851.0
    assert config.submodels == SubmodelParameters()


def test_from_config_reads_sections():
    cfg = {
        "number_of_times": 20,
        "discount_rate": 0.01,
        "value_accumulation": "Cumulative",
        "initial_state": {"temperature": [1.0, 0.1], "carbon_concentration": [900, 470, 1750]},
        "abatement": {"initial": 0.1, "max": 0.8, "increase": 20.0},
        "economy": {"growth_rate": 0.0},
        "submodels": {"damage": {"d2": 0.005}, "emission": {"external_initial": 0.0}},
        "shift": {"emission": 0.5, "time_indices": [2, 3]},
    }
    config = ScenarioConfig.from_config(cfg)
    assert config.value_accumulation == "cumulative"
    assert config.initial_temperature.atmosphere == 1.0
    assert config.initial_carbon.lower_ocean == 1750.0
    assert config.abatement[0] == pytest.approx(0.1)
    assert config.abatement[-1] == 0.8
    assert config.economy.growth_rate == 0.0
    assert config.submodels.damage.d2 == 0.005
    assert config.submodels.damage.d0 == 0.0
    assert config.submodels.emission.external_initial == 0.0
    assert config.emission_shift == 0.5
    assert config.shift_time_indices == (2, 3)


def test_from_config_time_of_max_ramp():
    config = ScenarioConfig.from_config(
        {"number_of_times": 60, "abatement": {"initial": 0.0, "time_of_max": 20}}
    )
    assert config.abatement[10] == pytest.approx(0.5)
    assert np.all(config.abatement[20:] == 1.0)


def test_explicit_abatement_overrides_generated_ramp():
    config = ScenarioConfig.from_config({"number_of_times": 3}, abatement=[0.0, 0.2, 0.4])
    np.testing.assert_allclose(config.abatement, [0.0, 0.2, 0.4])


@pytest.mark.parametrize(
    "cfg",
    [
        {"submodels": {"damage": {"d3": 1.0}}},
        {"submodels": {"ocean": {}}},
        {"submodels": {"abatement_cost": {"theta2": "steep"}}},
        {"submodels": {"abatement_cost": {"theta2": 0.0}}},
        {"submodels": {"temperature": {"t2xco2": 0.0}}},
        {"economy": {"tfp_initial": -1.0}},
        {"initial_state": {"temperature": [1.0, 0.1, 0.0]}},
        {"value_accumulation": "discounted"},
        {"number_of_times": "many"},
        {"discount_rate": "x"},
        {"external_forcing": None},
        {"economy": {"growth_rate": "fast"}},
        {"abatement": {"max": "full"}},
        {"shift": {"time_indices": ["first"]}},
        {"submodels": {"emission_intensity": {"rate_decay": 1.2}}},
    ],
)
def test_from_config_rejects_invalid_sections(cfg):
    with pytest.raises(InvalidConfiguration):
        ScenarioConfig.from_config({"number_of_times": 10, **cfg})


def test_config_path_env_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    target = tmp_path / "custom.yaml"
    monkeypatch.setenv("DICE_CONFIG_PATH", str(target))
    assert get_config_path(Path("ignored.yaml")) == target.resolve()

    monkeypatch.delenv("DICE_CONFIG_PATH")
    assert get_config_path(tmp_path / "default.yaml") == (tmp_path / "default.yaml").resolve()


def test_load_config_records_root(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("dice_model:\n  number_of_times: 12\n")
    config = load_config(path)
    assert config["dice_model"]["number_of_times"] == 12
    assert config[CONFIG_ROOT_KEY] == str(tmp_path.resolve())


def test_load_config_missing_file_is_empty(tmp_path: Path):
    assert load_config(tmp_path / "absent.yaml") == {}


def test_load_config_rejects_non_mapping(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        load_config(path)


def test_results_directory_resolution(tmp_path: Path):
    config = {
        CONFIG_ROOT_KEY: str(tmp_path),
        "results": {"directory": "output", "run_directory": "../runs/./a"},
    }
    assert results_directory(config) == (tmp_path / "output" / "runs" / "a").resolve()
    assert results_directory({CONFIG_ROOT_KEY: str(tmp_path)}) == (tmp_path / "results").resolve()


def test_sanitize_run_directory():
    assert sanitize_run_directory("  ") is None
    assert sanitize_run_directory("..") is None
    with pytest.raises(ValueError):
        sanitize_run_directory("/abs/path")

import math
import threading

import numpy as np
import pytest

from dice_errors import InvalidConfiguration
from dice_model import (
    ScenarioConfig,
    SweepResult,
    abatement_increase_grid,
    parameter_grid,
    run_abatement_sweep,
    scenario_for_increase,
    simulate,
)
from dice_model.sweep import evaluate_increase


def _base(n: int = 30) -> ScenarioConfig:
    return ScenarioConfig(abatement=np.full(n, 0.03), number_of_times=n)


class CountingToken:
    """Reports cancellation once ``limit`` checks have passed."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.checks = 0

    def is_set(self) -> bool:
        self.checks += 1
        return self.checks > self.limit


def test_default_grid_covers_zero_to_fifty():
    grid = abatement_increase_grid()
    assert grid.shape == (1001,)
    assert grid[0] == 0.0
    assert grid[-1] == 50.0
    assert grid[1] == pytest.approx(0.05)
    assert np.all(np.diff(grid) > 0)


def test_grid_from_config_section():
    grid = abatement_increase_grid({"start": 1.0, "stop": 2.0, "step": 0.25})
    np.testing.assert_allclose(grid, [1.0, 1.25, 1.5, 1.75, 2.0])


def test_parameter_grid_includes_stop_despite_rounding():
    grid = parameter_grid(0.005, 0.05, 0.001)
    assert len(grid) == 46
    assert grid[-1] == pytest.approx(0.05)


@pytest.mark.parametrize(
    "start, stop, step",
    [(0.0, 1.0, 0.0), (0.0, 1.0, -0.1), (1.0, 0.0, 0.1), (0.0, math.inf, 0.1)],
)
def test_parameter_grid_rejects_invalid_bounds(start, stop, step):
    with pytest.raises(InvalidConfiguration):
        parameter_grid(start, stop, step)


def test_scenario_for_increase_builds_capped_ramp():
    base = _base(10)
    config = scenario_for_increase(base, 5.0)
    np.testing.assert_allclose(config.abatement[[0, 1, 2]], [0.03, 0.53, 1.0])
    assert config.abatement.max() == base.abatement_max
    assert config.number_of_times == base.number_of_times


def test_point_value_is_scenario_objective():
    base = _base()
    point = evaluate_increase(base, 2.0)
    expected = simulate(scenario_for_increase(base, 2.0)).objective
    assert point.ok
    assert point.value == expected


def test_sweep_keeps_grid_order():
    grid = [3.0, 0.0, 1.5, 0.5]
    result = run_abatement_sweep(_base(), grid)
    assert isinstance(result, SweepResult)
    assert not result.cancelled
    np.testing.assert_array_equal(result.abatement_increase, grid)
    for point in result.points:
        assert point.value == evaluate_increase(_base(), point.abatement_increase).value


def test_parallel_sweep_matches_serial_sweep():
    grid = parameter_grid(0.0, 2.0, 0.25)
    serial = run_abatement_sweep(_base(), grid, workers=1)
    parallel = run_abatement_sweep(_base(), grid, workers=2, chunksize=2)
    np.testing.assert_array_equal(parallel.abatement_increase, serial.abatement_increase)
    np.testing.assert_array_equal(parallel.values, serial.values)


def test_sweep_honours_initial_abatement_override():
    result = run_abatement_sweep(_base(), [1.0], abatement_initial=0.1)
    expected = simulate(scenario_for_increase(_base(), 1.0, abatement_initial=0.1)).objective
    assert result.values[0] == expected


def test_cancelled_before_start_returns_no_points():
    event = threading.Event()
    event.set()
    result = run_abatement_sweep(_base(), [0.0, 1.0, 2.0], cancel_event=event)
    assert result.cancelled
    assert result.points == []


def test_cancellation_keeps_completed_prefix():
    grid = [0.0, 0.5, 1.0, 1.5, 2.0, 2.5]
    result = run_abatement_sweep(_base(), grid, cancel_event=CountingToken(3))
    assert result.cancelled
    np.testing.assert_array_equal(result.abatement_increase, grid[:3])


def test_failed_point_does_not_abort_sweep():
    result = run_abatement_sweep(_base(), [-1.0, 0.0, 1.0])
    first, *rest = result.points
    assert not first.ok
    assert math.isnan(first.value)
    assert "Abatement values" in first.error
    assert all(point.ok for point in rest)
    assert result.failures == [first]

    frame = result.to_frame()
    assert list(frame.columns) == ["abatement_increase", "value", "error"]
    assert frame["error"].isna().tolist() == [False, True, True]


def test_point_failing_during_stepping_does_not_abort_sweep():
    # Abatement above one turns emissions negative and empties the atmosphere.
    base = ScenarioConfig(abatement=np.full(30, 0.03), number_of_times=30, abatement_max=50.0)
    result = run_abatement_sweep(base, [0.0, 1500.0, 1.0])

    assert not result.cancelled
    assert [point.ok for point in result.points] == [True, False, True]
    failed = result.points[1]
    assert math.isnan(failed.value)
    assert "submodel 'forcing'" in failed.error
    assert np.isfinite(result.values[[0, 2]]).all()
    assert result.values[0] == evaluate_increase(base, 0.0).value

import math

import numpy as np
import pytest

from climate_module import (
    CarbonConcentration,
    CarbonCycleParameters,
    EvolutionOfCarbonConcentration,
    EvolutionOfTemperature,
    ForcingFunction,
    Temperature,
    TemperatureParameters,
    carbon_transition_matrix,
    temperature_transition_matrix,
)
from dice_errors import InvalidConfiguration, NumericDomainError


def test_state_arrays_keep_component_order():
    temperature = Temperature.from_array([0.85, 0.0068])
    assert temperature.atmosphere == 0.85
    assert temperature.lower_ocean == 0.0068
    np.testing.assert_array_equal(temperature.as_array(), [0.85, 0.0068])

    carbon = CarbonConcentration(851.0, 460.0, 1740.0)
    np.testing.assert_array_equal(carbon.as_array(), [851.0, 460.0, 1740.0])
    with pytest.raises(ValueError):
        CarbonConcentration.from_array([1.0, 2.0])


def test_temperature_matrix_matches_closed_form():
    params = TemperatureParameters()
    matrix = temperature_transition_matrix(params)
    xi1 = 0.1005
    expected = np.array(
        [
            [1 - xi1 * (3.6813 / 3.1 + 0.088), xi1 * 0.088],
            [0.025, 1 - 0.025],
        ]
    )
    np.testing.assert_allclose(matrix, expected, rtol=0, atol=1e-15)


def test_carbon_matrix_matches_closed_form_and_conserves_mass():
    matrix = carbon_transition_matrix(CarbonCycleParameters())
    zeta12 = 588 / 360 * 0.12
    zeta23 = 0.007 * 360 / 1720
    expected = np.array(
        [
            [0.88, zeta12, 0.0],
            [0.12, 1 - zeta12 - 0.007, zeta23],
            [0.0, 0.007, 1 - zeta23],
        ]
    )
    np.testing.assert_allclose(matrix, expected, rtol=0, atol=1e-15)
    np.testing.assert_allclose(matrix.sum(axis=0), np.ones(3), atol=1e-12)


def test_transition_matrices_are_pure_functions_of_constants():
    first = carbon_transition_matrix(CarbonCycleParameters())
    second = carbon_transition_matrix(CarbonCycleParameters())
    assert first.tobytes() == second.tobytes()

    first = temperature_transition_matrix(TemperatureParameters())
    second = temperature_transition_matrix(TemperatureParameters())
    assert first.tobytes() == second.tobytes()


def test_transition_matrices_are_read_only():
    evolution = EvolutionOfCarbonConcentration()
    with pytest.raises(ValueError):
        evolution.matrix[0, 0] = 1.0


def test_temperature_step_adds_forcing_to_atmosphere_only():
    evolution = EvolutionOfTemperature()
    previous = Temperature(1.0, 0.5)
    without_forcing = evolution(previous, 0.0)
    with_forcing = evolution(previous, 2.0)
    assert with_forcing.atmosphere - without_forcing.atmosphere == pytest.approx(0.1005 * 2.0)
    assert with_forcing.lower_ocean == without_forcing.lower_ocean


def test_emissions_enter_the_atmosphere_box_only():
    evolution = EvolutionOfCarbonConcentration()
    previous = CarbonConcentration(851.0, 460.0, 1740.0)
    base = evolution(previous, 0.0).as_array()
    injected = evolution(previous, 10.0).as_array()
    np.testing.assert_allclose(injected - base, [10.0, 0.0, 0.0], atol=1e-12)


def test_zero_emission_carbon_never_gains_mass():
    evolution = EvolutionOfCarbonConcentration()
    state = np.array([851.0, 460.0, 1740.0])
    for _ in range(200):
        following = evolution.step(state, 0.0)
        assert np.abs(following).sum() <= np.abs(state).sum() + 1e-9
        state = following


def test_carbon_mass_grows_by_injected_emission():
    evolution = EvolutionOfCarbonConcentration()
    state = np.array([851.0, 460.0, 1740.0])
    following = evolution.step(state, 9.5)
    assert np.abs(following).sum() <= np.abs(state).sum() + 9.5 + 1e-9


def test_non_finite_inputs_fail_fast():
    with pytest.raises(NumericDomainError):
        EvolutionOfTemperature().step(np.array([np.nan, 0.0]), 1.0)
    with pytest.raises(NumericDomainError):
        EvolutionOfCarbonConcentration().step(np.array([851.0, 460.0, 1740.0]), math.inf)


def test_invalid_physical_constants_are_rejected():
    with pytest.raises(InvalidConfiguration):
        TemperatureParameters(t2xco2=0.0)
    with pytest.raises(InvalidConfiguration):
        CarbonCycleParameters(mueq=0.0)
    with pytest.raises(InvalidConfiguration):
        CarbonCycleParameters(b12=math.nan)


def test_forcing_matches_log_expression():
    forcing = ForcingFunction()
    carbon = CarbonConcentration(851.0, 460.0, 1740.0)
    expected = 3.6813 * math.log(851.0 / 580.0) / math.log(2.0) + 0.5
    assert forcing(carbon, 0.5) == pytest.approx(expected, abs=1e-12)
    assert forcing(CarbonConcentration(580.0, 0.0, 0.0), 0.0) == 0.0
    assert forcing(CarbonConcentration(1160.0, 0.0, 0.0), 0.0) == pytest.approx(3.6813)


@pytest.mark.parametrize("atmosphere", [0.0, -5.0, math.nan])
def test_forcing_rejects_non_positive_carbon(atmosphere):
    with pytest.raises(NumericDomainError) as excinfo:
        ForcingFunction()(CarbonConcentration(atmosphere, 460.0, 1740.0), 0.5)
    assert excinfo.value.submodel == "forcing"

"""Year-by-year coupled climate-economy simulation of a single scenario.

Each step ``i = 0 .. N-2`` runs in a fixed order:

1. emission (scaled by the relative abatement ``(1-μ_i)/(1-μ_0)``)
2. carbon concentration at ``i+1``
3. forcing from the carbon state at ``i``
4. temperature at ``i+1``
5. damage from the temperature at ``i``
6. abatement cost
7. welfare ``gdp·(1-damage)·(1-cost)``
8. discounted value
9. output at ``i+1`` (exogenous growth)

The state histories are kept as flat arrays indexed by time, ``(N, 2)`` for
temperature and ``(N, 3)`` for carbon concentration.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from climate_module import (
    CarbonConcentration,
    EvolutionOfCarbonConcentration,
    EvolutionOfTemperature,
    Temperature,
)
from dice_errors import NumericDomainError, ensure_finite

from .config import ScenarioConfig, ValueAccumulation

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class Trajectory:
    """Result of one scenario run; every array has ``number_of_times`` rows."""

    time: np.ndarray
    gdp: np.ndarray
    emission: np.ndarray
    abatement: np.ndarray
    abatement_cost: np.ndarray
    damage: np.ndarray
    welfare: np.ndarray
    value: np.ndarray
    forcing: np.ndarray
    temperature: np.ndarray
    carbon_concentration: np.ndarray
    value_accumulation: ValueAccumulation = "period"

    @property
    def number_of_times(self) -> int:
        return int(self.time.shape[0])

    @property
    def objective(self) -> float:
        """Scenario objective.

        ``period``: the discounted welfare of the last computed step, ``value[N-2]``.
        ``cumulative``: the discounted sum over all steps, ``value[N-1]``.
        """
        if self.value_accumulation == "cumulative":
            return float(self.value[-1])
        return float(self.value[-2])

    def temperature_at(self, index: int) -> Temperature:
        return Temperature.from_array(self.temperature[index])

    def carbon_concentration_at(self, index: int) -> CarbonConcentration:
        return CarbonConcentration.from_array(self.carbon_concentration[index])

    @property
    def temperature_states(self) -> list[Temperature]:
        return [Temperature.from_array(row) for row in self.temperature]

    @property
    def carbon_concentration_states(self) -> list[CarbonConcentration]:
        return [CarbonConcentration.from_array(row) for row in self.carbon_concentration]

    def to_frame(self) -> pd.DataFrame:
        """Return the trajectory as a tidy :class:`pandas.DataFrame`."""
        return pd.DataFrame(
            {
                "time": self.time,
                "gdp": self.gdp,
                "emission": self.emission,
                "abatement": self.abatement,
                "abatement_cost": self.abatement_cost,
                "damage": self.damage,
                "welfare": self.welfare,
                "value": self.value,
                "forcing": self.forcing,
                "temperature_atmosphere": self.temperature[:, 0],
                "temperature_lower_ocean": self.temperature[:, 1],
                "carbon_atmosphere": self.carbon_concentration[:, 0],
                "carbon_upper_ocean": self.carbon_concentration[:, 1],
                "carbon_lower_ocean": self.carbon_concentration[:, 2],
            }
        )


def _check_state(vector: np.ndarray, submodel: str) -> None:
    if not np.all(np.isfinite(vector)):
        raise NumericDomainError(f"Non-finite state {vector.tolist()}", submodel=submodel)


def simulate(config: ScenarioConfig) -> Trajectory:
    """Run one scenario and return its fully populated :class:`Trajectory`.

    Raises :class:`dice_errors.NumericDomainError` carrying the failing time index
    and submodel as soon as a step leaves the numeric domain; no partial
    trajectory is returned.
    """
    n = config.number_of_times
    models = config.submodels
    evolve_temperature = EvolutionOfTemperature(models.temperature)
    evolve_carbon = EvolutionOfCarbonConcentration(models.carbon_cycle)
    forcing_function = models.forcing
    emission_function = models.emission
    damage_function = models.damage
    cost_function = models.abatement_cost

    abatement = config.abatement.copy()
    gdp = np.zeros(n, dtype=float)
    emission = np.zeros(n, dtype=float)
    abatement_cost = np.zeros(n, dtype=float)
    damage = np.zeros(n, dtype=float)
    welfare = np.zeros(n, dtype=float)
    value = np.zeros(n, dtype=float)
    forcing = np.zeros(n, dtype=float)
    temperature = np.zeros((n, 2), dtype=float)
    carbon = np.zeros((n, 3), dtype=float)

    gdp[0] = config.economy.initial_output()
    temperature[0] = config.initial_temperature.as_array()
    carbon[0] = config.initial_carbon.as_array()

    growth = config.economy.growth_rate
    rate = config.discount_rate
    cumulative = config.value_accumulation == "cumulative"
    shifted = set(config.shift_time_indices)
    abatement_reference = 1.0 - abatement[0]

    i = 0
    submodel = "emission"
    try:
        for i in range(n - 1):
            submodel = "emission"
            relative_abatement = (1.0 - abatement[i]) / abatement_reference
            emission_i = emission_function(float(i), gdp[i]) * relative_abatement
            if i in shifted:
                emission_i += config.emission_shift
            emission[i] = ensure_finite(emission_i, submodel=submodel)

            submodel = "carbon_concentration"
            carbon[i + 1] = evolve_carbon.step(carbon[i], emission[i])
            _check_state(carbon[i + 1], submodel)

            submodel = "forcing"
            forcing[i] = ensure_finite(
                forcing_function.from_atmosphere(carbon[i, 0], config.external_forcing),
                submodel=submodel,
            )

            submodel = "temperature"
            temperature[i + 1] = evolve_temperature.step(temperature[i], forcing[i])
            _check_state(temperature[i + 1], submodel)

            submodel = "damage"
            damage[i] = ensure_finite(damage_function(temperature[i, 0]), submodel=submodel)

            submodel = "abatement_cost"
            abatement_cost[i] = ensure_finite(
                cost_function(float(i), abatement[i]), submodel=submodel
            )

            submodel = "welfare"
            welfare_i = gdp[i] * (1.0 - damage[i]) * (1.0 - abatement_cost[i])
            if i in shifted:
                welfare_i += config.consumption_shift
            welfare[i] = ensure_finite(welfare_i, submodel=submodel)

            submodel = "value"
            discounted = welfare[i] * math.exp(-rate * i)
            if cumulative:
                value[i + 1] = ensure_finite(value[i] + discounted, submodel=submodel)
            else:
                value[i] = ensure_finite(discounted, submodel=submodel)

            submodel = "gdp"
            gdp[i + 1] = ensure_finite(gdp[i] * (1.0 + growth), submodel=submodel)
    except NumericDomainError as exc:
        raise exc.at(time_index=i, submodel=submodel) from exc
    except (OverflowError, ZeroDivisionError) as exc:
        raise NumericDomainError(str(exc), submodel=submodel, time_index=i) from exc

    trajectory = Trajectory(
        time=np.arange(n, dtype=float),
        gdp=gdp,
        emission=emission,
        abatement=abatement,
        abatement_cost=abatement_cost,
        damage=damage,
        welfare=welfare,
        value=value,
        forcing=forcing,
        temperature=temperature,
        carbon_concentration=carbon,
        value_accumulation=config.value_accumulation,
    )
    LOGGER.debug("Simulated %d steps; objective %.6g", n - 1, trajectory.objective)
    return trajectory


__all__ = ["Trajectory", "simulate"]

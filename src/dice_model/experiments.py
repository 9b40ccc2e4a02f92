"""Scenario studies built on the simulation driver."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

import numpy as np
import pandas as pd

from dice_errors import NumericDomainError
from economic_module import abatement_ramp_to_max

from .config import ScenarioConfig
from .simulation import simulate
from .sweep import parameter_grid

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMES_OF_MAX: tuple[float, ...] = (30.0, 50.0, 100.0)
DEFAULT_SCC_DISCOUNT_RATES = {"start": 0.005, "stop": 0.05, "step": 0.001}
DEFAULT_SHIFT = 0.01


def run_abatement_time_scenarios(
    base: ScenarioConfig,
    times_of_max: Iterable[float] = DEFAULT_TIMES_OF_MAX,
    *,
    abatement_initial: float | None = None,
) -> pd.DataFrame:
    """Simulate ramps that reach ``base.abatement_max`` after each ``time_of_max`` years.

    Returns one row per scenario with the final atmospheric temperature, the
    last computed emission and the scenario objective.
    """
    initial = float(base.abatement[0]) if abatement_initial is None else float(abatement_initial)
    rows: list[dict[str, float]] = []
    for time_of_max in times_of_max:
        abatement = abatement_ramp_to_max(
            base.number_of_times,
            initial=initial,
            maximum=base.abatement_max,
            time_of_max=float(time_of_max),
        )
        trajectory = simulate(replace(base, abatement=abatement))
        LOGGER.info("Abatement reaches its maximum at time %s", time_of_max)
        rows.append(
            {
                "time_of_max": float(time_of_max),
                "temperature_final": float(trajectory.temperature[-1, 0]),
                "emission_last": float(trajectory.emission[-2]),
                "value": trajectory.objective,
            }
        )
    columns = ["time_of_max", "temperature_final", "emission_last", "value"]
    return pd.DataFrame(rows, columns=columns)


def social_cost_of_carbon(
    base: ScenarioConfig,
    *,
    shift: float = DEFAULT_SHIFT,
    time_index: int = 0,
) -> float:
    """Marginal rate of substitution between emission and consumption at ``time_index``.

    Three runs with cumulative discounted value: unperturbed ``V``, consumption
    shifted ``V_C`` and emission shifted ``V_E``. The result
    ``-(V_E - V) / (V_C - V) · 1000`` is in USD per tonne of carbon.
    """
    scenario = replace(
        base,
        value_accumulation="cumulative",
        emission_shift=0.0,
        consumption_shift=0.0,
        shift_time_indices=(time_index,),
    )
    value = simulate(scenario).objective
    value_consumption = simulate(replace(scenario, consumption_shift=shift)).objective
    value_emission = simulate(replace(scenario, emission_shift=shift)).objective

    denominator = value_consumption - value
    if denominator == 0.0:
        raise NumericDomainError(
            "Consumption shift leaves the objective unchanged", submodel="social_cost_of_carbon"
        )
    return -(value_emission - value) / denominator * 1000.0


def run_scc_sweep(
    base: ScenarioConfig,
    discount_rates: Iterable[float] | None = None,
    *,
    shift: float = DEFAULT_SHIFT,
) -> pd.DataFrame:
    """Tabulate the social cost of carbon over a grid of discount rates."""
    if discount_rates is None:
        rates = parameter_grid(**DEFAULT_SCC_DISCOUNT_RATES)
    else:
        rates = np.asarray(list(discount_rates), dtype=float)
    records = []
    for rate in rates:
        scc = social_cost_of_carbon(replace(base, discount_rate=float(rate)), shift=shift)
        LOGGER.debug("Discount rate %.4f: SCC %.4f", rate, scc)
        records.append({"discount_rate": float(rate), "scc": scc})
    return pd.DataFrame(records, columns=["discount_rate", "scc"])


__all__ = [
    "DEFAULT_SCC_DISCOUNT_RATES",
    "DEFAULT_TIMES_OF_MAX",
    "run_abatement_time_scenarios",
    "run_scc_sweep",
    "social_cost_of_carbon",
]

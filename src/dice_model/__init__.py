"""Coupled climate-economy simulation driver, abatement sweeps and scenario studies."""

from dice_errors import DICEModelError, InvalidConfiguration, NumericDomainError

from .config import ScenarioConfig, SubmodelParameters, ValueAccumulation
from .experiments import run_abatement_time_scenarios, run_scc_sweep, social_cost_of_carbon
from .simulation import Trajectory, simulate
from .sweep import (
    DEFAULT_SWEEP_CONFIG,
    SweepPoint,
    SweepResult,
    abatement_increase_grid,
    parameter_grid,
    run_abatement_sweep,
    scenario_for_increase,
)

__all__ = [
    "DICEModelError",
    "InvalidConfiguration",
    "NumericDomainError",
    "ScenarioConfig",
    "SubmodelParameters",
    "ValueAccumulation",
    "Trajectory",
    "simulate",
    "DEFAULT_SWEEP_CONFIG",
    "SweepPoint",
    "SweepResult",
    "abatement_increase_grid",
    "parameter_grid",
    "run_abatement_sweep",
    "scenario_for_increase",
    "run_abatement_time_scenarios",
    "run_scc_sweep",
    "social_cost_of_carbon",
]

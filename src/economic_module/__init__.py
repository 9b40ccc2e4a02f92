"""Economic submodels: emissions, damage, abatement cost and the output path."""

from .abatement import AbatementCostFunction, abatement_ramp_to_max, linear_abatement
from .damage import DamageFromTemperature
from .emissions import EmissionFunction, EmissionIntensityFunction
from .growth import EconomicParameters

__all__ = [
    "AbatementCostFunction",
    "DamageFromTemperature",
    "EconomicParameters",
    "EmissionFunction",
    "EmissionIntensityFunction",
    "abatement_ramp_to_max",
    "linear_abatement",
]

"""Geophysical state, transition operators and radiative forcing."""

from .forcing import ForcingFunction
from .state import CarbonConcentration, Temperature
from .transitions import (
    CarbonCycleParameters,
    EvolutionOfCarbonConcentration,
    EvolutionOfTemperature,
    TemperatureParameters,
    carbon_transition_matrix,
    temperature_transition_matrix,
)

__all__ = [
    "Temperature",
    "CarbonConcentration",
    "TemperatureParameters",
    "CarbonCycleParameters",
    "temperature_transition_matrix",
    "carbon_transition_matrix",
    "EvolutionOfTemperature",
    "EvolutionOfCarbonConcentration",
    "ForcingFunction",
]

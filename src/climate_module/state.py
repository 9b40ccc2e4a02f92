"""Geophysical state vectors advanced by the transition operators."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np


def _as_vector(values: Sequence[float] | np.ndarray, size: int, name: str) -> np.ndarray:
    array = np.asarray(values, dtype=float).reshape(-1)
    if array.shape[0] != size:
        raise ValueError(f"{name} expects {size} components; received {array.shape[0]}.")
    return array


@dataclass(frozen=True, slots=True)
class Temperature:
    """Temperature above baseline (°C) of the atmosphere and the lower ocean."""

    atmosphere: float
    lower_ocean: float

    def as_array(self) -> np.ndarray:
        return np.array([self.atmosphere, self.lower_ocean], dtype=float)

    @classmethod
    def from_array(cls, values: Sequence[float] | np.ndarray) -> "Temperature":
        atmosphere, lower_ocean = _as_vector(values, 2, "Temperature")
        return cls(float(atmosphere), float(lower_ocean))


@dataclass(frozen=True, slots=True)
class CarbonConcentration:
    """Carbon mass (GtC) in the atmosphere, the upper ocean and the lower ocean."""

    atmosphere: float
    upper_ocean: float
    lower_ocean: float

    def as_array(self) -> np.ndarray:
        return np.array([self.atmosphere, self.upper_ocean, self.lower_ocean], dtype=float)

    @classmethod
    def from_array(cls, values: Sequence[float] | np.ndarray) -> "CarbonConcentration":
        atmosphere, upper_ocean, lower_ocean = _as_vector(values, 3, "CarbonConcentration")
        return cls(float(atmosphere), float(upper_ocean), float(lower_ocean))


__all__ = ["Temperature", "CarbonConcentration"]

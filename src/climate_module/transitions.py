"""Linear one-year transition operators for temperature and carbon concentration.

Both operators follow the same pattern: a transition matrix is derived once from
named physical constants, then applied to the previous state every step before
an external driver is added.

Temperature
===========
``T(i+1) = Φ T(i) + (ξ1 · forcing, 0)`` with::

    φ11 = 1 - ξ1·(η/t2xco2 + c3),  φ12 = ξ1·c3
    φ21 = c4,                       φ22 = 1 - c4

Carbon concentration
====================
``M(i+1) = ζ M(i) + (emission, 0, 0)``. Emissions enter the atmosphere box only.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import numpy as np

from dice_errors import InvalidConfiguration, NumericDomainError

from .state import CarbonConcentration, Temperature


def _read_only(matrix: np.ndarray) -> np.ndarray:
    matrix.setflags(write=False)
    return matrix


def _check_constants(values: Mapping[str, float], owner: str) -> None:
    bad = [name for name, value in values.items() if not np.isfinite(value)]
    if bad:
        raise InvalidConfiguration(f"{owner} constants must be finite: {', '.join(bad)}")


def _check_input(vector: np.ndarray, driver: float, submodel: str) -> None:
    if not np.all(np.isfinite(vector)):
        raise NumericDomainError(f"Non-finite state {vector.tolist()}", submodel=submodel)
    if not np.isfinite(driver):
        raise NumericDomainError(f"Non-finite driver {driver}", submodel=submodel)


@dataclass(frozen=True, slots=True)
class TemperatureParameters:
    """Constants of the two-layer temperature model."""

    xi1: float = 0.1005
    forcing_per_doubling: float = 3.6813  # eta (GAMS fco22x)
    c3: float = 0.088
    c4: float = 0.025
    t2xco2: float = 3.1

    def __post_init__(self) -> None:
        _check_constants(
            {
                "xi1": self.xi1,
                "forcing_per_doubling": self.forcing_per_doubling,
                "c3": self.c3,
                "c4": self.c4,
                "t2xco2": self.t2xco2,
            },
            "Temperature",
        )
        if self.t2xco2 == 0:
            raise InvalidConfiguration("t2xco2 must be non-zero.")


@dataclass(frozen=True, slots=True)
class CarbonCycleParameters:
    """Constants of the three-box carbon cycle."""

    b12: float = 0.12
    b23: float = 0.007
    mateq: float = 588.0
    mueq: float = 360.0
    mleq: float = 1720.0

    def __post_init__(self) -> None:
        _check_constants(
            {
                "b12": self.b12,
                "b23": self.b23,
                "mateq": self.mateq,
                "mueq": self.mueq,
                "mleq": self.mleq,
            },
            "Carbon cycle",
        )
        if self.mueq <= 0 or self.mleq <= 0:
            raise InvalidConfiguration("Equilibrium carbon masses mueq and mleq must be positive.")


def temperature_transition_matrix(params: TemperatureParameters) -> np.ndarray:
    """Return the read-only 2×2 matrix Φ built from ``params``."""
    xi1 = params.xi1
    phi11 = 1.0 - xi1 * (params.forcing_per_doubling / params.t2xco2 + params.c3)
    phi12 = xi1 * params.c3
    phi21 = params.c4
    phi22 = 1.0 - params.c4
    return _read_only(np.array([[phi11, phi12], [phi21, phi22]], dtype=float))


def carbon_transition_matrix(params: CarbonCycleParameters) -> np.ndarray:
    """Return the read-only 3×3 matrix ζ built from ``params``."""
    zeta11 = 1.0 - params.b12
    zeta21 = params.b12
    zeta12 = (params.mateq / params.mueq) * zeta21
    zeta22 = 1.0 - zeta12 - params.b23
    zeta32 = params.b23
    zeta23 = zeta32 * (params.mueq / params.mleq)
    zeta33 = 1.0 - zeta23
    return _read_only(
        np.array(
            [
                [zeta11, zeta12, 0.0],
                [zeta21, zeta22, zeta23],
                [0.0, zeta32, zeta33],
            ],
            dtype=float,
        )
    )


@dataclass(frozen=True, slots=True)
class EvolutionOfTemperature:
    """One-year temperature step driven by radiative forcing."""

    params: TemperatureParameters = field(default_factory=TemperatureParameters)
    matrix: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "matrix", temperature_transition_matrix(self.params))

    def step(self, temperature: np.ndarray, forcing: float) -> np.ndarray:
        """Advance a ``(atmosphere, lower_ocean)`` vector by one year."""
        vector = np.asarray(temperature, dtype=float)
        _check_input(vector, forcing, "temperature")
        following = self.matrix @ vector
        following[0] += self.params.xi1 * forcing
        return following

    def __call__(self, temperature: Temperature, forcing: float) -> Temperature:
        return Temperature.from_array(self.step(temperature.as_array(), forcing))


@dataclass(frozen=True, slots=True)
class EvolutionOfCarbonConcentration:
    """One-year carbon-cycle step with emissions injected into the atmosphere."""

    params: CarbonCycleParameters = field(default_factory=CarbonCycleParameters)
    matrix: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "matrix", carbon_transition_matrix(self.params))

    def step(self, carbon: np.ndarray, emission: float) -> np.ndarray:
        """Advance an ``(atmosphere, upper_ocean, lower_ocean)`` vector by one year."""
        vector = np.asarray(carbon, dtype=float)
        _check_input(vector, emission, "carbon_concentration")
        following = self.matrix @ vector
        following[0] += emission
        return following

    def __call__(self, carbon: CarbonConcentration, emission: float) -> CarbonConcentration:
        return CarbonConcentration.from_array(self.step(carbon.as_array(), emission))


__all__ = [
    "TemperatureParameters",
    "CarbonCycleParameters",
    "temperature_transition_matrix",
    "carbon_transition_matrix",
    "EvolutionOfTemperature",
    "EvolutionOfCarbonConcentration",
]

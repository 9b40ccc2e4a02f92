"""Emission intensity and industrial plus external emissions."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from dice_errors import InvalidConfiguration

# Initial emissions (GtCO2/yr) and initial world output (trillion USD) used to
# derive the default intensity. The 1/(1-μ0) factor is applied by the driver.
INITIAL_EMISSIONS = 35.85
INITIAL_OUTPUT = 105.5


def _check_decay(name: str, value: float) -> None:
    if not (math.isfinite(value) and 0.0 <= value <= 1.0):
        raise InvalidConfiguration(f"{name} must lie in [0, 1]; got {value}.")


@dataclass(frozen=True, slots=True)
class EmissionIntensityFunction:
    """Emission intensity σ(t) of economic output."""

    intensity_initial: float = INITIAL_EMISSIONS / INITIAL_OUTPUT
    rate_initial: float = 0.0152
    rate_decay: float = 0.001

    def __post_init__(self) -> None:
        _check_decay("rate_decay", self.rate_decay)

    def rate(self, time: float) -> float:
        return self.rate_initial * (1.0 - self.rate_decay) ** time

    def __call__(self, time: float) -> float:
        return self.intensity_initial * math.exp(-self.rate(time) * time)


@dataclass(frozen=True, slots=True)
class EmissionFunction:
    """Emissions from output at a given time plus decaying external emissions."""

    intensity: EmissionIntensityFunction = field(default_factory=EmissionIntensityFunction)
    external_initial: float = 2.6
    # Decay per five-year period.
    external_decay: float = 0.115

    def __post_init__(self) -> None:
        _check_decay("external_decay", self.external_decay)

    def external(self, time: float) -> float:
        return self.external_initial * (1.0 - self.external_decay) ** (time / 5.0)

    def __call__(self, time: float, economic_output: float) -> float:
        return self.intensity(time) * economic_output + self.external(time)


__all__ = ["EmissionIntensityFunction", "EmissionFunction", "INITIAL_EMISSIONS", "INITIAL_OUTPUT"]

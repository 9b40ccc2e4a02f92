"""Radiative forcing from atmospheric carbon."""

from __future__ import annotations

import math
from dataclasses import dataclass

from dice_errors import InvalidConfiguration, NumericDomainError

from .state import CarbonConcentration

_LOG2 = math.log(2.0)


@dataclass(frozen=True, slots=True)
class ForcingFunction:
    """Map atmospheric carbon and an external forcing term to total forcing.

    ``forcing = forcing_per_doubling · log2(M_at / carbon_concentration_base) + external``
    """

    carbon_concentration_base: float = 580.0
    forcing_per_doubling: float = 3.6813

    def __post_init__(self) -> None:
        if not self.carbon_concentration_base > 0:
            raise InvalidConfiguration("carbon_concentration_base must be positive.")
        if not math.isfinite(self.forcing_per_doubling):
            raise InvalidConfiguration("forcing_per_doubling must be finite.")

    def from_atmosphere(self, carbon_atmosphere: float, external_forcing: float) -> float:
        if not carbon_atmosphere > 0:
            raise NumericDomainError(
                f"Atmospheric carbon must be positive to compute forcing; got {carbon_atmosphere}",
                submodel="forcing",
            )
        ratio = carbon_atmosphere / self.carbon_concentration_base
        return self.forcing_per_doubling * math.log(ratio) / _LOG2 + external_forcing

    def __call__(self, carbon: CarbonConcentration, external_forcing: float) -> float:
        return self.from_atmosphere(carbon.atmosphere, external_forcing)


__all__ = ["ForcingFunction"]

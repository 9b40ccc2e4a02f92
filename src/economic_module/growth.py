"""Exogenous output path.

Output starts from a Cobb-Douglas level and grows geometrically; climate damage
does not feed back into growth.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass

from dice_errors import InvalidConfiguration


@dataclass(frozen=True, slots=True)
class EconomicParameters:
    """Initial production factors and the constant output growth rate."""

    tfp_initial: float = 5.115  # A0
    capital_initial: float = 223.0  # K0, trillion USD
    population_initial_million: float = 7403.0  # L0
    capital_share: float = 0.3  # gamma
    growth_rate: float = 0.015

    def __post_init__(self) -> None:
        for name in ("tfp_initial", "capital_initial", "population_initial_million"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0):
                raise InvalidConfiguration(f"{name} must be positive; got {value}.")
        if not (math.isfinite(self.capital_share) and 0.0 <= self.capital_share <= 1.0):
            raise InvalidConfiguration(
                f"capital_share must lie in [0, 1]; got {self.capital_share}."
            )
        if not (math.isfinite(self.growth_rate) and self.growth_rate > -1.0):
            raise InvalidConfiguration(
                f"growth_rate must be greater than -100%; got {self.growth_rate}."
            )

    @classmethod
    def from_config(cls, cfg: Mapping[str, object] | None) -> "EconomicParameters":
        cfg = cfg or {}
        defaults = cls()
        values = {}
        for name in (
            "tfp_initial",
            "capital_initial",
            "population_initial_million",
            "capital_share",
            "growth_rate",
        ):
            raw = cfg.get(name, getattr(defaults, name))
            try:
                values[name] = float(raw)
            except (TypeError, ValueError) as exc:
                raise InvalidConfiguration(f"economy.{name} must be numeric; got {raw!r}.") from exc
        return cls(**values)

    def initial_output(self) -> float:
        """Gross output ``A0 · K0^γ · (L0/1000)^(1-γ)`` in trillion USD."""
        labour_billions = self.population_initial_million / 1000.0
        return (
            self.tfp_initial
            * self.capital_initial**self.capital_share
            * labour_billions ** (1.0 - self.capital_share)
        )


__all__ = ["EconomicParameters"]

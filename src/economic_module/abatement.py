"""Abatement cost and abatement trajectories."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from dice_errors import InvalidConfiguration


@dataclass(frozen=True, slots=True)
class AbatementCostFunction:
    """Cost fraction of output for abatement level μ at time t.

    ``cost(t, μ) = p_back · (1 - g_back)^t · μ^θ2 / θ2``. The emission intensity
    factor of the DICE cost formulation is not part of this function.
    """

    backstop_price_initial: float = 550.0 / 1000.0
    backstop_rate: float = 0.025
    theta2: float = 2.6  # GAMS expcost2

    def __post_init__(self) -> None:
        if not (math.isfinite(self.theta2) and self.theta2 > 0):
            raise InvalidConfiguration(f"theta2 must be positive; got {self.theta2}.")
        if not (math.isfinite(self.backstop_rate) and 0.0 <= self.backstop_rate <= 1.0):
            raise InvalidConfiguration(
                f"backstop_rate must lie in [0, 1]; got {self.backstop_rate}."
            )

    def backstop_price(self, time: float) -> float:
        return self.backstop_price_initial * (1.0 - self.backstop_rate) ** time

    def __call__(self, time: float, abatement: float) -> float:
        return self.backstop_price(time) * abatement**self.theta2 / self.theta2


def linear_abatement(
    number_of_times: int,
    *,
    initial: float,
    increase: float,
    maximum: float,
) -> np.ndarray:
    """Return ``min(initial + increase·i/N, maximum)`` for ``i = 0..N-1``."""
    if number_of_times < 1:
        raise InvalidConfiguration("number_of_times must be positive.")
    index = np.arange(number_of_times, dtype=float)
    return np.minimum(initial + increase * index / number_of_times, maximum)


def abatement_ramp_to_max(
    number_of_times: int,
    *,
    initial: float,
    maximum: float,
    time_of_max: float,
    time_step: float = 1.0,
) -> np.ndarray:
    """Return a ramp from ``initial`` that reaches ``maximum`` at ``time_of_max`` years."""
    if number_of_times < 1:
        raise InvalidConfiguration("number_of_times must be positive.")
    if not time_of_max > 0:
        raise InvalidConfiguration(f"time_of_max must be positive; got {time_of_max}.")
    times = np.arange(number_of_times, dtype=float) * time_step
    return np.minimum(initial + (maximum - initial) / time_of_max * times, maximum)


__all__ = ["AbatementCostFunction", "linear_abatement", "abatement_ramp_to_max"]

"""Damage fraction of output as a function of atmospheric temperature."""

from __future__ import annotations

from dataclasses import dataclass

from dice_errors import NumericDomainError


@dataclass(frozen=True, slots=True)
class DamageFromTemperature:
    """Rational transform of a quadratic damage polynomial.

    ``Ω(T) = D(T) / (1 + D(T))`` with ``D(T) = d0 + d1·T + d2·T²``. With the
    default ``d0 = 0`` the damage of a zero anomaly is exactly zero. The result
    lies in ``[0, 1)`` wherever ``D(T) >= 0``; negative polynomial values are
    not clipped.
    """

    d0: float = 0.0
    d1: float = 0.0
    d2: float = 0.00236

    def __call__(self, temperature: float) -> float:
        damage = self.d0 + self.d1 * temperature + self.d2 * temperature * temperature
        if damage == -1.0:
            raise NumericDomainError(
                f"Damage polynomial equals -1 at temperature {temperature}", submodel="damage"
            )
        return damage / (1.0 + damage)


__all__ = ["DamageFromTemperature"]

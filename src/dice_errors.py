"""Exception types shared by the climate, economic and simulation packages."""

from __future__ import annotations

import math

import numpy as np


class DICEModelError(Exception):
    """Base class for errors raised while configuring or running the model."""


class InvalidConfiguration(DICEModelError, ValueError):
    """Raised before any time step runs when a scenario cannot be simulated."""


class NumericDomainError(DICEModelError, ArithmeticError):
    """Raised when a submodel leaves its numeric domain or produces a non-finite value.

    ``time_index`` and ``submodel`` identify where the run failed; the
    simulation driver fills them in when the error escapes a time step.
    """

    def __init__(
        self,
        message: str,
        *,
        submodel: str | None = None,
        time_index: int | None = None,
    ) -> None:
        self.message = message
        self.submodel = submodel
        self.time_index = time_index
        super().__init__(self._format())

    def _format(self) -> str:
        location = []
        if self.submodel is not None:
            location.append(f"submodel '{self.submodel}'")
        if self.time_index is not None:
            location.append(f"time index {self.time_index}")
        if not location:
            return self.message
        return f"{self.message} ({', '.join(location)})"

    def at(self, *, time_index: int, submodel: str) -> "NumericDomainError":
        """Return a copy located at ``time_index`` keeping any submodel already set."""
        return NumericDomainError(
            self.message,
            submodel=self.submodel or submodel,
            time_index=time_index,
        )


def ensure_finite(value: float, *, submodel: str, name: str | None = None) -> float:
    """Return ``value`` as float; NaN, inf or complex values raise :class:`NumericDomainError`."""
    label = name or submodel
    if isinstance(value, complex) or np.iscomplexobj(value):
        raise NumericDomainError(f"Complex {label}: {value}", submodel=submodel)
    result = float(value)
    if not math.isfinite(result):
        raise NumericDomainError(f"Non-finite {label}: {result}", submodel=submodel)
    return result


__all__ = [
    "DICEModelError",
    "InvalidConfiguration",
    "NumericDomainError",
    "ensure_finite",
]

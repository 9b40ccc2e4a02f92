"""Scenario configuration and its eager validation."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, fields
from typing import Literal, get_args

import numpy as np

from climate_module import (
    CarbonConcentration,
    CarbonCycleParameters,
    ForcingFunction,
    Temperature,
    TemperatureParameters,
)
from dice_errors import InvalidConfiguration
from economic_module import (
    AbatementCostFunction,
    DamageFromTemperature,
    EconomicParameters,
    EmissionFunction,
    EmissionIntensityFunction,
    abatement_ramp_to_max,
    linear_abatement,
)

ValueAccumulation = Literal["period", "cumulative"]

DEFAULT_NUMBER_OF_TIMES = 500
DEFAULT_DISCOUNT_RATE = 0.03
DEFAULT_EXTERNAL_FORCING = 0.5
DEFAULT_ABATEMENT_INITIAL = 0.03
DEFAULT_ABATEMENT_MAX = 1.0
DEFAULT_INITIAL_TEMPERATURE = Temperature(0.85, 0.0068)
DEFAULT_INITIAL_CARBON = CarbonConcentration(851.0, 460.0, 1740.0)


def _number(cfg: Mapping[str, object], key: str, default: float, section: str, cast=float):
    """Coerce ``cfg[key]`` (or ``default``) with ``cast`` or raise InvalidConfiguration."""
    value = cfg.get(key, default)
    try:
        return cast(value)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"{section}.{key} must be numeric; got {value!r}.") from exc


def _build(cls, cfg: Mapping[str, object] | None, section: str):
    """Instantiate a constants dataclass from a mapping of float overrides."""
    cfg = dict(cfg or {})
    known = {item.name for item in fields(cls)}
    unknown = set(cfg) - known
    if unknown:
        raise InvalidConfiguration(
            f"Unknown keys in submodels.{section}: {sorted(unknown)}. Expected {sorted(known)}."
        )
    try:
        values = {key: float(value) for key, value in cfg.items()}
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"submodels.{section} values must be numeric.") from exc
    return cls(**values)


@dataclass(frozen=True, slots=True)
class SubmodelParameters:
    """Constants of every submodel; each field defaults to the reference calibration."""

    temperature: TemperatureParameters = field(default_factory=TemperatureParameters)
    carbon_cycle: CarbonCycleParameters = field(default_factory=CarbonCycleParameters)
    forcing: ForcingFunction = field(default_factory=ForcingFunction)
    emission: EmissionFunction = field(default_factory=EmissionFunction)
    damage: DamageFromTemperature = field(default_factory=DamageFromTemperature)
    abatement_cost: AbatementCostFunction = field(default_factory=AbatementCostFunction)

    @classmethod
    def from_config(cls, cfg: Mapping[str, object] | None) -> "SubmodelParameters":
        """Build from the ``submodels`` section.

        Recognised sub-sections are ``temperature``, ``carbon_cycle``, ``forcing``,
        ``emission_intensity``, ``emission`` (external emission terms), ``damage``
        and ``abatement_cost``.
        """
        cfg = cfg or {}
        sections = {
            "temperature",
            "carbon_cycle",
            "forcing",
            "emission_intensity",
            "emission",
            "damage",
            "abatement_cost",
        }
        unknown = set(cfg) - sections
        if unknown:
            raise InvalidConfiguration(f"Unknown submodel sections: {sorted(unknown)}")

        intensity = _build(
            EmissionIntensityFunction, cfg.get("emission_intensity"), "emission_intensity"
        )
        external = _build(_ExternalEmissionTerms, cfg.get("emission"), "emission")
        return cls(
            temperature=_build(TemperatureParameters, cfg.get("temperature"), "temperature"),
            carbon_cycle=_build(CarbonCycleParameters, cfg.get("carbon_cycle"), "carbon_cycle"),
            forcing=_build(ForcingFunction, cfg.get("forcing"), "forcing"),
            emission=external.to_function(intensity),
            damage=_build(DamageFromTemperature, cfg.get("damage"), "damage"),
            abatement_cost=_build(
                AbatementCostFunction, cfg.get("abatement_cost"), "abatement_cost"
            ),
        )


@dataclass(frozen=True, slots=True)
class _ExternalEmissionTerms:
    external_initial: float = 2.6
    external_decay: float = 0.115

    def to_function(self, intensity: EmissionIntensityFunction) -> EmissionFunction:
        return EmissionFunction(
            intensity=intensity,
            external_initial=self.external_initial,
            external_decay=self.external_decay,
        )


def _finite_vector(values: np.ndarray, name: str) -> None:
    if not np.all(np.isfinite(values)):
        raise InvalidConfiguration(f"{name} must be finite; got {values.tolist()}.")


@dataclass(frozen=True, slots=True, eq=False)
class ScenarioConfig:
    """Everything needed to simulate one scenario.

    ``abatement`` has one entry per time index and is stored as a read-only
    array. ``emission_shift`` and ``consumption_shift`` add a perturbation at the
    indices listed in ``shift_time_indices``; both default to zero.
    """

    abatement: np.ndarray
    number_of_times: int = DEFAULT_NUMBER_OF_TIMES
    abatement_max: float = DEFAULT_ABATEMENT_MAX
    initial_temperature: Temperature = DEFAULT_INITIAL_TEMPERATURE
    initial_carbon: CarbonConcentration = DEFAULT_INITIAL_CARBON
    economy: EconomicParameters = field(default_factory=EconomicParameters)
    discount_rate: float = DEFAULT_DISCOUNT_RATE
    external_forcing: float = DEFAULT_EXTERNAL_FORCING
    submodels: SubmodelParameters = field(default_factory=SubmodelParameters)
    value_accumulation: ValueAccumulation = "period"
    emission_shift: float = 0.0
    consumption_shift: float = 0.0
    shift_time_indices: tuple[int, ...] = (0,)

    def __post_init__(self) -> None:
        number_of_times = int(self.number_of_times)
        if number_of_times < 2:
            raise InvalidConfiguration(
                f"number_of_times must be at least 2; got {self.number_of_times}."
            )
        object.__setattr__(self, "number_of_times", number_of_times)

        abatement = np.array(self.abatement, dtype=float).reshape(-1)
        if abatement.shape[0] != number_of_times:
            raise InvalidConfiguration(
                f"Abatement trajectory must have {number_of_times} entries; "
                f"received {abatement.shape[0]}."
            )
        if not (math.isfinite(self.abatement_max) and self.abatement_max > 0):
            raise InvalidConfiguration(
                f"abatement_max must be positive; got {self.abatement_max}."
            )
        _finite_vector(abatement, "Abatement trajectory")
        outside = np.flatnonzero((abatement < 0.0) | (abatement > self.abatement_max))
        if outside.size:
            first = int(outside[0])
            raise InvalidConfiguration(
                f"Abatement values must lie in [0, {self.abatement_max}]; "
                f"index {first} has {abatement[first]}."
            )
        if abatement[0] >= 1.0:
            raise InvalidConfiguration(
                "Initial abatement must be below 1 because emissions are scaled by "
                f"(1 - abatement[i]) / (1 - abatement[0]); got {abatement[0]}."
            )
        abatement.setflags(write=False)
        object.__setattr__(self, "abatement", abatement)

        _finite_vector(self.initial_temperature.as_array(), "Initial temperature")
        _finite_vector(self.initial_carbon.as_array(), "Initial carbon concentration")
        for name in ("discount_rate", "external_forcing", "emission_shift", "consumption_shift"):
            value = float(getattr(self, name))
            if not math.isfinite(value):
                raise InvalidConfiguration(f"{name} must be finite; got {value}.")
            object.__setattr__(self, name, value)

        if self.value_accumulation not in get_args(ValueAccumulation):
            raise InvalidConfiguration(
                f"value_accumulation must be one of {get_args(ValueAccumulation)}; "
                f"got '{self.value_accumulation}'."
            )
        try:
            indices = tuple(int(idx) for idx in self.shift_time_indices)
        except (TypeError, ValueError) as exc:
            raise InvalidConfiguration(
                f"shift_time_indices must be integers; got {self.shift_time_indices!r}."
            ) from exc
        if any(idx < 0 or idx >= number_of_times for idx in indices):
            raise InvalidConfiguration(
                f"shift_time_indices must lie in [0, {number_of_times - 1}]; got {indices}."
            )
        object.__setattr__(self, "shift_time_indices", indices)

    @classmethod
    def from_config(
        cls,
        cfg: Mapping[str, object],
        *,
        abatement: Sequence[float] | np.ndarray | None = None,
    ) -> "ScenarioConfig":
        """Build a scenario from the ``dice_model`` section of ``config.yaml``.

        Without an explicit ``abatement`` array the trajectory is generated from
        ``abatement.time_of_max`` when present, otherwise as a linear ramp using
        ``abatement.increase`` (default 0).
        """
        state_cfg = cfg.get("initial_state", {}) or {}
        abatement_cfg = cfg.get("abatement", {}) or {}

        number_of_times = _number(
            cfg, "number_of_times", DEFAULT_NUMBER_OF_TIMES, "dice_model", int
        )
        abatement_initial = _number(
            abatement_cfg, "initial", DEFAULT_ABATEMENT_INITIAL, "abatement"
        )
        abatement_max = _number(abatement_cfg, "max", DEFAULT_ABATEMENT_MAX, "abatement")
        if abatement is None:
            if abatement_cfg.get("time_of_max") is not None:
                abatement = abatement_ramp_to_max(
                    number_of_times,
                    initial=abatement_initial,
                    maximum=abatement_max,
                    time_of_max=_number(abatement_cfg, "time_of_max", 0.0, "abatement"),
                )
            else:
                abatement = linear_abatement(
                    number_of_times,
                    initial=abatement_initial,
                    increase=_number(abatement_cfg, "increase", 0.0, "abatement"),
                    maximum=abatement_max,
                )

        try:
            initial_temperature = Temperature.from_array(
                state_cfg.get("temperature", DEFAULT_INITIAL_TEMPERATURE.as_array())
            )
            initial_carbon = CarbonConcentration.from_array(
                state_cfg.get("carbon_concentration", DEFAULT_INITIAL_CARBON.as_array())
            )
        except ValueError as exc:
            raise InvalidConfiguration(str(exc)) from exc

        shift_cfg = cfg.get("shift", {}) or {}
        return cls(
            abatement=np.asarray(abatement, dtype=float),
            number_of_times=number_of_times,
            abatement_max=abatement_max,
            initial_temperature=initial_temperature,
            initial_carbon=initial_carbon,
            economy=EconomicParameters.from_config(cfg.get("economy")),
            discount_rate=_number(cfg, "discount_rate", DEFAULT_DISCOUNT_RATE, "dice_model"),
            external_forcing=_number(
                cfg, "external_forcing", DEFAULT_EXTERNAL_FORCING, "dice_model"
            ),
            submodels=SubmodelParameters.from_config(cfg.get("submodels")),
            value_accumulation=str(cfg.get("value_accumulation", "period")).strip().lower(),
            emission_shift=_number(shift_cfg, "emission", 0.0, "shift"),
            consumption_shift=_number(shift_cfg, "consumption", 0.0, "shift"),
            shift_time_indices=tuple(shift_cfg.get("time_indices", (0,))),
        )


__all__ = [
    "ScenarioConfig",
    "SubmodelParameters",
    "ValueAccumulation",
    "DEFAULT_NUMBER_OF_TIMES",
    "DEFAULT_DISCOUNT_RATE",
    "DEFAULT_EXTERNAL_FORCING",
    "DEFAULT_ABATEMENT_INITIAL",
    "DEFAULT_ABATEMENT_MAX",
    "DEFAULT_INITIAL_TEMPERATURE",
    "DEFAULT_INITIAL_CARBON",
]

"""Abatement-increase sweep over independent scenarios.

Every grid point builds its own linear abatement ramp
``min(μ0 + increase·i/N, μ_max)``, runs a fresh simulation and records the
scenario objective. Scenarios share no state, so the grid can be evaluated
by a process pool; results are always returned in grid order.
"""

from __future__ import annotations

import logging
import math
import multiprocessing
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from functools import partial
from typing import Protocol

import numpy as np
import pandas as pd

from dice_errors import DICEModelError, InvalidConfiguration
from economic_module import linear_abatement

from .config import ScenarioConfig
from .simulation import simulate

LOGGER = logging.getLogger(__name__)

DEFAULT_SWEEP_CONFIG: Mapping[str, float] = {
    "start": 0.0,
    "stop": 50.0,
    "step": 0.05,
}


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


def parameter_grid(start: float, stop: float, step: float) -> np.ndarray:
    """Return ``start, start+step, ...`` up to and including ``stop`` (within rounding)."""
    values = {"start": start, "stop": stop, "step": step}
    bad = [name for name, value in values.items() if not math.isfinite(value)]
    if bad:
        raise InvalidConfiguration(f"Grid bounds must be finite: {', '.join(bad)}")
    if step <= 0:
        raise InvalidConfiguration(f"Grid step must be positive; got {step}.")
    if stop < start:
        raise InvalidConfiguration(f"Grid stop {stop} lies before start {start}.")
    count = int(math.floor((stop - start) / step + 1e-9)) + 1
    return np.round(start + step * np.arange(count, dtype=float), 12)


def abatement_increase_grid(cfg: Mapping[str, float] | None = None) -> np.ndarray:
    """Build the sweep grid from a ``sweep`` config section (defaults 0 to 50 step 0.05)."""
    merged = dict(DEFAULT_SWEEP_CONFIG)
    merged.update({key: cfg[key] for key in ("start", "stop", "step") if cfg and key in cfg})
    try:
        start, stop, step = (float(merged[key]) for key in ("start", "stop", "step"))
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"sweep bounds must be numeric; got {merged}.") from exc
    return parameter_grid(start, stop, step)


@dataclass(frozen=True, slots=True)
class SweepPoint:
    """Objective of one grid point; ``error`` is set when the scenario failed."""

    abatement_increase: float
    value: float
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class SweepResult:
    """Sweep outcome in grid order; ``cancelled`` marks an interrupted scan."""

    points: list[SweepPoint] = field(default_factory=list)
    cancelled: bool = False

    @property
    def abatement_increase(self) -> np.ndarray:
        return np.array([point.abatement_increase for point in self.points], dtype=float)

    @property
    def values(self) -> np.ndarray:
        return np.array([point.value for point in self.points], dtype=float)

    @property
    def failures(self) -> list[SweepPoint]:
        return [point for point in self.points if not point.ok]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "abatement_increase": self.abatement_increase,
                "value": self.values,
                "error": [point.error for point in self.points],
            }
        )


def scenario_for_increase(
    base: ScenarioConfig,
    abatement_increase: float,
    *,
    abatement_initial: float | None = None,
) -> ScenarioConfig:
    """Return ``base`` with a linear abatement ramp for ``abatement_increase``."""
    initial = float(base.abatement[0]) if abatement_initial is None else float(abatement_initial)
    abatement = linear_abatement(
        base.number_of_times,
        initial=initial,
        increase=float(abatement_increase),
        maximum=base.abatement_max,
    )
    return replace(base, abatement=abatement)


def evaluate_increase(
    base: ScenarioConfig,
    abatement_increase: float,
    *,
    abatement_initial: float | None = None,
) -> SweepPoint:
    """Simulate one grid point; model errors are captured in the returned point."""
    try:
        config = scenario_for_increase(
            base, abatement_increase, abatement_initial=abatement_initial
        )
        trajectory = simulate(config)
    except DICEModelError as exc:
        return SweepPoint(float(abatement_increase), float("nan"), str(exc))
    return SweepPoint(float(abatement_increase), trajectory.objective)


def _log_progress(done: int, total: int) -> None:
    if total >= 10 and (done % max(total // 10, 1) == 0 or done == total):
        pct = 100.0 * done / float(total)
        LOGGER.info("Computed scenario %s/%s (%.1f%%)", done, total, pct)


def _collect(
    results: Iterator[SweepPoint],
    total: int,
    cancel_event: CancelToken | None,
) -> SweepResult:
    sweep = SweepResult()
    while True:
        if cancel_event is not None and cancel_event.is_set():
            sweep.cancelled = True
            LOGGER.warning(
                "Sweep cancelled after %s of %s scenarios.", len(sweep.points), total
            )
            break
        try:
            point = next(results)
        except StopIteration:
            break
        if not point.ok:
            LOGGER.warning(
                "Scenario with abatement increase %.4f failed: %s",
                point.abatement_increase,
                point.error,
            )
        sweep.points.append(point)
        _log_progress(len(sweep.points), total)
    return sweep


def run_abatement_sweep(
    base: ScenarioConfig,
    abatement_increases: Iterable[float] | None = None,
    *,
    abatement_initial: float | None = None,
    workers: int = 1,
    chunksize: int | None = None,
    cancel_event: CancelToken | None = None,
) -> SweepResult:
    """Evaluate the scenario objective for every abatement increase on the grid.

    Parameters
    ----------
    base:
        Scenario supplying everything except the abatement trajectory.
    abatement_increases:
        Grid to scan; defaults to :func:`abatement_increase_grid`.
    abatement_initial:
        Start of every ramp; defaults to ``base.abatement[0]``.
    workers:
        Number of worker processes. ``1`` runs in-process.
    cancel_event:
        Any object with ``is_set()`` (e.g. :class:`threading.Event`). It is
        polled between scenarios; once set, the remaining grid is skipped and
        the completed points are returned with ``cancelled=True``.
    """
    grid: Sequence[float] = (
        abatement_increase_grid()
        if abatement_increases is None
        else [float(value) for value in abatement_increases]
    )
    total = len(grid)
    evaluate = partial(evaluate_increase, base, abatement_initial=abatement_initial)
    LOGGER.info("Running abatement sweep over %s scenarios with %s worker(s)", total, workers)

    if workers <= 1 or total <= 1:
        return _collect((evaluate(value) for value in grid), total, cancel_event)

    if chunksize is None:
        chunksize = max(1, total // (workers * 4))
    with multiprocessing.Pool(processes=workers) as pool:
        # imap yields in submission order regardless of completion order.
        return _collect(pool.imap(evaluate, grid, chunksize=chunksize), total, cancel_event)


__all__ = [
    "DEFAULT_SWEEP_CONFIG",
    "SweepPoint",
    "SweepResult",
    "abatement_increase_grid",
    "evaluate_increase",
    "parameter_grid",
    "run_abatement_sweep",
    "scenario_for_increase",
]

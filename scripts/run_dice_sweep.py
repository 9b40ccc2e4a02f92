"""Run DICE abatement studies based on ``config.yaml``.

Usage
-----
```bash
python scripts/run_dice_sweep.py                      # abatement-increase sweep
python scripts/run_dice_sweep.py --mode all --workers 4
python scripts/run_dice_sweep.py --mode scc --value-accumulation cumulative
```

Configuration lives in ``config.yaml`` under the ``dice_model`` section (see the
file for every key and its default). ``DICE_CONFIG_PATH`` points the script at a
different file.

Modes
-----
``trajectory``
    Simulate the configured scenario and write every time series.
``sweep``
    Scan ``dice_model.sweep`` (``start``/``stop``/``step``) of abatement
    increases and write ``(abatement_increase, value)`` in grid order.
``time-scenarios``
    Ramps reaching full abatement after ``dice_model.times_of_max`` years.
``scc``
    Social cost of carbon over ``dice_model.scc_discount_rates``.

Output
------
CSV files are written to ``results/dice`` (below ``results.run_directory`` when
set): ``trajectory.csv``, ``abatement_sweep.csv``, ``abatement_time_scenarios.csv``
and ``social_cost_of_carbon.csv``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Mapping, Sequence

from _path_setup import ROOT

from config_paths import get_config_path, load_config, results_directory
from dice_model import (
    DICEModelError,
    InvalidConfiguration,
    ScenarioConfig,
    abatement_increase_grid,
    parameter_grid,
    run_abatement_sweep,
    run_abatement_time_scenarios,
    run_scc_sweep,
    simulate,
)
from dice_model.experiments import DEFAULT_SCC_DISCOUNT_RATES, DEFAULT_TIMES_OF_MAX

LOGGER = logging.getLogger("dice.run")

AVAILABLE_MODES = ("trajectory", "sweep", "time-scenarios", "scc")


def _numbers(values, key: str, cast=float) -> list:
    try:
        return [cast(value) for value in values]
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"dice_model.{key} must be numeric; got {values!r}.") from exc


def _build_parser(cfg: Mapping[str, object]) -> argparse.ArgumentParser:
    sweep_cfg = cfg.get("sweep", {}) or {}
    parser = argparse.ArgumentParser(
        description="Simulate DICE scenarios and sweep abatement policies."
    )
    parser.add_argument(
        "--mode",
        choices=[*AVAILABLE_MODES, "all"],
        default=str(cfg.get("mode", "sweep")),
        help="Study to run (default from dice_model.mode, otherwise 'sweep').",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=_numbers([sweep_cfg.get("workers", 1)], "sweep.workers", int)[0],
        help="Worker processes for the abatement sweep.",
    )
    parser.add_argument("--start", type=float, help="First abatement increase of the sweep.")
    parser.add_argument("--stop", type=float, help="Last abatement increase of the sweep.")
    parser.add_argument("--step", type=float, help="Spacing of the sweep grid.")
    parser.add_argument(
        "--value-accumulation",
        choices=["period", "cumulative"],
        help="Override dice_model.value_accumulation.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for CSV outputs (default results/dice).",
    )
    return parser


def _sweep_grid(cfg: Mapping[str, object], args: argparse.Namespace):
    grid_cfg = dict(cfg.get("sweep", {}) or {})
    for key in ("start", "stop", "step"):
        value = getattr(args, key)
        if value is not None:
            grid_cfg[key] = value
    return abatement_increase_grid(grid_cfg)


def _write(frame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False)
    LOGGER.info("Wrote %s (%d rows)", path, len(frame))


def run(root_cfg: Mapping[str, object], argv: Sequence[str] | None = None) -> dict[str, Path]:
    """Execute the requested studies and return the written CSV paths keyed by mode."""
    cfg = dict(root_cfg.get("dice_model", {}) or {})
    args = _build_parser(cfg).parse_args(argv)
    if args.value_accumulation:
        cfg["value_accumulation"] = args.value_accumulation

    base = ScenarioConfig.from_config(cfg)
    output_dir = args.output_dir or results_directory(root_cfg) / "dice"
    modes = AVAILABLE_MODES if args.mode == "all" else (args.mode,)
    written: dict[str, Path] = {}

    if "trajectory" in modes:
        trajectory = simulate(base)
        LOGGER.info("Scenario objective: %.6f", trajectory.objective)
        written["trajectory"] = output_dir / "trajectory.csv"
        _write(trajectory.to_frame(), written["trajectory"])

    if "sweep" in modes:
        result = run_abatement_sweep(base, _sweep_grid(cfg, args), workers=args.workers)
        if result.failures:
            LOGGER.warning("%d sweep scenarios failed", len(result.failures))
        written["sweep"] = output_dir / "abatement_sweep.csv"
        _write(result.to_frame(), written["sweep"])

    if "time-scenarios" in modes:
        times = cfg.get("times_of_max") or DEFAULT_TIMES_OF_MAX
        frame = run_abatement_time_scenarios(base, _numbers(times, "times_of_max"))
        written["time-scenarios"] = output_dir / "abatement_time_scenarios.csv"
        _write(frame, written["time-scenarios"])

    if "scc" in modes:
        rates_cfg = dict(DEFAULT_SCC_DISCOUNT_RATES)
        rates_cfg.update(cfg.get("scc_discount_rates", {}) or {})
        start, stop, step = _numbers(
            [rates_cfg["start"], rates_cfg["stop"], rates_cfg["step"]], "scc_discount_rates"
        )
        rates = parameter_grid(start, stop, step)
        written["scc"] = output_dir / "social_cost_of_carbon.csv"
        _write(run_scc_sweep(base, rates), written["scc"])

    return written


def main(argv: Sequence[str] | None = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")
    root_cfg = load_config(get_config_path(ROOT / "config.yaml"))
    try:
        run(root_cfg, argv)
    except DICEModelError as exc:
        LOGGER.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

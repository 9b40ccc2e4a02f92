"""Locate and load ``config.yaml`` and resolve result paths for model runs."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, MutableMapping

import yaml

REPO_ROOT = Path(__file__).resolve().parents[1]

CONFIG_ENV_VAR = "DICE_CONFIG_PATH"
CONFIG_ROOT_KEY = "_config_root"


def get_config_path(default: Path | None = None) -> Path:
    """Return the configuration path, honouring DICE_CONFIG_PATH when set."""

    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser().resolve()
    if default is not None:
        return default.resolve()
    return (REPO_ROOT / "config.yaml").resolve()


def load_config(path: Path | None = None) -> dict:
    """Read the YAML configuration; a missing file yields an empty mapping.

    The directory holding the file is recorded under ``_config_root`` so that
    relative output paths resolve against it.
    """

    config_path = path if path is not None else get_config_path()
    if not config_path.exists():
        return {}
    with config_path.open() as handle:
        config = yaml.safe_load(handle) or {}
    if not isinstance(config, MutableMapping):
        raise ValueError(f"Top level of {config_path} must be a mapping.")
    set_config_root(config, config_path.parent)
    return dict(config)


def set_config_root(config: MutableMapping[str, object], root: Path) -> None:
    config[CONFIG_ROOT_KEY] = str(root.resolve())


def get_config_root(config: Mapping[str, object], fallback: Path | None = None) -> Path:
    """Return the base directory that relative paths should resolve against."""

    value = config.get(CONFIG_ROOT_KEY) if isinstance(config, Mapping) else None
    if isinstance(value, str):
        return Path(value).expanduser().resolve()
    return (fallback or REPO_ROOT).resolve()


def sanitize_run_directory(value: str | None) -> str | None:
    """Return a safe run-directory component (no absolutes, no parent traversals)."""

    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    path = Path(candidate)
    if path.is_absolute():
        raise ValueError("results.run_directory must be a relative path.")
    parts = [part for part in path.parts if part not in ("", ".", "..")]
    if not parts:
        return None
    return "/".join(parts)


def get_results_run_directory(config: Mapping[str, object] | None) -> str | None:
    """Extract the ``results.run_directory`` value from the root configuration mapping."""

    if not isinstance(config, Mapping):
        return None
    results_cfg = config.get("results")
    if not isinstance(results_cfg, Mapping):
        return None
    raw_value = results_cfg.get("run_directory")
    if raw_value is None:
        return None
    return sanitize_run_directory(str(raw_value))


def results_directory(config: Mapping[str, object]) -> Path:
    """Return ``<config root>/results[/<run_directory>]`` for the given configuration."""

    results_cfg = config.get("results") if isinstance(config, Mapping) else None
    directory = "results"
    if isinstance(results_cfg, Mapping) and results_cfg.get("directory"):
        directory = str(results_cfg["directory"])
    base = Path(directory)
    if not base.is_absolute():
        base = get_config_root(config) / base
    run_directory = get_results_run_directory(config)
    if run_directory:
        base = base / run_directory
    return base.resolve()

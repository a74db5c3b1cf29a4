"""Configuration management for the seasonality testing toolkit.

Loads YAML configuration files and provides structured access to
simulation parameters, analysis thresholds, and logging settings.
Sections or keys omitted from the file fall back to the defaults
below, so a config only needs to state what it changes.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULTS: dict[str, dict[str, Any]] = {
    "simulation": {
        "start_date": "2000-01-01",
        "n_years": 19,
        "intercept": 2.5,
        "rainfall_coef": 0.02,
        "amplitude": 0.5,
        "phase_shift": 30.0,
        "seed": 42,
    },
    "analysis": {
        "covariates": ["rainfall"],
        "period": 365.0,
        "alpha": 0.05,
        "max_lag": 10,
        "min_period": 2.0,
        "max_period": 730.0,
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    },
}


@dataclass
class Config:
    """Application configuration container.

    Attributes:
        simulation: Synthetic count series parameters and random seed.
        analysis: Covariates, seasonal period, significance level and
            diagnostic lag settings.
        logging: Logging level and format settings.
    """

    simulation: dict[str, Any]
    analysis: dict[str, Any]
    logging: dict[str, Any]


def _merge_defaults(config_dict: dict[str, Any]) -> dict[str, dict[str, Any]]:
    unknown = set(config_dict) - set(DEFAULTS)
    if unknown:
        raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")

    merged = copy.deepcopy(DEFAULTS)
    for section, values in config_dict.items():
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ValueError(f"Configuration section '{section}' must be a mapping")
        merged[section].update(values)
    return merged


def load_config(config_path: str = "configs/config.yaml") -> Config:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Config object with parsed settings merged over the defaults.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        yaml.YAMLError: If the YAML file is malformed.
        ValueError: If the file has unknown sections or an invalid
            significance level or period.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path) as f:
        config_dict = yaml.safe_load(f) or {}

    config = Config(**_merge_defaults(config_dict))

    alpha = config.analysis["alpha"]
    if not 0.0 < alpha < 1.0:
        raise ValueError(f"analysis.alpha must lie in (0, 1), got {alpha}")
    if config.analysis["period"] <= 0:
        raise ValueError("analysis.period must be positive")

    return config

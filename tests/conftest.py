"""Shared test fixtures for the seasonality testing test suite."""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest
import yaml

from harmonic_seasonality.data.simulator import simulate_counts


@pytest.fixture()
def tmp_config(tmp_path: Path) -> Path:
    """Create a temporary config YAML file.

    Args:
        tmp_path: Pytest-provided temporary directory.

    Returns:
        Path to the temporary config file.
    """
    config = {
        "simulation": {
            "start_date": "2010-01-01",
            "n_years": 3,
            "intercept": 2.0,
            "rainfall_coef": 0.02,
            "amplitude": 0.4,
            "phase_shift": 60,
            "seed": 7,
        },
        "analysis": {
            "covariates": ["rainfall"],
            "period": 365.0,
            "alpha": 0.05,
            "max_lag": 10,
            "min_period": 100.0,
            "max_period": 600.0,
        },
        "logging": {
            "level": "DEBUG",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    }
    config_path = tmp_path / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(config, f)
    return config_path


@pytest.fixture()
def seasonal_df() -> pd.DataFrame:
    """Three years of daily counts with a clear annual cycle.

    Returns:
        Simulated observation table with amplitude 0.5 and phase shift 30.
    """
    rng = np.random.default_rng(2024)
    return simulate_counts(rng, n_years=3, amplitude=0.5, phase_shift=30)


@pytest.fixture()
def flat_df() -> pd.DataFrame:
    """Three years of daily counts without seasonality.

    Returns:
        Simulated observation table with amplitude 0.
    """
    rng = np.random.default_rng(99)
    return simulate_counts(rng, n_years=3, amplitude=0.0)

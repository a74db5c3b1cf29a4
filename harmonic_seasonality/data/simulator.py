"""Synthetic daily disease-count series.

Generates Poisson counts driven by a rainfall covariate and an
optional annual sinusoid, in the observation table layout consumed
by the rest of the toolkit. Randomness always comes from an explicit
``numpy.random.Generator`` so every series is reproducible from its
seed.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from harmonic_seasonality.data.preprocessor import add_calendar_columns
from harmonic_seasonality.utils.config import Config

logger = logging.getLogger(__name__)


def simulate_counts(
    rng: np.random.Generator,
    start_date: str = "2000-01-01",
    n_years: float = 19,
    intercept: float = 2.5,
    rainfall_coef: float = 0.02,
    amplitude: float = 0.5,
    phase_shift: float = 30.0,
    period: float = 365.0,
    rainfall_shape: float = 2.0,
    rainfall_scale: float = 5.0,
) -> pd.DataFrame:
    """Simulate a daily count series with an annual seasonal term.

    The expected count is
    ``exp(intercept + rainfall_coef * rainfall
    + amplitude * sin(2 * pi * (day_of_year - phase_shift) / period))``,
    so the true seasonal peak falls on ``period / 4 + phase_shift``
    (mod ``period``).

    Args:
        rng: Random generator used for rainfall and counts.
        start_date: First date of the series.
        n_years: Length of the series in years of ``period`` days.
        intercept: Log-scale baseline.
        rainfall_coef: Log-scale effect of one unit of rainfall.
        amplitude: Log-scale amplitude of the seasonal sinusoid; zero
            gives a series without seasonality.
        phase_shift: Shift of the sinusoid in days.
        period: Seasonal period in days.
        rainfall_shape: Gamma shape parameter for daily rainfall.
        rainfall_scale: Gamma scale parameter for daily rainfall.

    Returns:
        DataFrame with date, calendar, ``rainfall``, ``mu`` and ``y``
        columns.
    """
    n_days = int(round(n_years * period))
    if n_days < 1:
        raise ValueError("n_years must cover at least one day")

    dates = pd.date_range(start_date, periods=n_days, freq="D")
    df = add_calendar_columns(pd.DataFrame({"date": dates}))

    rainfall = rng.gamma(rainfall_shape, rainfall_scale, n_days)
    seasonal = amplitude * np.sin(
        2 * np.pi * (df["day_of_year"].to_numpy() - phase_shift) / period
    )
    mu = np.exp(intercept + rainfall_coef * rainfall + seasonal)

    df["rainfall"] = rainfall
    df["mu"] = mu
    df["y"] = rng.poisson(mu).astype(np.int64)

    logger.debug(
        "Simulated %d days: amplitude=%.3f, phase_shift=%.1f, mean count=%.2f",
        n_days,
        amplitude,
        phase_shift,
        df["y"].mean(),
    )
    return df


def true_peak_day(phase_shift: float, period: float = 365.0) -> float:
    """Day of year on which the simulated seasonal term peaks."""
    return (period / 4 + phase_shift) % period


def simulate_from_config(
    config: Config, rng: np.random.Generator | None = None
) -> pd.DataFrame:
    """Simulate a series from the ``simulation`` config section.

    Args:
        config: Loaded application configuration.
        rng: Optional generator; seeded from ``simulation.seed`` when
            omitted.

    Returns:
        Simulated observation table.
    """
    params = dict(config.simulation)
    seed = params.pop("seed", None)
    if rng is None:
        rng = np.random.default_rng(seed)

    return simulate_counts(rng, period=config.analysis["period"], **params)

"""Lomb-Scargle periodogram for locating dominant periodicities.

Complements the parametric harmonic test: the periodogram works on
unevenly spaced observations and shows which periods carry the most
spectral power before a period is committed to in the regression.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from scipy import signal

logger = logging.getLogger(__name__)

MAX_FREQUENCIES = 20000


class PeriodogramAnalyzer:
    """Computes Lomb-Scargle power over a band of periods.

    Attributes:
        min_period: Shortest period searched, in days.
        max_period: Longest period searched, in days.
        oversample: Frequency grid points per natural resolution step
            ``1 / span``.
    """

    def __init__(
        self,
        min_period: float = 2.0,
        max_period: float = 730.0,
        oversample: int = 5,
    ) -> None:
        """Initialize the periodogram analyzer.

        Args:
            min_period: Shortest period of interest in days.
            max_period: Longest period of interest in days.
            oversample: Grid oversampling factor.
        """
        if not 0 < min_period < max_period:
            raise ValueError("Require 0 < min_period < max_period")
        self.min_period = min_period
        self.max_period = max_period
        self.oversample = oversample

    def frequency_grid(self, span: float) -> np.ndarray:
        """Cycles-per-day grid covering the period band.

        Args:
            span: Time covered by the observations, in days.

        Returns:
            Increasing array of frequencies.
        """
        f_min = 1.0 / self.max_period
        f_max = 1.0 / self.min_period
        n = int(np.ceil(self.oversample * max(span, 1.0) * (f_max - f_min)))
        n = int(np.clip(n, 16, MAX_FREQUENCIES))
        return np.linspace(f_min, f_max, n)

    def compute(self, times: np.ndarray, values: np.ndarray) -> pd.DataFrame:
        """Compute normalized Lomb-Scargle power.

        Args:
            times: Observation times in days; need not be evenly spaced.
            values: Observed values at ``times``.

        Returns:
            DataFrame with period, frequency and power columns, power
            scaled so its maximum is 1. Empty for fewer than 4 points.
        """
        t = np.asarray(times, dtype=float)
        y = np.asarray(values, dtype=float)
        if len(t) < 4:
            return pd.DataFrame(columns=["period", "frequency", "power"])

        freqs = self.frequency_grid(float(t.max() - t.min()))
        power = signal.lombscargle(t, y - y.mean(), 2 * np.pi * freqs)
        peak = power.max()
        if peak > 0:
            power = power / peak

        return pd.DataFrame({"period": 1.0 / freqs, "frequency": freqs, "power": power})

    def dominant_periods(
        self, times: np.ndarray, values: np.ndarray, top_n: int = 5
    ) -> list[tuple[float, float]]:
        """Periods at local maxima of the periodogram.

        Args:
            times: Observation times in days.
            values: Observed values at ``times``.
            top_n: Maximum number of periods to return.

        Returns:
            List of (period, strength) tuples sorted by strength
            descending.
        """
        spectrum = self.compute(times, values)
        if spectrum.empty:
            return []

        power = spectrum["power"].to_numpy()
        peaks, _ = signal.find_peaks(power, height=power.mean())
        dominant = [
            (float(spectrum["period"].iloc[i]), float(power[i])) for i in peaks
        ]
        dominant.sort(key=lambda x: x[1], reverse=True)

        logger.info(
            "Dominant periods: %s", [round(p, 1) for p, _ in dominant[:top_n]]
        )
        return dominant[:top_n]

    def analyze_series(
        self, df: pd.DataFrame, value_col: str = "y", date_col: str = "date"
    ) -> list[tuple[float, float]]:
        """Dominant periods of a dated observation table."""
        dates = pd.to_datetime(df[date_col])
        times = (dates - dates.min()).dt.total_seconds().to_numpy() / 86400.0
        return self.dominant_periods(times, df[value_col].to_numpy(dtype=float))

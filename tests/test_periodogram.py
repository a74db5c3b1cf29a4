"""Tests for the Lomb-Scargle periodogram."""

import numpy as np
import pandas as pd
import pytest

from harmonic_seasonality.data.periodogram import PeriodogramAnalyzer


class TestPeriodogramAnalyzer:
    """Tests for PeriodogramAnalyzer."""

    def _make_weekly(self, n: int = 365) -> tuple[np.ndarray, np.ndarray]:
        t = np.arange(n, dtype=float)
        return t, 100 + 20 * np.sin(2 * np.pi * t / 7)

    def test_detects_weekly_period(self) -> None:
        t, y = self._make_weekly()
        analyzer = PeriodogramAnalyzer(min_period=2, max_period=30)
        dominant = analyzer.dominant_periods(t, y)
        assert dominant[0][0] == pytest.approx(7.0, abs=0.1)
        assert dominant[0][1] == pytest.approx(1.0)

    def test_sorted_by_strength(self) -> None:
        t, y = self._make_weekly()
        y = y + 10 * np.sin(2 * np.pi * t / 3.5)
        analyzer = PeriodogramAnalyzer(min_period=2, max_period=30)
        dominant = analyzer.dominant_periods(t, y)
        strengths = [s for _, s in dominant]
        assert strengths == sorted(strengths, reverse=True)

    def test_top_n_limits_output(self) -> None:
        t, y = self._make_weekly()
        dominant = PeriodogramAnalyzer(min_period=2, max_period=30).dominant_periods(
            t, y, top_n=2
        )
        assert len(dominant) <= 2

    def test_uneven_sampling(self) -> None:
        """Dropping observations at random should not hide the period."""
        t, y = self._make_weekly(730)
        keep = np.random.default_rng(0).random(len(t)) > 0.3
        dominant = PeriodogramAnalyzer(min_period=2, max_period=30).dominant_periods(
            t[keep], y[keep]
        )
        assert dominant[0][0] == pytest.approx(7.0, abs=0.1)

    def test_compute_columns(self) -> None:
        t, y = self._make_weekly()
        spectrum = PeriodogramAnalyzer(min_period=2, max_period=30).compute(t, y)
        assert list(spectrum.columns) == ["period", "frequency", "power"]
        assert spectrum["power"].max() == pytest.approx(1.0)
        assert spectrum["period"].min() == pytest.approx(2.0)
        assert spectrum["period"].max() == pytest.approx(30.0)

    def test_short_series(self) -> None:
        analyzer = PeriodogramAnalyzer()
        assert analyzer.dominant_periods(np.arange(3.0), np.ones(3)) == []
        assert analyzer.compute(np.arange(3.0), np.ones(3)).empty

    def test_annual_counts(self, seasonal_df: pd.DataFrame) -> None:
        """A simulated annual cycle should dominate the long-period band."""
        analyzer = PeriodogramAnalyzer(min_period=100, max_period=600)
        dominant = analyzer.analyze_series(seasonal_df)
        assert abs(dominant[0][0] - 365) < 40

    def test_invalid_band(self) -> None:
        with pytest.raises(ValueError):
            PeriodogramAnalyzer(min_period=30, max_period=7)

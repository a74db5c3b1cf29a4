"""Residual autocorrelation diagnostics for fitted Poisson models.

Computes ACF and PACF of response residuals against the white-noise
band ``+/-1.96/sqrt(N)`` to flag leftover autoregressive or moving
average structure. There is no automatic accept/reject rule; the
tables are meant for inspection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from statsmodels.stats.diagnostic import acorr_ljungbox
from statsmodels.tsa.stattools import acf, pacf

from harmonic_seasonality.models.poisson_glm import FittedModel

logger = logging.getLogger(__name__)

Z_95 = 1.96


def response_residuals(model: FittedModel, df: pd.DataFrame) -> np.ndarray:
    """Observed minus predicted counts for each row of ``df``."""
    observed = df[model.response].to_numpy(dtype=float)
    return observed - model.predict(df)


@dataclass
class DiagnosticsResult:
    """Residual autocorrelation diagnostics.

    Attributes:
        residuals: Response residuals in time order.
        acf_table: Rows of (lag, coefficient, bound, outside_band).
        pacf_table: Rows of (lag, coefficient, bound, outside_band).
        bound: Half-width of the 95% white-noise band.
        ljung_box_stat: Ljung-Box statistic up to the largest lag.
        ljung_box_pvalue: p-value of the Ljung-Box statistic.
    """

    residuals: np.ndarray
    acf_table: pd.DataFrame
    pacf_table: pd.DataFrame
    bound: float
    ljung_box_stat: float
    ljung_box_pvalue: float

    @property
    def acf_lags_outside(self) -> list[int]:
        return self.acf_table.loc[self.acf_table["outside_band"], "lag"].tolist()

    @property
    def pacf_lags_outside(self) -> list[int]:
        return self.pacf_table.loc[self.pacf_table["outside_band"], "lag"].tolist()

    @property
    def fraction_within_band(self) -> float:
        """Share of ACF and PACF coefficients inside the band."""
        outside = (
            self.acf_table["outside_band"].sum() + self.pacf_table["outside_band"].sum()
        )
        total = len(self.acf_table) + len(self.pacf_table)
        return 1.0 - float(outside) / total if total else 1.0


class ResidualDiagnostics:
    """ACF/PACF checks of model residuals.

    Attributes:
        max_lag: Largest lag to report.
    """

    def __init__(self, max_lag: int = 10) -> None:
        if max_lag < 1:
            raise ValueError("max_lag must be at least 1")
        self.max_lag = max_lag

    def _n_lags(self, n_obs: int) -> int:
        # pacf needs fewer lags than half the sample size
        n_lags = min(self.max_lag, n_obs // 2 - 1)
        if n_lags < 1:
            raise ValueError(f"{n_obs} residuals are too few for autocorrelation lags")
        return n_lags

    @staticmethod
    def _table(values: np.ndarray, bound: float) -> pd.DataFrame:
        lags = np.arange(1, len(values))
        coefs = np.asarray(values[1:], dtype=float)
        return pd.DataFrame(
            {
                "lag": lags,
                "coefficient": coefs,
                "bound": bound,
                "outside_band": np.abs(coefs) > bound,
            }
        )

    @staticmethod
    def confidence_bound(n_obs: int) -> float:
        return Z_95 / np.sqrt(n_obs)

    def autocorrelation(self, residuals: np.ndarray) -> pd.DataFrame:
        """ACF at lags 1..K with the white-noise bound.

        Args:
            residuals: Residual series in time order.

        Returns:
            DataFrame with lag, coefficient, bound and outside_band.
        """
        residuals = np.asarray(residuals, dtype=float)
        values = acf(residuals, nlags=self._n_lags(len(residuals)), fft=True)
        return self._table(values, self.confidence_bound(len(residuals)))

    def partial_autocorrelation(self, residuals: np.ndarray) -> pd.DataFrame:
        """PACF at lags 1..K by the Durbin-Levinson recursion.

        Args:
            residuals: Residual series in time order.

        Returns:
            DataFrame with lag, coefficient, bound and outside_band.
        """
        residuals = np.asarray(residuals, dtype=float)
        values = pacf(residuals, nlags=self._n_lags(len(residuals)), method="ldb")
        return self._table(values, self.confidence_bound(len(residuals)))

    def analyze_residuals(self, residuals: np.ndarray) -> DiagnosticsResult:
        """Run ACF, PACF and Ljung-Box checks on a residual series."""
        residuals = np.asarray(residuals, dtype=float)
        acf_table = self.autocorrelation(residuals)
        pacf_table = self.partial_autocorrelation(residuals)

        lb = acorr_ljungbox(residuals, lags=[len(acf_table)])
        result = DiagnosticsResult(
            residuals=residuals,
            acf_table=acf_table,
            pacf_table=pacf_table,
            bound=self.confidence_bound(len(residuals)),
            ljung_box_stat=float(lb["lb_stat"].iloc[0]),
            ljung_box_pvalue=float(lb["lb_pvalue"].iloc[0]),
        )

        logger.info(
            "Residual diagnostics: ACF lags outside band=%s, "
            "PACF lags outside band=%s, Ljung-Box p=%.3g",
            result.acf_lags_outside,
            result.pacf_lags_outside,
            result.ljung_box_pvalue,
        )
        return result

    def analyze(self, model: FittedModel, df: pd.DataFrame) -> DiagnosticsResult:
        """Diagnose the response residuals of ``model`` on ``df``.

        Args:
            model: Fitted Poisson regression.
            df: Observation table in time order containing the model's
                response and predictor columns.

        Returns:
            DiagnosticsResult for the residual series.
        """
        return self.analyze_residuals(response_residuals(model, df))

"""Parametric seasonality test by harmonic Poisson regression.

Compares a covariates-only Poisson regression against the same model
with a sine/cosine pair at the seasonal period using a
likelihood-ratio test, and back-transforms the harmonic coefficients
into an amplitude and peak/trough days.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import pandas as pd
from scipy import stats

from harmonic_seasonality.data.preprocessor import (
    harmonic_columns,
    prepare_observations,
)
from harmonic_seasonality.exceptions import NumericalError
from harmonic_seasonality.models.poisson_glm import FittedModel, fit_poisson_glm

logger = logging.getLogger(__name__)

DEFAULT_ALPHA = 0.05


@dataclass(frozen=True)
class LikelihoodRatioResult:
    """Likelihood-ratio comparison of two nested models.

    Attributes:
        statistic: Twice the log-likelihood gain of the larger model.
        df: Number of additional parameters in the larger model.
        p_value: Upper tail probability of the chi-squared reference.
    """

    statistic: float
    df: int
    p_value: float


@dataclass(frozen=True)
class HarmonicPhase:
    """Interpretable form of a sine/cosine coefficient pair.

    Attributes:
        amplitude: Log-scale amplitude of the fitted sinusoid.
        peak_day: Day of the period on which the sinusoid peaks.
        trough_day: Day of the period on which the sinusoid bottoms out.
    """

    amplitude: float
    peak_day: float
    trough_day: float


@dataclass(frozen=True, eq=False)
class SeasonalityResult:
    """Outcome of a harmonic seasonality test.

    Amplitude, peak day and trough day are only reported when the
    seasonal terms are significant; otherwise they are ``None``.

    Attributes:
        amplitude: Log-scale amplitude of the seasonal sinusoid.
        peak_day: Day of year with the highest expected count.
        trough_day: Day of year with the lowest expected count.
        is_significant: Whether the null of no seasonality is rejected.
        p_value: Likelihood-ratio test p-value.
        lr_test: Full likelihood-ratio test result.
        sin_coef: Fitted coefficient of the sine term.
        cos_coef: Fitted coefficient of the cosine term.
        alpha: Significance threshold the decision was made at.
        period: Seasonal period in days.
        base_model: Covariates-only fit.
        harmonic_model: Fit including the harmonic terms.
    """

    amplitude: float | None
    peak_day: float | None
    trough_day: float | None
    is_significant: bool
    p_value: float
    lr_test: LikelihoodRatioResult
    sin_coef: float
    cos_coef: float
    alpha: float
    period: float
    base_model: FittedModel
    harmonic_model: FittedModel


def likelihood_ratio_test(
    restricted: FittedModel, full: FittedModel
) -> LikelihoodRatioResult:
    """Compare nested models by their maximized log-likelihoods.

    Args:
        restricted: Fit of the smaller model.
        full: Fit of the larger model, which nests ``restricted``.

    Returns:
        LikelihoodRatioResult with a chi-squared p-value.
    """
    df = full.n_params - restricted.n_params
    if df <= 0:
        raise ValueError("The full model must have more parameters than the other")

    # Nested fits can differ by round-off in the wrong direction.
    statistic = max(2.0 * (full.log_likelihood - restricted.log_likelihood), 0.0)
    p_value = float(stats.chi2.sf(statistic, df))
    return LikelihoodRatioResult(statistic=statistic, df=df, p_value=p_value)


def harmonic_phase(
    sin_coef: float, cos_coef: float, period: float = 365.0
) -> HarmonicPhase:
    """Convert ``b1*sin(wt) + b2*cos(wt)`` into amplitude and phase.

    The pair equals ``A*cos(wt - phi)`` with ``A = sqrt(b1^2 + b2^2)``
    and ``phi = atan2(b1, b2)``, so the peak falls on
    ``phi * period / (2*pi)`` and the trough half a period later. Both
    days are reduced into ``[0, period)``.

    Args:
        sin_coef: Coefficient of the sine term (``b1``).
        cos_coef: Coefficient of the cosine term (``b2``).
        period: Seasonal period in days.

    Returns:
        HarmonicPhase with amplitude, peak day and trough day.

    Raises:
        NumericalError: If the coefficients are non-finite or both zero,
            leaving the phase undefined.
    """
    if not (math.isfinite(sin_coef) and math.isfinite(cos_coef)):
        raise NumericalError(
            f"Harmonic coefficients must be finite, got ({sin_coef}, {cos_coef})"
        )

    amplitude = math.hypot(sin_coef, cos_coef)
    if amplitude == 0.0:
        raise NumericalError("Phase is undefined when both coefficients are zero")

    peak = (math.atan2(sin_coef, cos_coef) * period / (2 * math.pi)) % period
    trough = (peak + period / 2) % period
    return HarmonicPhase(amplitude=amplitude, peak_day=peak, trough_day=trough)


class SeasonalityTester:
    """Tests count series for a periodic signal with harmonic regression.

    Attributes:
        covariates: Predictors included in both the base and harmonic
            models.
        period: Seasonal period in days.
        alpha: Significance level for rejecting "no seasonality".
        response: Name of the count column.
    """

    def __init__(
        self,
        covariates: list[str] | None = None,
        period: float = 365.0,
        alpha: float = DEFAULT_ALPHA,
        response: str = "y",
    ) -> None:
        """Initialize the seasonality tester.

        Args:
            covariates: Covariate columns, e.g. ``["rainfall"]``.
            period: Seasonal period in days.
            alpha: Significance threshold, conventionally 0.05.
            response: Count column to model.
        """
        if not 0.0 < alpha < 1.0:
            raise ValueError(f"alpha must lie in (0, 1), got {alpha}")
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")

        self.covariates = list(covariates or [])
        self.period = period
        self.alpha = alpha
        self.response = response

    @property
    def harmonic_terms(self) -> tuple[str, str]:
        """Names of the sine and cosine predictors."""
        return harmonic_columns(self.period)

    def prepare(self, df: pd.DataFrame) -> pd.DataFrame:
        """Validate observations and add the harmonic predictors."""
        return prepare_observations(
            df, self.covariates, period=self.period, response=self.response
        )

    def fit_models(self, df: pd.DataFrame) -> tuple[FittedModel, FittedModel]:
        """Fit the base and harmonic models on prepared observations.

        Args:
            df: Output of :meth:`prepare`.

        Returns:
            Tuple of (base_model, harmonic_model).
        """
        base = fit_poisson_glm(df, self.covariates, response=self.response)
        harmonic = fit_poisson_glm(
            df, [*self.covariates, *self.harmonic_terms], response=self.response
        )
        return base, harmonic

    def test(self, df: pd.DataFrame) -> SeasonalityResult:
        """Run the harmonic seasonality test on an observation table.

        Args:
            df: Observation table with counts, covariates and either a
                date or a day-of-year column.

        Returns:
            SeasonalityResult for the series.

        Raises:
            DataError: If the table is malformed.
            InsufficientDataError: If less than one period is covered.
            FitError: If either Poisson regression fails to fit.
        """
        prepared = self.prepare(df)
        base, harmonic = self.fit_models(prepared)
        return self.evaluate(base, harmonic)

    def evaluate(self, base: FittedModel, harmonic: FittedModel) -> SeasonalityResult:
        """Build a SeasonalityResult from already fitted nested models."""
        lr = likelihood_ratio_test(base, harmonic)
        sin_term, cos_term = self.harmonic_terms
        b1 = harmonic.coefficients[sin_term]
        b2 = harmonic.coefficients[cos_term]
        significant = lr.p_value < self.alpha

        phase: HarmonicPhase | None = None
        if significant:
            phase = harmonic_phase(b1, b2, self.period)
            logger.info(
                "Seasonality detected: LR=%.2f, p=%.3g, amplitude=%.3f, "
                "peak=%.1f, trough=%.1f",
                lr.statistic,
                lr.p_value,
                phase.amplitude,
                phase.peak_day,
                phase.trough_day,
            )
        else:
            logger.info(
                "No significant seasonality: LR=%.2f, p=%.3g", lr.statistic, lr.p_value
            )

        return SeasonalityResult(
            amplitude=phase.amplitude if phase else None,
            peak_day=phase.peak_day if phase else None,
            trough_day=phase.trough_day if phase else None,
            is_significant=significant,
            p_value=lr.p_value,
            lr_test=lr,
            sin_coef=b1,
            cos_coef=b2,
            alpha=self.alpha,
            period=self.period,
            base_model=base,
            harmonic_model=harmonic,
        )

"""Poisson regression with a log link.

Wraps the statsmodels GLM for count outcomes and turns its fit into
an immutable summary, converting every way the fit can go wrong into
a ``FitError``.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.tools.sm_exceptions import (
    ConvergenceWarning,
    PerfectSeparationWarning,
)

from harmonic_seasonality.exceptions import FitError

logger = logging.getLogger(__name__)

INTERCEPT = "const"


@dataclass(frozen=True, eq=False)
class FittedModel:
    """Summary of a fitted Poisson regression.

    Attributes:
        response: Name of the count column.
        predictors: Predictor columns, excluding the intercept.
        coefficients: Mapping of term name to estimate; the intercept
            is stored under ``"const"``.
        std_errors: Mapping of term name to standard error.
        log_likelihood: Maximized log-likelihood.
        n_obs: Number of observations used in the fit.
        n_params: Number of estimated coefficients.
        converged: Whether the optimizer reported convergence.
        fitted: Expected counts for each observation.
        aic: Akaike information criterion.
        deviance: Residual deviance.
    """

    response: str
    predictors: tuple[str, ...]
    coefficients: dict[str, float]
    std_errors: dict[str, float]
    log_likelihood: float
    n_obs: int
    n_params: int
    converged: bool
    fitted: np.ndarray
    aic: float
    deviance: float

    def linear_predictor(self, df: pd.DataFrame) -> np.ndarray:
        """Log-scale linear predictor for the rows of ``df``."""
        eta = np.full(len(df), self.coefficients[INTERCEPT], dtype=float)
        for name in self.predictors:
            eta += self.coefficients[name] * df[name].to_numpy(dtype=float)
        return eta

    def predict(self, df: pd.DataFrame) -> np.ndarray:
        """Expected counts for the rows of ``df``."""
        return np.exp(self.linear_predictor(df))


def _design_matrix(df: pd.DataFrame, predictors: list[str]) -> pd.DataFrame:
    X = df[list(predictors)].astype(float)
    X.insert(0, INTERCEPT, 1.0)
    return X


def fit_poisson_glm(
    df: pd.DataFrame,
    predictors: list[str],
    response: str = "y",
    max_iter: int = 100,
) -> FittedModel:
    """Fit ``response ~ predictors`` as a Poisson GLM with log link.

    An intercept is always included. Estimation is by maximum
    likelihood through iteratively reweighted least squares.

    Args:
        df: Observation table containing the response and predictors.
        predictors: Predictor columns; may be empty for an
            intercept-only model.
        response: Count column to model.
        max_iter: Iteration limit for the optimizer.

    Returns:
        FittedModel summarizing the fit.

    Raises:
        FitError: If there are too few observations, all counts are
            zero, the design is rank deficient, or the optimizer fails
            to converge.
    """
    missing = [c for c in [response, *predictors] if c not in df.columns]
    if missing:
        raise FitError(f"Columns missing from observation table: {missing}")

    y = df[response].to_numpy(dtype=float)
    X = _design_matrix(df, predictors)
    n_obs, n_params = X.shape

    if n_obs <= n_params:
        raise FitError(
            f"{n_obs} observations are too few for {n_params} coefficients"
        )
    if not np.any(y > 0):
        raise FitError("All counts are zero; the intercept has no finite estimate")
    if np.linalg.matrix_rank(X.to_numpy()) < n_params:
        raise FitError(f"Design matrix is rank deficient for terms {list(X.columns)}")

    model = sm.GLM(y, X, family=sm.families.Poisson())
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            results = model.fit(maxiter=max_iter)
        except (np.linalg.LinAlgError, ValueError) as exc:
            raise FitError(f"Poisson fit failed: {exc}") from exc

    for w in caught:
        if issubclass(w.category, (ConvergenceWarning, PerfectSeparationWarning)):
            raise FitError(f"Poisson fit did not converge: {w.message}")
        logger.debug("Warning during Poisson fit: %s", w.message)

    converged = bool(getattr(results, "converged", True))
    llf = float(results.llf)
    params = results.params
    if not converged:
        raise FitError(f"Poisson fit did not converge in {max_iter} iterations")
    if not np.isfinite(llf) or not np.all(np.isfinite(params)):
        raise FitError("Poisson fit produced non-finite estimates")

    logger.debug(
        "Fitted Poisson GLM %s ~ %s: logLik=%.3f",
        response,
        " + ".join(predictors) or "1",
        llf,
    )

    return FittedModel(
        response=response,
        predictors=tuple(predictors),
        coefficients={name: float(v) for name, v in params.items()},
        std_errors={name: float(v) for name, v in results.bse.items()},
        log_likelihood=llf,
        n_obs=int(n_obs),
        n_params=int(n_params),
        converged=converged,
        fitted=np.asarray(results.fittedvalues, dtype=float),
        aic=float(results.aic),
        deviance=float(results.deviance),
    )

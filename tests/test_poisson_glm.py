"""Tests for the Poisson regression wrapper."""

import numpy as np
import pandas as pd
import pytest
import statsmodels.api as sm

from harmonic_seasonality.exceptions import FitError
from harmonic_seasonality.models.poisson_glm import (
    INTERCEPT,
    FittedModel,
    fit_poisson_glm,
)


def _make_count_df(n: int = 2000, seed: int = 0) -> pd.DataFrame:
    """Poisson counts with a known log-linear effect of x."""
    rng = np.random.default_rng(seed)
    x = rng.normal(0, 1, n)
    y = rng.poisson(np.exp(1.0 + 0.3 * x))
    return pd.DataFrame({"x": x, "y": y})


class TestFitPoissonGLM:
    """Tests for fit_poisson_glm."""

    def test_returns_fitted_model(self) -> None:
        model = fit_poisson_glm(_make_count_df(), ["x"])
        assert isinstance(model, FittedModel)
        assert model.converged
        assert model.n_params == 2
        assert model.n_obs == 2000
        assert set(model.coefficients) == {INTERCEPT, "x"}

    def test_recovers_coefficients(self) -> None:
        """Estimates should be close to the simulated effects."""
        model = fit_poisson_glm(_make_count_df(), ["x"])
        assert model.coefficients[INTERCEPT] == pytest.approx(1.0, abs=0.05)
        assert model.coefficients["x"] == pytest.approx(0.3, abs=0.05)

    def test_matches_statsmodels(self) -> None:
        """The log-likelihood should equal a direct statsmodels fit."""
        df = _make_count_df()
        direct = sm.GLM(
            df["y"], sm.add_constant(df[["x"]]), family=sm.families.Poisson()
        ).fit()
        model = fit_poisson_glm(df, ["x"])
        assert model.log_likelihood == pytest.approx(direct.llf)
        assert model.aic == pytest.approx(direct.aic)

    def test_intercept_only(self) -> None:
        """No predictors should fit the log of the mean count."""
        df = _make_count_df()
        model = fit_poisson_glm(df, [])
        assert model.n_params == 1
        assert model.coefficients[INTERCEPT] == pytest.approx(np.log(df["y"].mean()))

    def test_predict_matches_fitted(self) -> None:
        df = _make_count_df()
        model = fit_poisson_glm(df, ["x"])
        assert np.allclose(model.predict(df), model.fitted)

    def test_standard_errors_positive(self) -> None:
        model = fit_poisson_glm(_make_count_df(), ["x"])
        assert all(se > 0 for se in model.std_errors.values())

    def test_frozen(self) -> None:
        model = fit_poisson_glm(_make_count_df(), ["x"])
        with pytest.raises(AttributeError):
            model.log_likelihood = 0.0  # type: ignore[misc]


class TestFitErrors:
    """Tests for conditions that make the fit fail."""

    def test_all_zero_counts(self) -> None:
        df = _make_count_df().assign(y=0)
        with pytest.raises(FitError, match="zero"):
            fit_poisson_glm(df, ["x"])

    def test_collinear_predictors(self) -> None:
        df = _make_count_df()
        df["x2"] = 2 * df["x"]
        with pytest.raises(FitError, match="rank"):
            fit_poisson_glm(df, ["x", "x2"])

    def test_too_few_observations(self) -> None:
        df = _make_count_df(n=2)
        with pytest.raises(FitError, match="too few"):
            fit_poisson_glm(df, ["x"])

    def test_missing_column(self) -> None:
        with pytest.raises(FitError, match="missing"):
            fit_poisson_glm(_make_count_df(), ["rainfall"])

    def test_non_convergence(self) -> None:
        """An iteration limit of one should not reach convergence."""
        with pytest.raises(FitError, match="converge"):
            fit_poisson_glm(_make_count_df(), ["x"], max_iter=1)

"""Observation table validation and feature preparation.

Provides validation checks for count integrity, covariate presence,
day-of-year consistency and seasonal coverage, along with calendar
and harmonic feature derivation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from harmonic_seasonality.exceptions import DataError, InsufficientDataError

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Results from observation table validation.

    Attributes:
        is_valid: Whether the table is free of gaps and duplicate dates.
        n_obs: Number of observations.
        span_days: Number of days covered from first to last observation.
        missing_dates_count: Number of calendar days absent from the range.
        duplicate_dates_count: Number of repeated dates.
        warnings: Warning messages from validation.
    """

    is_valid: bool
    n_obs: int
    span_days: int
    missing_dates_count: int = 0
    duplicate_dates_count: int = 0
    warnings: list[str] = field(default_factory=list)


def harmonic_columns(period: float = 365.0) -> tuple[str, str]:
    """Names of the sine and cosine columns for a seasonal period."""
    return f"sin{period:g}", f"cos{period:g}"


def add_calendar_columns(df: pd.DataFrame, date_col: str = "date") -> pd.DataFrame:
    """Derive year, ISO week, month and day-of-year from a date column.

    Args:
        df: DataFrame with a date column.
        date_col: Name of the date column.

    Returns:
        Copy of ``df`` with ``year``, ``week``, ``month`` and
        ``day_of_year`` columns.
    """
    df = df.copy()
    dates = pd.to_datetime(df[date_col])
    df[date_col] = dates
    df["year"] = dates.dt.year
    df["week"] = dates.dt.isocalendar().week.astype(int).to_numpy()
    df["month"] = dates.dt.month
    df["day_of_year"] = dates.dt.dayofyear
    return df


def add_harmonic_features(df: pd.DataFrame, period: float = 365.0) -> pd.DataFrame:
    """Add sine and cosine terms of the day of year at a fixed period.

    Args:
        df: DataFrame with a ``day_of_year`` column.
        period: Seasonal period in days.

    Returns:
        Copy of ``df`` with the two harmonic columns.
    """
    sin_col, cos_col = harmonic_columns(period)
    angle = 2 * np.pi * df["day_of_year"].to_numpy(dtype=float) / period
    df = df.copy()
    df[sin_col] = np.sin(angle)
    df[cos_col] = np.cos(angle)
    return df


class ObservationValidator:
    """Validates count observation tables before model fitting."""

    def __init__(self, response: str = "y", date_col: str = "date") -> None:
        self.response = response
        self.date_col = date_col

    def _check_counts(self, df: pd.DataFrame) -> None:
        if self.response not in df.columns:
            raise DataError(f"Count column '{self.response}' is missing")

        counts = df[self.response]
        if not pd.api.types.is_numeric_dtype(counts):
            raise DataError(f"Count column '{self.response}' is not numeric")
        if counts.isna().any():
            raise DataError(f"Found {int(counts.isna().sum())} missing counts")
        if (counts < 0).any():
            raise DataError(f"Found {int((counts < 0).sum())} negative counts")
        if (np.mod(counts.to_numpy(dtype=float), 1) != 0).any():
            raise DataError("Counts must be whole numbers")

    @staticmethod
    def _check_covariates(df: pd.DataFrame, covariates: list[str]) -> None:
        missing = [c for c in covariates if c not in df.columns]
        if missing:
            raise DataError(f"Covariate columns missing: {missing}")

        for col in covariates:
            if not pd.api.types.is_numeric_dtype(df[col]):
                raise DataError(f"Covariate '{col}' is not numeric")
            if not np.isfinite(df[col].to_numpy(dtype=float)).all():
                raise DataError(f"Covariate '{col}' has missing or infinite values")

    def _day_of_year(self, df: pd.DataFrame) -> pd.Series:
        if "day_of_year" in df.columns:
            doy = df["day_of_year"]
        elif self.date_col in df.columns:
            doy = pd.to_datetime(df[self.date_col]).dt.dayofyear
        else:
            raise DataError("Neither day_of_year nor a date column is present")

        if doy.isna().any():
            raise DataError(f"Found {int(doy.isna().sum())} missing day-of-year values")
        if ((doy < 1) | (doy > 366)).any():
            raise DataError("day_of_year values must lie in 1..366")
        return doy

    def _dates(self, df: pd.DataFrame, doy: pd.Series) -> pd.Series | None:
        if self.date_col in df.columns:
            dates = pd.to_datetime(df[self.date_col])
            if dates.isna().any():
                raise DataError(f"Found {int(dates.isna().sum())} missing dates")
            return dates
        if "year" in df.columns:
            ordinal = df["year"].astype(int) * 1000 + doy.astype(int)
            return pd.to_datetime(ordinal.astype(str), format="%Y%j")
        return None

    def validate(
        self,
        df: pd.DataFrame,
        covariates: list[str] | None = None,
        period: float = 365.0,
    ) -> ValidationResult:
        """Run validation checks on an observation table.

        Counts, covariates and day-of-year problems are errors. Gaps
        and duplicate dates only degrade power and are reported as
        warnings.

        Args:
            df: Observation table.
            covariates: Covariate columns the model will use.
            period: Seasonal period in days; the data must span at
                least one full period.

        Returns:
            ValidationResult summarizing the findings.

        Raises:
            DataError: If counts, covariates or day-of-year are invalid.
            InsufficientDataError: If less than one period is covered.
        """
        covariates = covariates or []
        if df.empty:
            raise InsufficientDataError("No observations supplied")

        self._check_counts(df)
        self._check_covariates(df, covariates)
        doy = self._day_of_year(df)
        dates = self._dates(df, doy)

        warnings: list[str] = []
        missing_count = 0
        duplicate_count = 0

        if dates is None:
            # Without dates, rows are taken to be consecutive days.
            span_days = len(df)
            warnings.append("No date or year column; assuming consecutive daily rows")
        else:
            span_days = int((dates.max() - dates.min()).days) + 1
            duplicate_count = int(dates.duplicated().sum())
            missing_count = span_days - int(dates.nunique())
            if missing_count > 0:
                warnings.append(f"Found {missing_count} missing dates in time series")
            if duplicate_count > 0:
                warnings.append(f"Found {duplicate_count} duplicate dates")

        if span_days < period:
            raise InsufficientDataError(
                f"Data span {span_days} days, less than one {period:g}-day cycle"
            )

        for w in warnings:
            logger.warning(w)

        return ValidationResult(
            is_valid=missing_count == 0 and duplicate_count == 0,
            n_obs=len(df),
            span_days=span_days,
            missing_dates_count=missing_count,
            duplicate_dates_count=duplicate_count,
            warnings=warnings,
        )


def prepare_observations(
    df: pd.DataFrame,
    covariates: list[str] | None = None,
    period: float = 365.0,
    response: str = "y",
) -> pd.DataFrame:
    """Validate an observation table and derive model features.

    When a ``date`` column is present the calendar columns are derived
    from it (overriding any supplied ``day_of_year``) and rows are
    sorted by date.

    Args:
        df: Observation table.
        covariates: Covariate columns the model will use.
        period: Seasonal period in days.
        response: Name of the count column.

    Returns:
        New DataFrame with calendar and harmonic columns.

    Raises:
        DataError: If the table fails validation.
        InsufficientDataError: If less than one period is covered.
    """
    if "date" in df.columns:
        dates = pd.to_datetime(df["date"], errors="coerce")
        if dates.isna().any():
            raise DataError(f"Found {int(dates.isna().sum())} missing or invalid dates")
        df = add_calendar_columns(df.assign(date=dates))
        df = df.sort_values("date", kind="stable").reset_index(drop=True)

    result = ObservationValidator(response=response).validate(df, covariates, period)
    logger.debug(
        "Validated %d observations spanning %d days", result.n_obs, result.span_days
    )

    return add_harmonic_features(df, period)

"""Error types raised by the seasonality testing toolkit.

Every error is terminal for the computation that raised it and is
surfaced to the caller unchanged.
"""


class SeasonalityError(Exception):
    """Base class for all seasonality testing errors."""


class DataError(SeasonalityError):
    """Raised when the observation table is malformed."""


class InsufficientDataError(DataError):
    """Raised when the data cover less than one full seasonal cycle."""


class FitError(SeasonalityError):
    """Raised when a Poisson regression cannot be fitted."""


class NumericalError(SeasonalityError):
    """Raised when harmonic coefficients cannot be back-transformed."""

"""Error taxonomy for seasonal ARIMA selection and forecasting."""


class SarimaError(Exception):
    """Base class for all errors raised by the sarima package"""


class InvalidInputError(SarimaError, ValueError):
    """Malformed series or configuration (non-numeric, too short, bad period)"""


class NonConvergenceError(SarimaError):
    """A single candidate could not be fit; the search excludes it"""

    def __init__(self, message: str, order=None):
        super().__init__(message)
        self.order = order


class NoViableModelError(SarimaError):
    """Every candidate failed to converge, there is no model to return"""


class ForecastError(SarimaError):
    """Forecast or prediction interval construction failed"""

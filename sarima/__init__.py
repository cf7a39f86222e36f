"""
Seasonal ARIMA modeling package.
Implements order search, exact maximum-likelihood fitting and forecasting.
"""

from .config import SelectionConfig
from .differencing import difference, integrate
from .estimator import SarimaEstimator
from .exceptions import (
    ForecastError,
    InvalidInputError,
    NoViableModelError,
    NonConvergenceError,
    SarimaError,
)
from .forecaster import SarimaForecaster
from .models import CandidateOutcome, FittedModel, ForecastResult, SarimaOrder, SelectionResult
from .selector import SeasonalArimaSelector

__all__ = [
    'SelectionConfig', 'difference', 'integrate',
    'SarimaEstimator', 'SarimaForecaster', 'SeasonalArimaSelector',
    'SarimaOrder', 'FittedModel', 'ForecastResult', 'CandidateOutcome', 'SelectionResult',
    'SarimaError', 'InvalidInputError', 'NonConvergenceError', 'NoViableModelError',
    'ForecastError',
]

"""
Benchmark forecasters and accuracy measures for the forecast comparison.
"""

from .accuracy import accuracy_table, forecast_accuracy
from .baselines import EtsForecaster, SeasonalNaiveForecaster, forecasts_to_frame

__all__ = ['EtsForecaster', 'SeasonalNaiveForecaster', 'forecasts_to_frame',
           'forecast_accuracy', 'accuracy_table']

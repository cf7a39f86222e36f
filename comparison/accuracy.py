"""Forecast accuracy against the observed post-cutoff values"""

from typing import Dict, List

import numpy as np
import pandas as pd

from sarima.models import ForecastResult


def forecast_accuracy(forecast: ForecastResult, actual: pd.Series) -> Dict[str, float]:
    """
    Accuracy measures on the forecast steps where the actual value is observed.

    Returns:
        Dict with ME, RMSE, MAE, MPE, MAPE (percent), coverage of the 80% and
        95% intervals (fraction of steps inside) and the number of steps used.
    """
    observed = actual.reindex(forecast.index).to_numpy(dtype=float)
    mask = ~np.isnan(observed)
    n = int(mask.sum())
    if n == 0:
        empty = {key: np.nan for key in ('ME', 'RMSE', 'MAE', 'MPE', 'MAPE',
                                          'coverage_80', 'coverage_95')}
        empty['n'] = 0
        return empty

    y = observed[mask]
    errors = y - forecast.mean[mask]
    with np.errstate(divide='ignore', invalid='ignore'):
        pct = np.where(y != 0, 100 * errors / y, np.nan)

    return {
        'ME': float(np.mean(errors)),
        'RMSE': float(np.sqrt(np.mean(errors ** 2))),
        'MAE': float(np.mean(np.abs(errors))),
        'MPE': float(np.nanmean(pct)) if np.any(~np.isnan(pct)) else np.nan,
        'MAPE': float(np.nanmean(np.abs(pct))) if np.any(~np.isnan(pct)) else np.nan,
        'coverage_80': float(np.mean((y >= forecast.lower_80[mask]) & (y <= forecast.upper_80[mask]))),
        'coverage_95': float(np.mean((y >= forecast.lower_95[mask]) & (y <= forecast.upper_95[mask]))),
        'n': n,
    }


def accuracy_table(forecasts: List[ForecastResult], actual: pd.Series) -> pd.DataFrame:
    """One row of accuracy measures per model"""
    records = []
    for forecast in forecasts:
        records.append({'model': forecast.model, **forecast_accuracy(forecast, actual)})
    return pd.DataFrame(records)

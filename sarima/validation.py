"""Input checks for series handed to the estimator and forecasters"""

from typing import Optional, Tuple

import numpy as np
import pandas as pd
from pandas.tseries.frequencies import to_offset

from .exceptions import InvalidInputError


def coerce_series(y) -> Tuple[np.ndarray, Optional[pd.Index]]:
    """Return (float values, index) for a Series, array or list.

    Missing positions stay as NaN. Infinite values, non-numeric data and
    series with no observed value are rejected.
    """
    index = None
    if isinstance(y, pd.Series):
        index = y.index
        values = y.to_numpy()
    else:
        values = np.asarray(y)

    if values.ndim != 1:
        raise InvalidInputError(f"Series must be one-dimensional, got shape {values.shape}")
    if len(values) == 0:
        raise InvalidInputError("Series is empty")

    try:
        values = values.astype(float)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Series contains non-numeric values: {e}") from e

    if np.any(np.isinf(values)):
        raise InvalidInputError("Series contains infinite values")
    if np.all(np.isnan(values)):
        raise InvalidInputError("Series has no observed values")

    return values, index


def validate_differencing(d: int, D: int, period: int) -> None:
    """Reject negative differencing orders and non-positive periods"""
    if int(period) != period or period <= 0:
        raise InvalidInputError(f"Seasonal period must be a positive integer, got {period}")
    if int(d) != d or d < 0:
        raise InvalidInputError(f"Differencing order d must be non-negative, got {d}")
    if int(D) != D or D < 0:
        raise InvalidInputError(f"Seasonal differencing order D must be non-negative, got {D}")


def forecast_index(index: Optional[pd.Index], n_total: int, horizon: int) -> pd.Index:
    """Index for `horizon` steps after a series of length `n_total`"""
    if isinstance(index, pd.DatetimeIndex) and len(index) > 0:
        freq = index.freq
        if freq is None and len(index) >= 3:
            freq = pd.infer_freq(index)
        if freq is not None:
            offset = to_offset(freq)
            return pd.date_range(start=index[-1] + offset, periods=horizon, freq=offset)
    if isinstance(index, pd.PeriodIndex) and len(index) > 0:
        return pd.period_range(start=index[-1] + 1, periods=horizon, freq=index.freq)
    return pd.RangeIndex(n_total, n_total + horizon)


def validate_horizon(horizon) -> int:
    """Forecast horizons are positive integers"""
    if isinstance(horizon, bool) or int(horizon) != horizon or horizon <= 0:
        raise InvalidInputError(f"Forecast horizon must be a positive integer, got {horizon}")
    return int(horizon)

"""
Ordinary and seasonal differencing, and the inverse integration.
"""

from typing import List

import numpy as np

from .exceptions import InvalidInputError
from .validation import validate_differencing


def _seasonal_diff(x: np.ndarray, period: int) -> np.ndarray:
    return x[period:] - x[:-period]


def difference(y, d: int = 1, D: int = 1, period: int = 12) -> np.ndarray:
    """
    Difference a series d times, then seasonally difference it D times.

    Args:
        y: Series values, NaN marks a missing observation
        d: Non-seasonal differencing order
        D: Seasonal differencing order
        period: Seasonal period (12 for monthly data)

    Returns:
        Array of length len(y) - d - D*period. Missing values propagate.
    """
    validate_differencing(d, D, period)
    x = np.asarray(y, dtype=float)
    lost = d + D * period
    if len(x) <= lost:
        raise InvalidInputError(
            f"Series of length {len(x)} is too short for d={d}, D={D}, period={period}"
        )

    for _ in range(d):
        x = np.diff(x)
    for _ in range(D):
        x = _seasonal_diff(x, period)
    return x


def _head_stages(head: np.ndarray, d: int, D: int, period: int) -> List[np.ndarray]:
    """Intermediate differencing stages computed from the leading values only"""
    stages = []
    x = head
    for _ in range(d):
        stages.append(x)
        x = np.diff(x)
    for _ in range(D):
        stages.append(x)
        x = _seasonal_diff(x, period)
    return stages


def integrate(diffed, head, d: int = 1, D: int = 1, period: int = 12) -> np.ndarray:
    """
    Invert `difference`.

    Args:
        diffed: Differenced values
        head: First d + D*period values of the original series
        d, D, period: Orders used for differencing

    Returns:
        The reconstructed series, len(diffed) + d + D*period values.
    """
    validate_differencing(d, D, period)
    head = np.asarray(head, dtype=float)
    lost = d + D * period
    if len(head) != lost:
        raise InvalidInputError(f"Need exactly {lost} leading values to integrate, got {len(head)}")

    stages = _head_stages(head, d, D, period)
    out = np.asarray(diffed, dtype=float)

    for j in reversed(range(D)):
        seeds = stages[d + j][:period]
        restored = np.empty(len(out) + period)
        restored[:period] = seeds
        for i in range(len(out)):
            restored[i + period] = out[i] + restored[i]
        out = restored

    for k in reversed(range(d)):
        first = stages[k][0]
        out = np.concatenate([[first], first + np.cumsum(out)])

    return out


def differencing_polynomial(d: int, D: int, period: int) -> np.ndarray:
    """
    Coefficients delta of (1 - B)^d (1 - B^period)^D written as
    y_t = delta_1 y_{t-1} + ... + delta_k y_{t-k} + w_t.
    """
    validate_differencing(d, D, period)
    poly = np.array([1.0])
    for _ in range(d):
        poly = np.convolve(poly, [1.0, -1.0])
    seasonal = np.zeros(period + 1)
    seasonal[0] = 1.0
    seasonal[period] = -1.0
    for _ in range(D):
        poly = np.convolve(poly, seasonal)
    return -poly[1:]

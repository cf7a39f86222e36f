import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import pytest
import numpy as np

from sarima.differencing import difference, differencing_polynomial, integrate
from sarima.exceptions import InvalidInputError


def test_difference_length(pre_series):
    """d + D*m leading values are lost"""
    w = difference(pre_series.values, d=1, D=1, period=12)
    assert len(w) == len(pre_series) - 13

    w = difference(pre_series.values, d=2, D=0, period=12)
    assert len(w) == len(pre_series) - 2


def test_no_differencing_is_identity(pre_series):
    w = difference(pre_series.values, d=0, D=0, period=12)
    np.testing.assert_array_equal(w, pre_series.values)


def test_matches_direct_formula():
    """(1-B)(1-B^12) y_t = y_t - y_{t-1} - y_{t-12} + y_{t-13}"""
    y = np.arange(40, dtype=float) ** 1.5
    w = difference(y, d=1, D=1, period=12)
    expected = y[13:] - y[12:-1] - y[1:-12] + y[:-13]
    np.testing.assert_allclose(w, expected)


@pytest.mark.parametrize("d,D", [(0, 1), (1, 0), (1, 1), (2, 1)])
def test_integrate_inverts_difference(pre_series, d, D):
    y = pre_series.values
    lost = d + 12 * D
    w = difference(y, d=d, D=D, period=12)
    restored = integrate(w, y[:lost], d=d, D=D, period=12)
    np.testing.assert_allclose(restored, y, rtol=1e-10)


def test_missing_values_propagate():
    y = np.arange(50, dtype=float)
    y[20] = np.nan
    w = difference(y, d=1, D=1, period=12)
    # One gap touches two first differences, each of which touches two seasonal ones
    assert np.isnan(w).sum() == 4


def test_too_short_series():
    with pytest.raises(InvalidInputError):
        difference(np.arange(13, dtype=float), d=1, D=1, period=12)


def test_invalid_orders():
    y = np.arange(30, dtype=float)
    with pytest.raises(InvalidInputError):
        difference(y, d=-1, D=1, period=12)
    with pytest.raises(InvalidInputError):
        difference(y, d=1, D=1, period=0)


def test_integrate_needs_exact_head():
    y = np.arange(30, dtype=float)
    w = difference(y, d=1, D=1, period=12)
    with pytest.raises(InvalidInputError):
        integrate(w, y[:12], d=1, D=1, period=12)


def test_differencing_polynomial():
    delta = differencing_polynomial(1, 1, 12)
    assert len(delta) == 13
    assert delta[0] == 1.0
    assert delta[11] == 1.0
    assert delta[12] == -1.0
    assert np.all(delta[1:11] == 0.0)

    assert len(differencing_polynomial(0, 0, 12)) == 0


if __name__ == '__main__':
    pytest.main([__file__])

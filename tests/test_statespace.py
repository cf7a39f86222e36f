import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import pytest
import numpy as np

from sarima.statespace import (
    SarimaStateSpace,
    expand_polynomials,
    min_root_modulus,
    pacf_to_coefficients,
)


def test_pacf_transform_two_lags():
    r1, r2 = np.tanh(0.3), np.tanh(-0.2)
    phi = pacf_to_coefficients(np.array([0.3, -0.2]))
    np.testing.assert_allclose(phi, [r1 * (1 - r2), r2])


@pytest.mark.parametrize("raw", [[5.0], [3.0, -4.0, 2.5], [2.0, 2.0, 2.0, 2.0]])
def test_pacf_transform_is_stationary(raw):
    """Any real input maps inside the stationarity region"""
    phi = pacf_to_coefficients(np.array(raw))
    assert min_root_modulus(-phi) > 1.0


def test_expand_polynomials():
    phi, theta = expand_polynomials([0.5], [0.4], [0.3], [0.2], period=12)
    assert len(phi) == 13
    assert phi[0] == pytest.approx(0.5)
    assert phi[11] == pytest.approx(0.3)
    assert phi[12] == pytest.approx(-0.15)
    assert theta[0] == pytest.approx(0.4)
    assert theta[11] == pytest.approx(0.2)
    assert theta[12] == pytest.approx(0.08)


def test_min_root_modulus():
    assert min_root_modulus([-0.5]) == pytest.approx(2.0)
    assert min_root_modulus([]) == np.inf
    assert min_root_modulus([0.0, 0.0]) == np.inf


def test_ar1_stationary_covariance():
    model = SarimaStateSpace(np.array([0.5]), np.array([]), np.array([]))
    assert model.P0[0, 0] == pytest.approx(1 / (1 - 0.25))


def test_filter_skips_missing(ar1_series):
    y = ar1_series.values - 10
    y[50:74] = np.nan
    model = SarimaStateSpace(np.array([0.6]), np.array([]), np.array([]))
    out = model.filter(y)
    assert out.nobs == len(y) - 24
    assert np.isfinite(out.ssq) and out.ssq > 0


def test_diffuse_levels_excluded(ar1_series):
    """A random walk loses its first observation to the diffuse prior"""
    y = np.cumsum(ar1_series.values - 10)
    model = SarimaStateSpace(np.array([]), np.array([]), np.array([1.0]))
    out = model.filter(y)
    assert out.nobs == len(y) - 1


def test_forecast_variance_nondecreasing():
    model = SarimaStateSpace(np.array([0.7]), np.array([0.3]), np.array([]))
    out = model.filter(np.random.RandomState(0).normal(size=100))
    means, variances = model.forecast(out.state_mean, out.state_cov, 24)
    assert np.all(np.diff(variances) >= -1e-12)
    # Mean reverts toward zero
    assert abs(means[-1]) < abs(means[0]) + 1e-12


def test_non_stationary_block_rejected():
    with pytest.raises(ValueError):
        SarimaStateSpace(np.array([1.0]), np.array([]), np.array([]))


if __name__ == '__main__':
    pytest.main([__file__])

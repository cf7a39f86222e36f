import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import pytest
import numpy as np
import pandas as pd

from sarima.estimator import SarimaEstimator
from sarima.exceptions import InvalidInputError
from sarima.forecaster import SarimaForecaster
from sarima.models import SarimaOrder

AIRLINE = SarimaOrder(0, 1, 1, 0, 1, 1, period=12)


@pytest.fixture
def forecaster():
    return SarimaForecaster()


@pytest.fixture
def airline_model(pre_series):
    return SarimaEstimator().fit(pre_series, AIRLINE)


@pytest.fixture
def ar1_model(ar1_series):
    order = SarimaOrder(1, 0, 0, 0, 0, 0, period=12, include_constant=True)
    return SarimaEstimator().fit(ar1_series, order)


def assert_intervals_nested(result):
    assert np.all(result.lower_95 <= result.lower_80)
    assert np.all(result.lower_80 <= result.mean)
    assert np.all(result.mean <= result.upper_80)
    assert np.all(result.upper_80 <= result.upper_95)


def test_eight_step_forecast(forecaster, airline_model):
    result = forecaster.forecast(airline_model, 8)

    assert len(result) == 8
    assert result.model == str(AIRLINE)
    assert_intervals_nested(result)
    assert np.all(np.isfinite(result.mean))


def test_forecast_index_continues_monthly(forecaster, airline_model):
    result = forecaster.forecast(airline_model, 8)
    expected = pd.date_range('2020-03-01', periods=8, freq='MS')
    assert list(result.index) == list(expected)


def test_forecast_follows_seasonal_pattern(forecaster, airline_model, post_series):
    """The airline model should track a drifting level and evolving season"""
    result = forecaster.forecast(airline_model, 8)
    errors = post_series.values - result.mean
    assert np.mean(np.abs(errors)) < 0.05 * np.mean(post_series.values)


def test_interval_widths_nondecreasing_for_ar(forecaster, ar1_model):
    result = forecaster.forecast(ar1_model, 24)
    widths_80 = result.upper_80 - result.lower_80
    widths_95 = result.upper_95 - result.lower_95
    assert np.all(np.diff(widths_80) >= -1e-9)
    assert np.all(np.diff(widths_95) >= -1e-9)
    assert_intervals_nested(result)


def test_ar_forecast_reverts_to_intercept(forecaster, ar1_model):
    result = forecaster.forecast(ar1_model, 60)
    assert result.mean[-1] == pytest.approx(ar1_model.coefficients['intercept'], abs=1e-3)


def test_range_index_without_dates(forecaster, ar1_model, ar1_series):
    result = forecaster.forecast(ar1_model, 5)
    assert list(result.index) == list(range(len(ar1_series), len(ar1_series) + 5))


def test_to_frame(forecaster, airline_model):
    frame = forecaster.forecast(airline_model, 8).to_frame()
    assert list(frame.columns) == ['mean', 'lower_80', 'upper_80', 'lower_95', 'upper_95']
    assert len(frame) == 8


@pytest.mark.parametrize("horizon", [0, -3, 2.5])
def test_invalid_horizon(forecaster, airline_model, horizon):
    with pytest.raises(InvalidInputError):
        forecaster.forecast(airline_model, horizon)


if __name__ == '__main__':
    pytest.main([__file__])

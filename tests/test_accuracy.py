import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import pytest
import numpy as np
import pandas as pd

from comparison.accuracy import accuracy_table, forecast_accuracy
from sarima.models import ForecastResult


@pytest.fixture
def forecast():
    index = pd.date_range('2020-03-01', periods=4, freq='MS')
    mean = np.array([100.0, 100.0, 100.0, 100.0])
    return ForecastResult(
        model='TEST',
        index=index,
        mean=mean,
        lower_80=mean - 5,
        upper_80=mean + 5,
        lower_95=mean - 10,
        upper_95=mean + 10,
    )


def test_accuracy_measures(forecast):
    actual = pd.Series([110.0, 90.0, 104.0, 100.0], index=forecast.index)
    result = forecast_accuracy(forecast, actual)

    assert result['n'] == 4
    assert result['ME'] == pytest.approx(1.0)
    assert result['MAE'] == pytest.approx(6.0)
    assert result['RMSE'] == pytest.approx(np.sqrt((100 + 100 + 16) / 4))
    expected_pct = np.array([10 / 110, -10 / 90, 4 / 104, 0.0]) * 100
    assert result['MPE'] == pytest.approx(expected_pct.mean())
    assert result['MAPE'] == pytest.approx(np.abs(expected_pct).mean())
    assert result['coverage_80'] == pytest.approx(0.5)
    assert result['coverage_95'] == pytest.approx(1.0)


def test_missing_actuals_are_skipped(forecast):
    actual = pd.Series([110.0, np.nan], index=forecast.index[:2])
    result = forecast_accuracy(forecast, actual)
    assert result['n'] == 1
    assert result['ME'] == pytest.approx(10.0)


def test_no_overlap(forecast):
    actual = pd.Series([1.0], index=[pd.Timestamp('2010-01-01')])
    result = forecast_accuracy(forecast, actual)
    assert result['n'] == 0
    assert np.isnan(result['RMSE'])


def test_accuracy_table(forecast):
    actual = pd.Series([100.0] * 4, index=forecast.index)
    table = accuracy_table([forecast, forecast], actual)
    assert list(table['model']) == ['TEST', 'TEST']
    assert list(table.columns[:6]) == ['model', 'ME', 'RMSE', 'MAE', 'MPE', 'MAPE']
    assert (table['RMSE'] == 0).all()


if __name__ == '__main__':
    pytest.main([__file__])

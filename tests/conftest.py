import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import pytest
import numpy as np
import pandas as pd

from sarima.config import SelectionConfig

CUTOFF = '2020-02'


def make_monthly_series(start='2012-01-01', periods=106, seed=42):
    """
    Drifting random-walk level plus an evolving seasonal pattern plus noise,
    roughly the scale of national counts. The stochastic level and season
    keep airline-model MA terms away from the invertibility boundary.
    """
    rng = np.random.RandomState(seed)
    t = np.arange(periods)

    level = 50000 + np.cumsum(250 + rng.normal(0, 400, periods))

    seasonal = 3000 * np.sin(2 * np.pi * t / 12) + 1200 * np.cos(4 * np.pi * t / 12)
    shocks = rng.normal(0, 600, periods)
    for i in range(12, periods):
        seasonal[i] = seasonal[i - 12] + shocks[i]

    values = level + seasonal + rng.normal(0, 600, periods)
    index = pd.date_range(start, periods=periods, freq='MS')
    return pd.Series(values, index=index, name='count')


@pytest.fixture
def monthly_series():
    """Jan-2012 .. Oct-2020: 98 pre-cutoff months plus 8 after"""
    return make_monthly_series()


@pytest.fixture
def pre_series(monthly_series):
    """The 98 months Jan-2012 .. Feb-2020"""
    pre = monthly_series[:CUTOFF]
    return pre.asfreq('MS')


@pytest.fixture
def post_series(monthly_series):
    return monthly_series['2020-03':].asfreq('MS')


@pytest.fixture
def ar1_series():
    """Stationary AR(1) with phi=0.6 around a mean of 10"""
    rng = np.random.RandomState(7)
    n = 300
    x = np.zeros(n)
    e = rng.normal(0, 1, n)
    for i in range(1, n):
        x[i] = 0.6 * x[i - 1] + e[i]
    return pd.Series(10 + x)


@pytest.fixture
def small_config():
    """Search small enough for quick tests"""
    return SelectionConfig(max_p=1, max_q=1, max_P=1, max_Q=1, max_order=2)

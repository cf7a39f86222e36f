import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import pytest
import numpy as np
import pandas as pd

from data_manager.data_loader import SeriesLoader, blank_block, split_series
from data_manager.data_validator import SeriesValidator
from sarima.exceptions import InvalidInputError


@pytest.fixture
def loader():
    return SeriesLoader()


@pytest.fixture
def raw_frame(monthly_series):
    return pd.DataFrame({
        'date': monthly_series.index.strftime('%Y-%m-%d'),
        'count': monthly_series.values,
    })


def test_load_csv(loader, raw_frame, tmp_path):
    path = tmp_path / "counts.csv"
    frame = raw_frame.copy()
    frame['count'] = frame['count'].round(0).astype(object)
    frame.loc[5, 'count'] = 'NA'
    frame.to_csv(path, index=False)

    series = loader.load_csv(path)
    assert len(series) == 106
    assert series.index.freqstr == 'MS'
    assert np.isnan(series.iloc[5])
    assert series.isna().sum() == 1


def test_absent_months_become_missing(loader, raw_frame):
    frame = raw_frame.drop(index=[10, 11, 12])
    series = loader.from_frame(frame)
    assert len(series) == 106
    assert series.iloc[10:13].isna().all()
    assert series.index[0] == pd.Timestamp('2012-01-01')


def test_unsorted_rows(loader, raw_frame):
    series = loader.from_frame(raw_frame.iloc[::-1])
    assert series.index.is_monotonic_increasing
    assert series.iloc[0] == raw_frame['count'].iloc[0]


def test_invalid_frame_raises(loader, raw_frame):
    frame = raw_frame.copy()
    frame.loc[3, 'count'] = -5
    with pytest.raises(InvalidInputError):
        loader.from_frame(frame)


def test_validator_issues(raw_frame):
    validator = SeriesValidator()

    is_valid, issues = validator.validate_frame(raw_frame)
    assert is_valid and issues == []

    frame = raw_frame.copy()
    frame['count'] = frame['count'].astype(object)
    frame.loc[2, 'count'] = 'lots'
    frame.loc[4, 'date'] = frame.loc[3, 'date']
    frame.loc[7, 'count'] = -1.0
    is_valid, issues = validator.validate_frame(frame)
    assert not is_valid
    assert any('non-numeric' in issue for issue in issues)
    assert any('duplicated months' in issue for issue in issues)
    assert any('negative' in issue for issue in issues)

    is_valid, issues = validator.validate_frame(raw_frame.rename(columns={'count': 'n'}))
    assert not is_valid
    assert 'Missing required columns' in issues[0]


def test_validator_allows_negative_when_asked(raw_frame):
    frame = raw_frame.copy()
    frame.loc[7, 'count'] = -1.0
    is_valid, _ = SeriesValidator(allow_negative=True).validate_frame(frame)
    assert is_valid


def test_split_series(monthly_series):
    pre, post = split_series(monthly_series, '2020-02')
    assert len(pre) == 98
    assert len(post) == 8
    assert pre.index[-1] == pd.Timestamp('2020-02-01')
    assert post.index[0] == pd.Timestamp('2020-03-01')

    with pytest.raises(InvalidInputError):
        split_series(monthly_series, '2005-01')


def test_blank_block(monthly_series):
    blanked = blank_block(monthly_series, '2016-01', 24)
    assert blanked.isna().sum() == 24
    assert blanked['2016-01':'2017-12'].isna().all()
    assert not blanked['2018-01':].isna().any()
    assert not monthly_series.isna().any()

    with pytest.raises(InvalidInputError):
        blank_block(monthly_series, '2020-01', 24)
    with pytest.raises(InvalidInputError):
        blank_block(monthly_series, '2016-01', 0)


if __name__ == '__main__':
    pytest.main([__file__])

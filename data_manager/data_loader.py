"""
Loading of monthly prescription counts and the segment/blanking helpers
used by the comparison workflow.
"""

import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
import pandas as pd

from data_manager.data_validator import SeriesValidator
from sarima.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

MISSING_MARKERS = ['', 'NA', 'N/A', 'NaN', 'nan', 'null', '.', '-']


class SeriesLoader:
    def __init__(self, validator: SeriesValidator = None):
        """Initialize loader with a validator for the raw table."""
        self.validator = validator or SeriesValidator()
        self.logger = logging.getLogger('data_manager.loader')

    def load_csv(self, file_path: Union[str, Path], date_column: str = 'date',
                 value_column: str = 'count') -> pd.Series:
        """Read a (date, count) CSV into a month-start series."""
        self.logger.info(f"Loading monthly series from {file_path}")
        df = pd.read_csv(file_path, na_values=MISSING_MARKERS, keep_default_na=True)
        return self.from_frame(df, date_column=date_column, value_column=value_column)

    def from_frame(self, df: pd.DataFrame, date_column: str = 'date',
                   value_column: str = 'count') -> pd.Series:
        """
        Convert a validated table to a float series on a complete monthly index.

        Months absent from the table become NaN so the timeline stays regular.
        """
        is_valid, issues = self.validator.validate_frame(df, date_column, value_column)
        if not is_valid:
            for issue in issues:
                self.logger.error(issue)
            raise InvalidInputError("Invalid monthly series: " + "; ".join(issues))

        months = pd.to_datetime(df[date_column]).dt.to_period('M').dt.to_timestamp()
        values = pd.to_numeric(df[value_column], errors='coerce').astype(float)
        series = pd.Series(values.to_numpy(), index=pd.DatetimeIndex(months)).sort_index()

        full_index = pd.date_range(series.index[0], series.index[-1], freq='MS')
        series = series.reindex(full_index)
        series.name = value_column
        series.index.name = 'date'

        self._log_summary(series)
        return series

    def _log_summary(self, series: pd.Series):
        n_missing = int(series.isna().sum())
        self.logger.info(
            f"Loaded {len(series)} months from {series.index[0]:%Y-%m} to "
            f"{series.index[-1]:%Y-%m} ({n_missing} missing)"
        )
        if n_missing:
            self.logger.info(
                f"Missing months: {', '.join(f'{d:%Y-%m}' for d in series.index[series.isna()][:12])}"
                + (" ..." if n_missing > 12 else "")
            )


def split_series(series: pd.Series, cutoff: Union[str, pd.Timestamp]) -> Tuple[pd.Series, pd.Series]:
    """Split into (up to and including cutoff month, after cutoff month)."""
    cutoff = pd.Timestamp(cutoff).to_period('M').to_timestamp()
    pre = series[series.index <= cutoff]
    post = series[series.index > cutoff]
    if pre.empty:
        raise InvalidInputError(f"No observations on or before cutoff {cutoff:%Y-%m}")
    if isinstance(series.index, pd.DatetimeIndex) and series.index.freq is not None:
        pre = pre.asfreq(series.index.freq)
        if not post.empty:
            post = post.asfreq(series.index.freq)
    return pre, post


def blank_block(series: pd.Series, start: Union[str, pd.Timestamp], months: int = 24) -> pd.Series:
    """Copy of the series with `months` consecutive months from `start` set to NaN."""
    if months <= 0:
        raise InvalidInputError(f"Block length must be positive, got {months}")
    start = pd.Timestamp(start).to_period('M').to_timestamp()
    end = start + pd.DateOffset(months=months - 1)
    if start < series.index[0] or end > series.index[-1]:
        raise InvalidInputError(
            f"Block {start:%Y-%m}..{end:%Y-%m} is outside the series "
            f"{series.index[0]:%Y-%m}..{series.index[-1]:%Y-%m}"
        )
    blanked = series.copy()
    blanked[(blanked.index >= start) & (blanked.index <= end)] = np.nan
    logger.info(f"Blanked {months} months from {start:%Y-%m} to {end:%Y-%m}")
    return blanked

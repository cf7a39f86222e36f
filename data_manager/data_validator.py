"""
Validation of tabular monthly count data before it becomes a series.
"""

import pandas as pd
import numpy as np
from typing import List, Tuple

class SeriesValidator:
    """Validates a (date, count) table for monthly forecasting."""

    def __init__(self, allow_negative: bool = False):
        self.allow_negative = allow_negative

    def validate_frame(self, df: pd.DataFrame, date_column: str = 'date',
                       value_column: str = 'count') -> Tuple[bool, List[str]]:
        """
        Validates the raw table.

        Args:
            df: DataFrame read from the source file
            date_column: Column holding the month
            value_column: Column holding the counts

        Returns:
            Tuple of (is_valid, list_of_issues)
        """
        issues = []

        missing_cols = [col for col in (date_column, value_column) if col not in df.columns]
        if missing_cols:
            issues.append(f"Missing required columns: {missing_cols}")
            return False, issues

        if df.empty:
            issues.append("Table has no rows")
            return False, issues

        # Dates must parse
        dates = pd.to_datetime(df[date_column], errors='coerce')
        bad_dates = df.loc[dates.isna(), date_column]
        if not bad_dates.empty:
            issues.append(
                f"{len(bad_dates)} unparseable dates (first: {bad_dates.iloc[0]!r})"
            )

        # One row per month
        months = dates.dropna().dt.to_period('M')
        duplicated = months[months.duplicated()]
        if not duplicated.empty:
            issues.append(
                f"{len(duplicated)} duplicated months (first: {duplicated.iloc[0]})"
            )

        # Counts must be numeric where present; blanks are missing markers
        values = pd.to_numeric(df[value_column], errors='coerce')
        non_numeric = df.loc[values.isna() & df[value_column].notna(), value_column]
        non_numeric = non_numeric[non_numeric.astype(str).str.strip() != '']
        if not non_numeric.empty:
            issues.append(
                f"{value_column}: {len(non_numeric)} non-numeric values "
                f"(first: {non_numeric.iloc[0]!r})"
            )

        issues.extend(self._validate_bounds(values, value_column))

        return len(issues) == 0, issues

    def _validate_bounds(self, series: pd.Series, name: str) -> List[str]:
        """Counts cannot be negative or infinite."""
        issues = []

        infinite = series[np.isinf(series)]
        if not infinite.empty:
            issues.append(f"{name}: {len(infinite)} infinite values (first at row {infinite.index[0]})")

        if not self.allow_negative:
            below_min = series[series < 0]
            if not below_min.empty:
                issues.append(
                    f"{name}: {len(below_min)} negative counts "
                    f"(first occurrence at row {below_min.index[0]})"
                )

        return issues

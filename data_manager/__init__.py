"""
Data management package for the prescription forecast comparison.
Handles loading, validation, and storage.
"""

from .data_loader import SeriesLoader, blank_block, split_series
from .data_validator import SeriesValidator
from .database import ForecastDatabase

__all__ = ['SeriesLoader', 'SeriesValidator', 'ForecastDatabase',
           'blank_block', 'split_series']

"""Utility functions and classes for the forecasting workflow"""

from .progress import ProgressMonitor

__all__ = ['ProgressMonitor']

"""End-to-end forecast comparison workflows"""

from .pandemic_comparison import run_pandemic_comparison, run_scenario, summarize

__all__ = ['run_pandemic_comparison', 'run_scenario', 'summarize']

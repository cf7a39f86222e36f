from dataclasses import dataclass
from typing import Tuple

from .exceptions import InvalidInputError

SEARCH_MODES = ('exhaustive', 'stepwise')


@dataclass
class SelectionConfig:
    """Options recognised by the order search, fit and forecast"""
    seasonal_period: int = 12
    d: int = 1
    D: int = 1
    max_p: int = 5
    max_q: int = 5
    max_P: int = 2
    max_Q: int = 2
    max_order: int = 5  # cap on p + q + P + Q
    search_mode: str = 'exhaustive'
    horizon: int = 8
    exact_likelihood: bool = True
    allow_constant: bool = True
    max_iterations: int = 200
    n_jobs: int = 1
    max_stepwise_models: int = 94
    show_progress: bool = False

    def __post_init__(self):
        if int(self.seasonal_period) != self.seasonal_period or self.seasonal_period <= 0:
            raise InvalidInputError(
                f"seasonal_period must be a positive integer, got {self.seasonal_period}"
            )
        for name in ('d', 'D', 'max_p', 'max_q', 'max_P', 'max_Q', 'max_order'):
            value = getattr(self, name)
            if int(value) != value or value < 0:
                raise InvalidInputError(f"{name} must be a non-negative integer, got {value}")
        if self.search_mode not in SEARCH_MODES:
            raise InvalidInputError(
                f"search_mode must be one of {SEARCH_MODES}, got '{self.search_mode}'"
            )
        if int(self.horizon) != self.horizon or self.horizon <= 0:
            raise InvalidInputError(f"horizon must be a positive integer, got {self.horizon}")
        if self.max_iterations <= 0:
            raise InvalidInputError("max_iterations must be positive")
        if self.n_jobs < 1:
            raise InvalidInputError("n_jobs must be at least 1")
        if self.max_stepwise_models < 1:
            raise InvalidInputError("max_stepwise_models must be at least 1")

        # Seasonal ARMA terms are meaningless without a season
        if self.seasonal_period == 1:
            self.max_P = 0
            self.max_Q = 0

    @property
    def max_orders(self) -> Tuple[int, int, int, int]:
        """Bounds (p_max, q_max, P_max, Q_max)"""
        return self.max_p, self.max_q, self.max_P, self.max_Q

    @property
    def constant_allowed(self) -> bool:
        return self.allow_constant and self.d + self.D < 2

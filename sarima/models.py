"""Data classes shared by the estimator, selector and forecasters."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class SarimaOrder:
    """(p, d, q)(P, D, Q)[period] with an optional mean/drift term"""
    p: int
    d: int
    q: int
    P: int = 0
    D: int = 0
    Q: int = 0
    period: int = 12
    include_constant: bool = False

    @property
    def n_coefficients(self) -> int:
        """ARMA coefficients plus the constant, if any"""
        return self.p + self.q + self.P + self.Q + int(self.include_constant)

    @property
    def constant_name(self) -> Optional[str]:
        if not self.include_constant:
            return None
        return 'intercept' if self.d + self.D == 0 else 'drift'

    def __str__(self) -> str:
        label = f"ARIMA({self.p},{self.d},{self.q})({self.P},{self.D},{self.Q})[{self.period}]"
        if self.include_constant:
            label += f" with {self.constant_name}"
        return label


@dataclass(frozen=True, eq=False)
class FittedModel:
    """Container for a fitted seasonal ARIMA model"""
    order: SarimaOrder
    coefficients: Dict[str, float]
    sigma2: float
    loglik: float
    aic: float
    aicc: float
    bic: float
    nobs: int  # observations contributing to the likelihood
    n_total: int  # length of the fitted timeline, missing positions included
    n_missing: int
    method: str  # 'ML' or 'CSS'
    state_mean: np.ndarray  # one-step-ahead state after the last observation
    state_cov: np.ndarray  # in units of sigma2
    index: Optional[pd.Index] = None

    @property
    def n_params(self) -> int:
        """Estimated parameters, sigma2 included"""
        return self.order.n_coefficients + 1


@dataclass(frozen=True, eq=False)
class ForecastResult:
    """Point forecasts with 80% and 95% prediction intervals"""
    model: str
    index: pd.Index
    mean: np.ndarray
    lower_80: np.ndarray
    upper_80: np.ndarray
    lower_95: np.ndarray
    upper_95: np.ndarray

    def __len__(self) -> int:
        return len(self.mean)

    def to_frame(self) -> pd.DataFrame:
        """One row per forecast step"""
        return pd.DataFrame({
            'mean': self.mean,
            'lower_80': self.lower_80,
            'upper_80': self.upper_80,
            'lower_95': self.lower_95,
            'upper_95': self.upper_95,
        }, index=self.index)


@dataclass(frozen=True, eq=False)
class CandidateOutcome:
    """Result of fitting one candidate order during the search"""
    index: int
    order: SarimaOrder
    model: Optional[FittedModel] = None
    error: Optional[str] = None

    @property
    def converged(self) -> bool:
        return self.model is not None

    @property
    def aicc(self) -> float:
        return self.model.aicc if self.model is not None else np.inf


@dataclass(frozen=True, eq=False)
class SelectionResult:
    """Best model of a search plus every candidate that was tried"""
    best: FittedModel
    candidates: List[CandidateOutcome] = field(default_factory=list)
    search_mode: str = 'exhaustive'

    @property
    def n_converged(self) -> int:
        return sum(1 for c in self.candidates if c.converged)

    def to_frame(self) -> pd.DataFrame:
        records = []
        for candidate in self.candidates:
            order = candidate.order
            records.append({
                'index': candidate.index,
                'order': str(order),
                'p': order.p, 'q': order.q, 'P': order.P, 'Q': order.Q,
                'constant': order.include_constant,
                'aicc': candidate.model.aicc if candidate.converged else np.nan,
                'loglik': candidate.model.loglik if candidate.converged else np.nan,
                'converged': candidate.converged,
                'error': candidate.error,
                'selected': candidate.converged and candidate.model is self.best,
            })
        return pd.DataFrame(records)

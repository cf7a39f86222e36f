from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence, Tuple
import logging

import numpy as np
import pandas as pd

from utils.progress import ProgressMonitor
from .config import SelectionConfig
from .estimator import SarimaEstimator
from .exceptions import NoViableModelError, NonConvergenceError
from .forecaster import SarimaForecaster
from .models import CandidateOutcome, ForecastResult, SarimaOrder, SelectionResult
from .orders import enumerate_orders, neighbours, stepwise_seeds
from .validation import coerce_series, validate_horizon

logger = logging.getLogger(__name__)

# Relative AICc difference treated as a tie
TIE_TOLERANCE = 1e-9


def _fit_candidate(estimator: SarimaEstimator, y: pd.Series, position: int,
                   order: SarimaOrder) -> CandidateOutcome:
    """Fit one candidate; non-convergence is recorded, not raised"""
    try:
        model = estimator.fit(y, order)
    except NonConvergenceError as e:
        return CandidateOutcome(index=position, order=order, error=str(e))
    return CandidateOutcome(index=position, order=order, model=model)


def select_best(outcomes: Sequence[CandidateOutcome]) -> Optional[CandidateOutcome]:
    """
    Minimum AICc; ties go to fewer parameters, then earlier enumeration.

    Candidates within TIE_TOLERANCE (relative) of the minimum count as tied,
    so the winner may exceed the smallest AICc by at most that tolerance.
    """
    converged = [c for c in outcomes if c.converged and np.isfinite(c.aicc)]
    if not converged:
        return None
    best_aicc = min(c.aicc for c in converged)
    tolerance = TIE_TOLERANCE * max(1.0, abs(best_aicc))
    tied = [c for c in converged if c.aicc - best_aicc <= tolerance]
    return min(tied, key=lambda c: (c.model.n_params, c.index))


class SeasonalArimaSelector:
    """Searches seasonal ARIMA orders and keeps the model with the lowest AICc"""

    def __init__(self, config: Optional[SelectionConfig] = None):
        self.config = config or SelectionConfig()
        self.estimator = SarimaEstimator(
            max_iterations=self.config.max_iterations,
            exact_likelihood=self.config.exact_likelihood,
        )
        self.forecaster = SarimaForecaster()
        self.logger = logging.getLogger('sarima.selector')

    def _evaluate(self, y: pd.Series, orders: List[SarimaOrder], start: int,
                  monitor: ProgressMonitor) -> List[CandidateOutcome]:
        """Fit a batch of candidates, serially or on a process pool"""
        outcomes: Dict[int, CandidateOutcome] = {}

        if self.config.n_jobs > 1 and len(orders) > 1:
            with ProcessPoolExecutor(max_workers=self.config.n_jobs) as executor:
                futures = [
                    executor.submit(_fit_candidate, self.estimator, y, start + i, order)
                    for i, order in enumerate(orders)
                ]
                for future in as_completed(futures):
                    outcome = future.result()
                    outcomes[outcome.index] = outcome
                    self._log_outcome(outcome)
                    monitor.update(status=str(outcome.order))
        else:
            for i, order in enumerate(orders):
                outcome = _fit_candidate(self.estimator, y, start + i, order)
                outcomes[outcome.index] = outcome
                self._log_outcome(outcome)
                monitor.update(status=str(outcome.order))

        return [outcomes[k] for k in sorted(outcomes)]

    def _log_outcome(self, outcome: CandidateOutcome):
        if outcome.converged:
            self.logger.info(f"{outcome.order}: AICc={outcome.aicc:.3f}")
        else:
            self.logger.warning(f"Excluded {outcome.order}: {outcome.error}")

    def _exhaustive(self, y: pd.Series) -> List[CandidateOutcome]:
        orders = enumerate_orders(self.config)
        self.logger.info(f"Exhaustive search over {len(orders)} candidate orders")
        with ProgressMonitor(total=len(orders), desc="Fitting candidates",
                             logger=self.logger,
                             disable=not self.config.show_progress) as monitor:
            return self._evaluate(y, orders, 0, monitor)

    def _stepwise(self, y: pd.Series) -> List[CandidateOutcome]:
        max_models = self.config.max_stepwise_models
        outcomes: List[CandidateOutcome] = []
        visited = set()

        with ProgressMonitor(total=max_models, desc="Stepwise search",
                             logger=self.logger,
                             disable=not self.config.show_progress) as monitor:

            def evaluate(orders):
                orders = orders[:max_models - len(outcomes)]
                visited.update(orders)
                batch = self._evaluate(y, orders, len(outcomes), monitor)
                outcomes.extend(batch)
                return batch

            evaluate(stepwise_seeds(self.config))
            best = select_best(outcomes)
            if best is None:
                return outcomes

            while len(outcomes) < max_models:
                candidates = [o for o in neighbours(best.order, self.config) if o not in visited]
                if not candidates:
                    break
                challenger = select_best(evaluate(candidates))
                if challenger is None:
                    break
                tolerance = TIE_TOLERANCE * max(1.0, abs(best.aicc))
                if challenger.aicc >= best.aicc - tolerance:
                    break
                self.logger.info(
                    f"Stepwise move {best.order} -> {challenger.order} "
                    f"(AICc {best.aicc:.3f} -> {challenger.aicc:.3f})"
                )
                best = challenger

        return outcomes

    def select(self, y) -> SelectionResult:
        """
        Fit every candidate allowed by the configuration and keep the best.

        Args:
            y: Monthly series (pd.Series, array or list), NaN for missing

        Returns:
            SelectionResult with the best FittedModel and all candidate outcomes

        Raises:
            InvalidInputError: malformed series
            NoViableModelError: no candidate converged
        """
        values, index = coerce_series(y)
        series = pd.Series(values, index=index)
        n_missing = int(np.isnan(values).sum())
        self.logger.info(
            f"Selecting seasonal ARIMA for {len(values)} observations "
            f"({n_missing} missing), d={self.config.d}, D={self.config.D}, "
            f"period={self.config.seasonal_period}, mode={self.config.search_mode}"
        )

        if self.config.search_mode == 'stepwise':
            outcomes = self._stepwise(series)
        else:
            outcomes = self._exhaustive(series)

        best = select_best(outcomes)
        if best is None:
            raise NoViableModelError(
                f"None of the {len(outcomes)} candidate models converged"
            )

        result = SelectionResult(best=best.model, candidates=outcomes,
                                 search_mode=self.config.search_mode)
        self.logger.info(
            f"Selected {best.order} with AICc={best.aicc:.3f} "
            f"({result.n_converged}/{len(outcomes)} candidates converged)"
        )
        return result

    def select_and_forecast(self, y, horizon: Optional[int] = None
                            ) -> Tuple[SelectionResult, ForecastResult]:
        """Select the best model and forecast it `horizon` steps ahead (config horizon if None)"""
        horizon = validate_horizon(self.config.horizon if horizon is None else horizon)
        selection = self.select(y)
        forecast = self.forecaster.forecast(selection.best, horizon)
        return selection, forecast

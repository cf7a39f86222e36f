"""
Benchmark forecasters compared against the seasonal ARIMA selection:
seasonal naive and automatically selected exponential smoothing (ETS).
"""

from typing import List, Optional, Tuple
import logging
import warnings

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.tsa.exponential_smoothing.ets import ETSModel

from sarima.exceptions import ForecastError, InvalidInputError, NoViableModelError
from sarima.models import ForecastResult
from sarima.validation import coerce_series, forecast_index, validate_horizon

logger = logging.getLogger(__name__)

Z_80 = stats.norm.ppf(0.90)
Z_95 = stats.norm.ppf(0.975)


def longest_contiguous(values: np.ndarray) -> Tuple[int, int]:
    """(start, stop) of the longest run without NaN; the first run wins ties"""
    best = (0, 0)
    run_start = None
    for i, observed in enumerate(~np.isnan(values)):
        if observed and run_start is None:
            run_start = i
        if not observed and run_start is not None:
            if i - run_start > best[1] - best[0]:
                best = (run_start, i)
            run_start = None
    if run_start is not None and len(values) - run_start > best[1] - best[0]:
        best = (run_start, len(values))
    return best


class SeasonalNaiveForecaster:
    """Repeats the last observed value at the same position in the season"""

    def __init__(self, seasonal_period: int = 12):
        if int(seasonal_period) != seasonal_period or seasonal_period <= 0:
            raise InvalidInputError(
                f"seasonal_period must be a positive integer, got {seasonal_period}"
            )
        self.seasonal_period = int(seasonal_period)
        self.logger = logging.getLogger('comparison.snaive')

    def forecast(self, y, horizon: int) -> ForecastResult:
        """
        Seasonal naive forecasts with normal prediction intervals.

        Missing values are walked over by whole seasons; the variance of a
        forecast sourced k seasons back is k * sigma2, where sigma2 is the
        mean squared seasonal difference.
        """
        horizon = validate_horizon(horizon)
        values, index = coerce_series(y)
        n, m = len(values), self.seasonal_period
        if n <= m:
            raise InvalidInputError(f"Need more than {m} observations, got {n}")

        resid = values[m:] - values[:-m]
        resid = resid[~np.isnan(resid)]
        if len(resid) == 0:
            raise ForecastError("No complete seasonal difference to estimate the error variance")
        sigma2 = float(np.mean(resid ** 2))
        if sigma2 <= 0:
            raise ForecastError("Seasonal naive error variance is zero")

        means = np.empty(horizon)
        seasons_back = np.empty(horizon)
        for j in range(horizon):
            pos = n - m + (j % m)
            while pos >= 0 and np.isnan(values[pos]):
                pos -= m
            if pos < 0:
                raise ForecastError(f"No observed value for seasonal position of step {j + 1}")
            means[j] = values[pos]
            seasons_back[j] = (n + j - pos) // m

        se = np.sqrt(sigma2 * seasons_back)
        self.logger.info(f"Seasonal naive forecast for {horizon} steps, sigma={np.sqrt(sigma2):.1f}")

        return ForecastResult(
            model='SNAIVE',
            index=forecast_index(index, n, horizon),
            mean=means,
            lower_80=means - Z_80 * se,
            upper_80=means + Z_80 * se,
            lower_95=means - Z_95 * se,
            upper_95=means + Z_95 * se,
        )


class EtsForecaster:
    """Selects an exponential smoothing state-space model by AICc"""

    def __init__(self, seasonal_period: int = 12,
                 max_iterations: int = 1000,
                 random_seed: Optional[int] = 42):
        """
        Args:
            seasonal_period: Season length; seasonal models need two full seasons
            max_iterations: Optimizer iteration cap per candidate
            random_seed: Seed for simulated intervals of multiplicative models
        """
        self.seasonal_period = seasonal_period
        self.max_iterations = max_iterations
        self.random_seed = random_seed
        self.logger = logging.getLogger('comparison.ets')

    def _specs(self, y) -> List[Tuple[str, Optional[str], bool, Optional[str]]]:
        positive = bool(np.all(y > 0))
        errors = ['add', 'mul'] if positive else ['add']
        trends = [(None, False), ('add', False), ('add', True)]
        seasonals = [None]
        if self.seasonal_period > 1 and len(y) >= 2 * self.seasonal_period:
            seasonals += ['add', 'mul'] if positive else ['add']

        specs = []
        for error in errors:
            for trend, damped in trends:
                for seasonal in seasonals:
                    # Additive errors with multiplicative seasonality are unstable
                    if error == 'add' and seasonal == 'mul':
                        continue
                    specs.append((error, trend, damped, seasonal))
        return specs

    @staticmethod
    def label(error: str, trend: Optional[str], damped: bool, seasonal: Optional[str]) -> str:
        code = {'add': 'A', 'mul': 'M', None: 'N'}
        trend_code = code[trend] + ('d' if damped else '')
        return f"ETS({code[error]},{trend_code},{code[seasonal]})"

    def fit(self, y: pd.Series):
        """Fit every admissible ETS specification and return (results, label) of the best"""
        best = None
        for error, trend, damped, seasonal in self._specs(y):
            label = self.label(error, trend, damped, seasonal)
            try:
                with warnings.catch_warnings():
                    warnings.simplefilter('ignore')
                    model = ETSModel(
                        y,
                        error=error,
                        trend=trend,
                        damped_trend=damped,
                        seasonal=seasonal,
                        seasonal_periods=self.seasonal_period if seasonal else None,
                    )
                    result = model.fit(disp=False, maxiter=self.max_iterations)
            except Exception as e:
                self.logger.warning(f"Error fitting {label}: {str(e)}")
                continue

            aicc = result.aicc
            if not np.isfinite(aicc):
                self.logger.warning(f"Excluded {label}: AICc is not finite")
                continue
            self.logger.info(f"{label}: AICc={aicc:.3f}")
            if best is None or aicc < best[0]:
                best = (aicc, result, label)

        if best is None:
            raise NoViableModelError("No exponential smoothing model could be fit")
        self.logger.info(f"Selected {best[2]} with AICc={best[0]:.3f}")
        return best[1], best[2]

    def forecast(self, y, horizon: int) -> ForecastResult:
        """
        Forecast `horizon` steps after the end of `y`.

        With missing values the model is fit to the longest contiguous
        stretch; if that stretch ends early, the forecast runs through the gap
        and only the requested final steps are returned.
        """
        horizon = validate_horizon(horizon)
        values, index = coerce_series(y)
        start, stop = longest_contiguous(values)
        # statsmodels prediction results need an indexed series
        piece = pd.Series(values[start:stop], index=pd.RangeIndex(stop - start))
        if start > 0 or stop < len(values):
            self.logger.warning(
                f"Series has missing values, fitting ETS on positions {start}..{stop - 1}"
            )
        if len(piece) < 4:
            raise InvalidInputError(f"Longest contiguous stretch has only {len(piece)} values")

        result, label = self.fit(piece)
        gap = len(values) - stop
        steps = horizon + gap

        try:
            prediction = result.get_prediction(
                start=len(piece), end=len(piece) + steps - 1,
                random_state=self.random_seed
            )
            frame_80 = prediction.summary_frame(alpha=0.2)
            frame_95 = prediction.summary_frame(alpha=0.05)
        except (ValueError, np.linalg.LinAlgError) as e:
            raise ForecastError(f"Could not build prediction intervals for {label}: {e}") from e

        tail = slice(gap, gap + horizon)
        means = np.asarray(frame_80['mean'])[tail]
        bounds = [
            np.asarray(frame_80['pi_lower'])[tail], np.asarray(frame_80['pi_upper'])[tail],
            np.asarray(frame_95['pi_lower'])[tail], np.asarray(frame_95['pi_upper'])[tail],
        ]
        if not all(np.all(np.isfinite(b)) for b in [means] + bounds):
            raise ForecastError(f"Non-finite forecasts from {label}")

        return ForecastResult(
            model=label,
            index=forecast_index(index, len(values), horizon),
            mean=means,
            lower_80=bounds[0],
            upper_80=bounds[1],
            lower_95=bounds[2],
            upper_95=bounds[3],
        )


def forecasts_to_frame(forecasts: List[ForecastResult],
                       actual: Optional[pd.Series] = None) -> pd.DataFrame:
    """Stack forecasts into long form, one row per model and step"""
    frames = []
    for forecast in forecasts:
        frame = forecast.to_frame().rename_axis('date').reset_index()
        frame.insert(0, 'model', forecast.model)
        frame.insert(1, 'step', np.arange(1, len(forecast) + 1))
        if actual is not None:
            frame['actual'] = actual.reindex(forecast.index).to_numpy()
        frames.append(frame)
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)

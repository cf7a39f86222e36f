import logging

import numpy as np
from scipy import stats

from .estimator import constant_regressor, state_space_from_coefficients
from .exceptions import ForecastError
from .models import FittedModel, ForecastResult
from .validation import forecast_index, validate_horizon

logger = logging.getLogger(__name__)

Z_80 = stats.norm.ppf(0.90)
Z_95 = stats.norm.ppf(0.975)


class SarimaForecaster:
    """Produces point forecasts and Gaussian prediction intervals from a fitted model"""

    def __init__(self):
        self.logger = logging.getLogger('sarima.forecaster')

    def forecast(self, model: FittedModel, horizon: int) -> ForecastResult:
        """
        Forecast `horizon` steps past the end of the fitted series.

        The filtered state is propagated through the transition equation, so
        missing observations inside the fitting window were already
        accounted for by the filter. Interval widths never shrink with the
        horizon since the error variance accumulates squared psi weights.

        Raises:
            InvalidInputError: horizon is not a positive integer
            ForecastError: the forecast error variance is not positive and finite
        """
        horizon = validate_horizon(horizon)

        try:
            state_space = state_space_from_coefficients(model.order, model.coefficients)
            means, variances = state_space.forecast(model.state_mean, model.state_cov, horizon)
        except (ValueError, np.linalg.LinAlgError) as e:
            raise ForecastError(f"Could not propagate state for {model.order}: {e}") from e

        order = model.order
        if order.include_constant:
            regressor = constant_regressor(order, model.n_total, model.n_total + horizon)
            means = means + model.coefficients[order.constant_name] * regressor

        variances = variances * model.sigma2
        if not np.all(np.isfinite(variances)) or np.any(variances <= 0):
            raise ForecastError(
                f"Forecast error variance is not positive for {order}: "
                f"min={np.nanmin(variances):.6g}"
            )
        if not np.all(np.isfinite(means)):
            raise ForecastError(f"Non-finite point forecasts for {order}")

        se = np.sqrt(variances)
        self.logger.info(
            f"Forecast {order} for {horizon} steps: "
            f"mean {means[0]:.1f} -> {means[-1]:.1f}, se {se[0]:.1f} -> {se[-1]:.1f}"
        )

        return ForecastResult(
            model=str(order),
            index=forecast_index(model.index, model.n_total, horizon),
            mean=means,
            lower_80=means - Z_80 * se,
            upper_80=means + Z_80 * se,
            lower_95=means - Z_95 * se,
            upper_95=means + Z_95 * se,
        )

from typing import Dict, Tuple
import logging
import warnings

import numpy as np
from scipy import optimize
from scipy.signal import lfilter

from .differencing import difference, differencing_polynomial
from .exceptions import InvalidInputError, NonConvergenceError
from .models import FittedModel, SarimaOrder
from .statespace import (
    SarimaStateSpace,
    expand_polynomials,
    min_root_modulus,
    pacf_to_coefficients,
)
from .validation import coerce_series, validate_differencing

logger = logging.getLogger(__name__)

# Objective value returned where the likelihood cannot be evaluated
PENALTY = 1e10
# Fitted polynomials with a root closer to the unit circle than this are rejected
MIN_ROOT_MODULUS = 1.01


def coefficient_names(order: SarimaOrder) -> list:
    names = [f"ar{i}" for i in range(1, order.p + 1)]
    names += [f"ma{i}" for i in range(1, order.q + 1)]
    names += [f"sar{i}" for i in range(1, order.P + 1)]
    names += [f"sma{i}" for i in range(1, order.Q + 1)]
    if order.include_constant:
        names.append(order.constant_name)
    return names


def state_space_from_coefficients(order: SarimaOrder,
                                  coefficients: Dict[str, float]) -> SarimaStateSpace:
    """Rebuild the state-space form of a fitted model"""
    ar = [coefficients[f"ar{i}"] for i in range(1, order.p + 1)]
    ma = [coefficients[f"ma{i}"] for i in range(1, order.q + 1)]
    sar = [coefficients[f"sar{i}"] for i in range(1, order.P + 1)]
    sma = [coefficients[f"sma{i}"] for i in range(1, order.Q + 1)]
    phi, theta = expand_polynomials(ar, ma, sar, sma, order.period)
    delta = differencing_polynomial(order.d, order.D, order.period)
    return SarimaStateSpace(phi, theta, delta)


def constant_regressor(order: SarimaOrder, start: int, stop: int) -> np.ndarray:
    """Mean (all ones) or drift (time index 1..n) regressor for positions [start, stop)"""
    if order.d + order.D == 0:
        return np.ones(stop - start)
    return np.arange(start + 1, stop + 1, dtype=float)


class SarimaEstimator:
    """Fits a single seasonal ARIMA order by maximum likelihood"""

    def __init__(self, max_iterations: int = 200, exact_likelihood: bool = True):
        """
        Initialize estimator

        Args:
            max_iterations: Iteration cap for each BFGS run
            exact_likelihood: Maximise the exact Kalman-filter likelihood. When
                False the conditional sum of squares is used instead.
        """
        if max_iterations <= 0:
            raise InvalidInputError("max_iterations must be positive")
        self.max_iterations = max_iterations
        self.exact_likelihood = exact_likelihood
        self.logger = logging.getLogger('sarima.estimator')

    def _unpack(self, params: np.ndarray, order: SarimaOrder):
        p, q, P, Q = order.p, order.q, order.P, order.Q
        i = 0
        ar = pacf_to_coefficients(params[i:i + p]); i += p
        ma = -pacf_to_coefficients(params[i:i + q]); i += q
        sar = pacf_to_coefficients(params[i:i + P]); i += P
        sma = -pacf_to_coefficients(params[i:i + Q]); i += Q
        beta = params[i] if order.include_constant else 0.0
        return ar, ma, sar, sma, beta

    def _css_objective(self, params, order, w, dx) -> Tuple[float, float, int]:
        ar, ma, sar, sma, beta = self._unpack(params, order)
        phi, theta = expand_polynomials(ar, ma, sar, sma, order.period)
        x = w - beta * dx if order.include_constant else w

        ncond = len(phi)
        if len(x) <= ncond:
            return PENALTY, np.nan, 0
        u = np.zeros(len(x))
        u[ncond:] = lfilter(np.r_[1.0, -phi], [1.0], x)[ncond:]
        resid = lfilter([1.0], np.r_[1.0, theta], u)[ncond:]
        ssq = float(resid @ resid)
        nu = len(resid)
        if not np.isfinite(ssq) or ssq <= 0:
            return PENALTY, ssq, nu
        return 0.5 * np.log(ssq / nu), ssq, nu

    def _ml_objective(self, params, order, y, regressor, delta) -> float:
        try:
            ar, ma, sar, sma, beta = self._unpack(params, order)
            phi, theta = expand_polynomials(ar, ma, sar, sma, order.period)
            model = SarimaStateSpace(phi, theta, delta)
            u = y - beta * regressor if order.include_constant else y
            out = model.filter(u)
        except (ValueError, np.linalg.LinAlgError):
            return PENALTY
        if out.nobs == 0 or out.ssq <= 0:
            return PENALTY
        value = 0.5 * np.log(out.ssq / out.nobs) + 0.5 * out.sumlog / out.nobs
        return value if np.isfinite(value) else PENALTY

    def _minimize(self, fn, x0: np.ndarray, order: SarimaOrder, label: str) -> np.ndarray:
        if len(x0) == 0:
            if fn(x0) >= PENALTY:
                raise NonConvergenceError(f"{order}: {label} objective cannot be evaluated", order)
            return x0

        result = optimize.minimize(
            fn, x0, method='BFGS',
            options={'maxiter': self.max_iterations, 'disp': False}
        )
        # status 2 (precision loss) is accepted, the optimum is usually fine
        if result.status == 1:
            raise NonConvergenceError(
                f"{order}: {label} optimizer hit {self.max_iterations} iterations", order
            )
        if result.status == 3 or not np.isfinite(result.fun) or result.fun >= PENALTY:
            raise NonConvergenceError(f"{order}: {label} objective is not finite", order)
        return result.x

    def fit(self, y, order: SarimaOrder) -> FittedModel:
        """
        Fit one candidate order.

        Args:
            y: Observed series (pd.Series, array or list), NaN for missing
            order: Candidate order

        Returns:
            FittedModel with coefficients, sigma2, log-likelihood and AICc

        Raises:
            InvalidInputError: malformed series or order
            NonConvergenceError: the fit failed or is not stationary/invertible
        """
        values, index = coerce_series(y)
        validate_differencing(order.d, order.D, order.period)
        if min(order.p, order.q, order.P, order.Q) < 0:
            raise InvalidInputError(f"ARMA orders must be non-negative: {order}")
        if order.include_constant and order.d + order.D >= 2:
            raise InvalidInputError(f"A constant is not allowed when d + D >= 2: {order}")

        n = len(values)
        w = difference(values, order.d, order.D, order.period)
        if not np.any(np.isfinite(w)):
            raise InvalidInputError("No complete observation remains after differencing")

        scale = float(np.nanstd(w))
        if not np.isfinite(scale) or scale <= 0:
            scale = 1.0
        ys = values / scale
        ws = w / scale

        regressor = constant_regressor(order, 0, n)
        dx = difference(regressor, order.d, order.D, order.period)
        delta = differencing_polynomial(order.d, order.D, order.period)

        x0 = np.zeros(order.n_coefficients)
        if order.include_constant:
            x0[-1] = np.nanmean(ws) / dx[0]

        complete = not np.any(np.isnan(ws))
        css_fn = lambda params: self._css_objective(params, order, ws, dx)[0]
        ml_fn = lambda params: self._ml_objective(params, order, ys, regressor, delta)

        with warnings.catch_warnings():
            warnings.simplefilter('ignore', RuntimeWarning)

            if self.exact_likelihood:
                if complete:
                    try:
                        x0 = self._minimize(css_fn, x0, order, 'CSS')
                    except NonConvergenceError as e:
                        self.logger.debug(f"CSS starting values unavailable, using zeros: {e}")
                params = self._minimize(ml_fn, x0, order, 'ML')
                method = 'ML'
            else:
                if not complete:
                    raise InvalidInputError(
                        "Conditional sum of squares needs a series without missing values; "
                        "use exact_likelihood=True"
                    )
                params = self._minimize(css_fn, x0, order, 'CSS')
                method = 'CSS'

        ar, ma, sar, sma, beta = self._unpack(params, order)
        phi, theta = expand_polynomials(ar, ma, sar, sma, order.period)
        ar_root = min_root_modulus(-phi)
        ma_root = min_root_modulus(theta)
        if ar_root < MIN_ROOT_MODULUS:
            raise NonConvergenceError(
                f"{order}: AR part is close to non-stationary (root modulus {ar_root:.4f})", order
            )
        if ma_root < MIN_ROOT_MODULUS:
            raise NonConvergenceError(
                f"{order}: MA part is close to non-invertible (root modulus {ma_root:.4f})", order
            )

        try:
            state_space = SarimaStateSpace(phi, theta, delta)
            u = ys - beta * regressor if order.include_constant else ys
            out = state_space.filter(u)
        except (ValueError, np.linalg.LinAlgError) as e:
            raise NonConvergenceError(f"{order}: filter failed at the optimum: {e}", order) from e

        if method == 'ML':
            nobs = out.nobs
            sigma2_scaled = out.ssq / nobs
            loglik_scaled = -0.5 * (nobs * (np.log(2 * np.pi * sigma2_scaled) + 1) + out.sumlog)
        else:
            _, ssq, nobs = self._css_objective(params, order, ws, dx)
            sigma2_scaled = ssq / nobs
            loglik_scaled = -0.5 * nobs * (np.log(2 * np.pi * sigma2_scaled) + 1)

        loglik = loglik_scaled - nobs * np.log(scale)
        sigma2 = sigma2_scaled * scale ** 2

        k = order.n_coefficients + 1
        if nobs - k - 1 <= 0:
            raise NonConvergenceError(
                f"{order}: {nobs} effective observations are too few for {k} parameters", order
            )
        aic = -2 * loglik + 2 * k
        aicc = -2 * loglik + 2 * k * nobs / (nobs - k - 1)
        bic = -2 * loglik + k * np.log(nobs)
        if not np.isfinite(aicc):
            raise NonConvergenceError(f"{order}: AICc is not finite", order)

        values_out = list(ar) + list(ma) + list(sar) + list(sma)
        if order.include_constant:
            values_out.append(beta * scale)
        coefficients = dict(zip(coefficient_names(order), (float(v) for v in values_out)))

        self.logger.debug(f"{order}: loglik={loglik:.3f} AICc={aicc:.3f} nobs={nobs}")

        return FittedModel(
            order=order,
            coefficients=coefficients,
            sigma2=float(sigma2),
            loglik=float(loglik),
            aic=float(aic),
            aicc=float(aicc),
            bic=float(bic),
            nobs=int(nobs),
            n_total=n,
            n_missing=int(np.isnan(values).sum()),
            method=method,
            state_mean=out.state_mean * scale,
            state_cov=out.state_cov,
            index=index,
        )

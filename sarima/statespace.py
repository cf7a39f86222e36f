"""
State-space form of a seasonal ARIMA model and its Kalman filter.

The ARMA part uses Harvey's representation with state dimension
r = max(p + P*m, q + Q*m + 1). The differencing polynomial is carried in the
state as the last d + D*m levels of the series, initialised diffusely, so the
filter runs on the undifferenced series and simply skips missing
observations.
"""

from typing import NamedTuple, Tuple

import numpy as np
from scipy import linalg

DIFFUSE_VARIANCE = 1e6
# Prediction variances at or above this are still dominated by the diffuse
# prior and do not enter the likelihood
DIFFUSE_GAIN_LIMIT = 1e4


def pacf_to_coefficients(unconstrained: np.ndarray) -> np.ndarray:
    """
    Map unconstrained reals to stationary AR coefficients.

    Each value is squashed to a partial autocorrelation in (-1, 1) with tanh
    and the Durbin-Levinson recursion builds phi for
    y_t = phi_1 y_{t-1} + ... + phi_k y_{t-k} + e_t.
    """
    r = np.tanh(np.asarray(unconstrained, dtype=float))
    phi = np.zeros(len(r))
    for k in range(len(r)):
        prev = phi[:k].copy()
        phi[:k] = prev - r[k] * prev[::-1]
        phi[k] = r[k]
    return phi


def expand_polynomials(ar: np.ndarray, ma: np.ndarray,
                       sar: np.ndarray, sma: np.ndarray,
                       period: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Multiply out the non-seasonal and seasonal polynomials.

    Returns (phi, theta) with
    (1 - phi_1 B - ...) = (1 - ar(B)) (1 - sar(B^m)) and
    (1 + theta_1 B + ...) = (1 + ma(B)) (1 + sma(B^m)).
    """
    def seasonal_poly(coefs, sign):
        poly = np.zeros(len(coefs) * period + 1)
        poly[0] = 1.0
        for j, c in enumerate(coefs, start=1):
            poly[j * period] = sign * c
        return poly

    ar_poly = np.convolve(np.r_[1.0, -np.asarray(ar, dtype=float)], seasonal_poly(sar, -1.0))
    ma_poly = np.convolve(np.r_[1.0, np.asarray(ma, dtype=float)], seasonal_poly(sma, 1.0))
    return -ar_poly[1:], ma_poly[1:]


def min_root_modulus(coefs: np.ndarray) -> float:
    """Smallest root modulus of 1 + c_1 z + ... + c_k z^k (inf for a constant)"""
    poly = np.r_[1.0, np.asarray(coefs, dtype=float)]
    nonzero = np.flatnonzero(np.abs(poly) > 1e-12)
    poly = poly[:nonzero[-1] + 1]
    if len(poly) <= 1:
        return np.inf
    return float(np.min(np.abs(np.roots(poly[::-1]))))


class FilterOutput(NamedTuple):
    ssq: float  # sum of squared standardized innovations
    sumlog: float  # sum of log prediction variances
    nobs: int  # observations that entered the likelihood
    state_mean: np.ndarray  # one-step-ahead prediction after the last observation
    state_cov: np.ndarray


class SarimaStateSpace:
    """System matrices for an ARIMA process with unit innovation variance"""

    def __init__(self, phi: np.ndarray, theta: np.ndarray, delta: np.ndarray):
        self.phi = np.asarray(phi, dtype=float)
        self.theta = np.asarray(theta, dtype=float)
        self.delta = np.asarray(delta, dtype=float)

        r = max(len(self.phi), len(self.theta) + 1)
        nd = len(self.delta)
        dim = r + nd
        self.r = r
        self.dim = dim

        T = np.zeros((dim, dim))
        T[:len(self.phi), 0] = self.phi
        for i in range(r - 1):
            T[i, i + 1] = 1.0

        Z = np.zeros(dim)
        Z[0] = 1.0
        Z[r:] = self.delta

        if nd:
            # Newest level y_t = Z alpha_t, older levels shift down
            T[r, :] = Z
            for i in range(1, nd):
                T[r + i, r + i - 1] = 1.0

        R = np.zeros(dim)
        R[0] = 1.0
        R[1:len(self.theta) + 1] = self.theta

        self.T = T
        self.Z = Z
        self.RR = np.outer(R, R)
        self.P0 = self._initial_covariance()

    def _initial_covariance(self) -> np.ndarray:
        r = self.r
        P0 = np.zeros((self.dim, self.dim))
        stationary = linalg.solve_discrete_lyapunov(self.T[:r, :r], self.RR[:r, :r])
        stationary = 0.5 * (stationary + stationary.T)
        if not np.all(np.isfinite(stationary)) or np.any(np.diag(stationary) < 0):
            raise ValueError("ARMA block has no stationary covariance")
        P0[:r, :r] = stationary
        P0[r:, r:] = DIFFUSE_VARIANCE * np.eye(self.dim - r)
        return P0

    def filter(self, y: np.ndarray) -> FilterOutput:
        """Run the Kalman filter over y, skipping NaN observations"""
        T, TT, Z, RR = self.T, self.T.T, self.Z, self.RR
        a = np.zeros(self.dim)
        P = self.P0.copy()
        ssq = 0.0
        sumlog = 0.0
        nobs = 0

        for value in y:
            if not np.isnan(value):
                M = P @ Z
                F = Z @ M
                if not np.isfinite(F) or F <= 0:
                    raise ValueError(f"Degenerate prediction variance {F}")
                v = value - Z @ a
                if F < DIFFUSE_GAIN_LIMIT:
                    ssq += v * v / F
                    sumlog += np.log(F)
                    nobs += 1
                a = a + M * (v / F)
                P = P - np.outer(M, M) / F
            a = T @ a
            P = T @ P @ TT + RR

        P = 0.5 * (P + P.T)
        return FilterOutput(ssq, sumlog, nobs, a, P)

    def forecast(self, state_mean: np.ndarray, state_cov: np.ndarray,
                 horizon: int) -> Tuple[np.ndarray, np.ndarray]:
        """Means and variances (unit innovation variance) for 1..horizon steps"""
        T, TT, Z, RR = self.T, self.T.T, self.Z, self.RR
        a = np.array(state_mean, dtype=float)
        P = np.array(state_cov, dtype=float)
        means = np.empty(horizon)
        variances = np.empty(horizon)
        for h in range(horizon):
            means[h] = Z @ a
            variances[h] = Z @ P @ Z
            a = T @ a
            P = T @ P @ TT + RR
        return means, variances

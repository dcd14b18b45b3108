"""Closed-form caplet volatilities of the four-parameter exponential form.

The instantaneous volatility of a forward rate with time-to-maturity ``t`` is

``f(t) = (a + b t) exp(-c t) + d``

and the caplet (Black-76, lognormal) volatility for time-to-maturity ``τ`` is
the root-mean-square of ``f`` over ``[0, τ]``:

``capVol(τ)^2 = 1/τ ∫_0^τ f(t)^2 dt``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

ArrayLike = Union[float, np.ndarray]

_SERIES_THRESHOLD = 0.5
_SERIES_TERMS = 24


def _exp_moment(k: int, gamma: float, tau: np.ndarray) -> np.ndarray:
    """Return ``∫_0^τ t^k exp(-γ t) dt`` for ``k`` in ``{0, 1, 2}``.

    Small ``|γ τ|`` uses the power series, which stays accurate where the
    closed form cancels (and covers ``γ = 0``).
    """

    x = gamma * tau

    with np.errstate(over="ignore", invalid="ignore"):
        series = np.zeros_like(tau)
        term = np.ones_like(tau)
        for n in range(_SERIES_TERMS):
            series = series + term / (n + k + 1)
            term = term * (-x) / (n + 1)
        series = series * np.power(tau, k + 1)

    if gamma == 0.0:
        return series

    with np.errstate(over="ignore", invalid="ignore"):
        decay = np.exp(-x)
        if k == 0:
            closed = -np.expm1(-x) / gamma
        elif k == 1:
            closed = (1.0 - decay * (1.0 + x)) / gamma**2
        else:
            closed = (2.0 - decay * (x * x + 2.0 * x + 2.0)) / gamma**3

    return np.where(np.abs(x) < _SERIES_THRESHOLD, series, closed)


@dataclass(frozen=True)
class CapletVolatilityParametric:
    """Caplet volatility curve implied by ``f(t) = (a + b t) exp(-c t) + d``.

    Attributes:
        a: Initial volatility level.
        b: Slope at the short end, shortly before maturity.
        c: Exponential decay of the volatility in time-to-maturity.
        d: Very long term volatility level if ``c > 0``.
    """

    a: float
    b: float
    c: float
    d: float

    def instantaneous_volatility(self, time_to_maturity: ArrayLike) -> np.ndarray:
        t = np.asarray(time_to_maturity, dtype=float)
        return (self.a + self.b * t) * np.exp(-self.c * t) + self.d

    def integrated_variance(self, time_to_maturity: ArrayLike) -> np.ndarray:
        """Return the signed integral ``∫_0^τ f(t)^2 dt``.

        For ``τ < 0`` the form is continued analytically and the integral is
        negative, so differences of integrated variances stay non-negative
        across a period's fixing.
        """

        tau = np.asarray(time_to_maturity, dtype=float)
        a, b, c, d = self.a, self.b, self.c, self.d

        squared = (
            a * a * _exp_moment(0, 2.0 * c, tau)
            + 2.0 * a * b * _exp_moment(1, 2.0 * c, tau)
            + b * b * _exp_moment(2, 2.0 * c, tau)
        )
        cross = 2.0 * d * (a * _exp_moment(0, c, tau) + b * _exp_moment(1, c, tau))
        return squared + cross + d * d * tau

    def value(self, time_to_maturity: ArrayLike) -> np.ndarray:
        """Return the lognormal caplet volatility for ``time_to_maturity``.

        The value at ``τ = 0`` is zero.
        """

        tau = np.asarray(time_to_maturity, dtype=float)
        nonzero = tau != 0.0
        safe_tau = np.where(nonzero, tau, 1.0)
        mean_variance = np.maximum(self.integrated_variance(tau) / safe_tau, 0.0)
        return np.where(nonzero, np.sqrt(mean_variance), 0.0)


__all__ = ["CapletVolatilityParametric"]

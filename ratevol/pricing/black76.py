from __future__ import annotations

"""Black-76 caplet pricing for turning quoted caplet volatilities into targets."""

import numpy as np
from scipy.optimize import brentq
from scipy.stats import norm
from typing import Union

ArrayLike = Union[float, np.ndarray]


def black76_caplet_price(
    forward: ArrayLike,
    strike: ArrayLike,
    volatility: ArrayLike,
    fixing_time: ArrayLike,
    period_length: ArrayLike,
    discount_factor: ArrayLike,
):
    """Black-76 value of a caplet on a forward rate.

    Parameters
    ----------
    forward : array-like
        Forward rate of the period.
    strike : array-like
        Caplet strike rate.
    volatility : array-like
        Lognormal (Black) caplet volatility.
    fixing_time : array-like
        Time to the fixing of the rate in years.
    period_length : array-like
        Accrual period length in years.
    discount_factor : array-like
        Discount factor to the payment date.
    """
    F = np.asarray(forward, dtype=float)
    K = np.asarray(strike, dtype=float)
    sigma = np.asarray(volatility, dtype=float)
    t = np.asarray(fixing_time, dtype=float)

    eps = 1e-12
    intrinsic = np.maximum(F - K, 0.0)
    std = sigma * np.sqrt(np.maximum(t, 0.0))
    safe_std = np.where(std < eps, 1.0, std)

    d1 = (np.log(F / K) + 0.5 * safe_std**2) / safe_std
    d2 = d1 - safe_std
    undiscounted = np.where(std < eps, intrinsic, F * norm.cdf(d1) - K * norm.cdf(d2))
    return np.asarray(discount_factor, dtype=float) * np.asarray(period_length, dtype=float) * undiscounted


def black76_caplet_implied_volatility(
    price: float,
    forward: float,
    strike: float,
    fixing_time: float,
    period_length: float,
    discount_factor: float,
) -> float:
    """Invert :func:`black76_caplet_price` with Brent's method.

    Returns ``nan`` when the price lies outside the no-arbitrage range or no
    root is bracketed in ``[1e-6, 5]``.
    """

    if fixing_time <= 0:
        return np.nan

    annuity = discount_factor * period_length
    lower = annuity * max(forward - strike, 0.0)
    upper = annuity * forward
    if price < lower or price > upper:
        return np.nan

    def pricing_error(sigma: float) -> float:
        value = black76_caplet_price(
            forward, strike, sigma, fixing_time, period_length, discount_factor
        )
        return float(value) - price

    try:
        return brentq(pricing_error, 1e-6, 5.0)
    except ValueError:
        return np.nan


__all__ = ["black76_caplet_price", "black76_caplet_implied_volatility"]

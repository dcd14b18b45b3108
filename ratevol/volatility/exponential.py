"""Four-parameter exponential volatility model bootstrapped from caplet volatilities."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from ratevol.core.parameters import as_parameter_vector
from ratevol.core.time_discretization import TimeDiscretization
from ratevol.volatility.base import ParametricVolatilityModel
from ratevol.volatility.caplet import CapletVolatilityParametric

NUMBER_OF_PARAMETERS = 4


class FourParameterExponentialVolatilityModel(ParametricVolatilityModel):
    """Instantaneous volatility from the integrated exponential form.

    For simulation interval ``[t_i, t_{i+1})`` and tenor time ``T_j``

    ``σ_j(t_i)^2 = (v(T_j - t_i) - v(T_j - t_{i+1})) / (t_{i+1} - t_i)``

    where ``v(τ) = capVol(τ)^2 τ`` is the integrated caplet variance of
    :class:`CapletVolatilityParametric`. Negative finite differences are
    clamped to zero before taking the square root.

    Args:
        time_discretization: Simulation time grid ``t_i``.
        tenor_discretization: Tenor (period) times ``T_j``.
        a: Initial volatility level.
        b: Slope at the short end, shortly before maturity.
        c: Exponential decay of the volatility in time-to-maturity.
        d: Very long term volatility level if ``c > 0``.
        is_calibrateable: Whether the parameters are exposed for calibration.
    """

    def __init__(
        self,
        time_discretization: TimeDiscretization,
        tenor_discretization: TimeDiscretization,
        a: float,
        b: float,
        c: float,
        d: float,
        is_calibrateable: bool = True,
    ):
        super().__init__(time_discretization)
        self._tenor_discretization = tenor_discretization
        self._parameters = as_parameter_vector((a, b, c, d))
        self._is_calibrateable = bool(is_calibrateable)
        self._caplet = CapletVolatilityParametric(
            float(a), float(b), float(c), float(d)
        )

    @property
    def tenor_discretization(self) -> TimeDiscretization:
        return self._tenor_discretization

    @property
    def caplet_volatility(self) -> CapletVolatilityParametric:
        return self._caplet

    @property
    def is_calibrateable(self) -> bool:
        return self._is_calibrateable

    def get_parameter(self) -> Optional[np.ndarray]:
        if not self._is_calibrateable:
            return None
        return self._parameters

    def get_clone_with_modified_parameters(
        self, parameters: Sequence[float] | np.ndarray
    ) -> "FourParameterExponentialVolatilityModel":
        if not self._is_calibrateable:
            return self

        vector = as_parameter_vector(parameters, length=NUMBER_OF_PARAMETERS)
        if np.array_equal(vector, self._parameters):
            return self

        return FourParameterExponentialVolatilityModel(
            self.time_discretization,
            self._tenor_discretization,
            *vector,
            is_calibrateable=self._is_calibrateable,
        )

    def _instantaneous_variance(
        self,
        time_start: np.ndarray,
        time_end: np.ndarray,
        maturity: np.ndarray,
    ) -> np.ndarray:
        vol_start = self._caplet.value(maturity - time_start)
        vol_end = self._caplet.value(maturity - time_end)

        variance_start = vol_start * vol_start * (maturity - time_start)
        variance_end = vol_end * vol_end * (maturity - time_end)
        variance = (variance_start - variance_end) / (time_end - time_start)

        return np.maximum(variance, 0.0)

    def get_volatility(self, time_index: int, tenor_index: int) -> float:
        time_start = self.time_discretization.get_time(time_index)
        time_end = self.time_discretization.get_time(time_index + 1)
        maturity = self._tenor_discretization.get_time(tenor_index)

        variance = self._instantaneous_variance(
            np.asarray(time_start), np.asarray(time_end), np.asarray(maturity)
        )
        return float(np.sqrt(variance))

    def volatility_matrix(self) -> np.ndarray:
        """Return ``get_volatility(i, j)`` for every cell, shape ``(time steps, tenors)``."""

        times = self.time_discretization.times
        maturities = self._tenor_discretization.times
        variance = self._instantaneous_variance(
            times[:-1, np.newaxis], times[1:, np.newaxis], maturities[np.newaxis, :]
        )
        return np.sqrt(variance)

    def to_frame(self) -> pd.DataFrame:
        """Return the volatility matrix indexed by interval start time and tenor time."""

        frame = pd.DataFrame(
            self.volatility_matrix(),
            index=pd.Index(self.time_discretization.times[:-1], name="time"),
            columns=pd.Index(self._tenor_discretization.times, name="tenor"),
        )
        return frame


__all__ = ["FourParameterExponentialVolatilityModel", "NUMBER_OF_PARAMETERS"]

"""Volatility model abstractions consumed by short-rate simulations.

A volatility model maps a grid cell (simulation-time interval ``i``, tenor
``j``) to an instantaneous volatility. Parametric models additionally expose a
parameter vector and can produce modified copies of themselves, which is what
the calibration engine drives.

Models are immutable: calibration never mutates an instance, it only asks for
clones with different parameters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

import numpy as np

from ratevol.core.time_discretization import TimeDiscretization

if TYPE_CHECKING:  # pragma: no cover
    from ratevol.calibration.config import CalibrationConfig
    from ratevol.calibration.interfaces import ShortRateModel, SimulationBuilder
    from ratevol.calibration.products import CalibrationProduct


class ShortRateVolatilityModel(ABC):
    """Volatility structure defined on a simulation-time grid.

    Args:
        time_discretization: Simulation times ``t_0 < ... < t_n``. Grid cell
            ``i`` is the interval ``[t_i, t_{i+1})``.
    """

    def __init__(self, time_discretization: TimeDiscretization):
        self._time_discretization = time_discretization

    @property
    def time_discretization(self) -> TimeDiscretization:
        return self._time_discretization

    @abstractmethod
    def get_volatility(self, time_index: int, tenor_index: int) -> float:
        """Return the instantaneous volatility of grid cell ``(time_index, tenor_index)``."""


class ParametricVolatilityModel(ShortRateVolatilityModel):
    """Volatility model described by a real-valued parameter vector.

    A model that is not calibrateable reports ``None`` from
    :meth:`get_parameter` and returns itself from
    :meth:`get_clone_with_modified_parameters`.
    """

    @abstractmethod
    def get_parameter(self) -> Optional[np.ndarray]:
        """Return the parameter vector, or ``None`` if the model is not calibrateable."""

    @abstractmethod
    def get_clone_with_modified_parameters(
        self, parameters: Sequence[float] | np.ndarray
    ) -> "ParametricVolatilityModel":
        """Return a model with the same grids and the given parameters.

        Implementations may return ``self`` when ``parameters`` equals the
        current vector, and must return ``self`` when not calibrateable.
        """

    @property
    def is_calibrateable(self) -> bool:
        return self.get_parameter() is not None

    def get_clone_calibrated(
        self,
        calibration_model: "ShortRateModel",
        calibration_products: Sequence["CalibrationProduct"],
        simulation_builder: "SimulationBuilder",
        config: "CalibrationConfig | Mapping[str, Any] | None" = None,
    ) -> "ParametricVolatilityModel":
        """Return a clone whose parameters best reproduce ``calibration_products``.

        See :func:`ratevol.calibration.calibrate` for the arguments and the
        full calibration result.

        Raises:
            CalibrationError: If the optimizer, the simulation builder or the
                valuation runtime fails.
        """

        from ratevol.calibration.engine import calibrate

        result = calibrate(
            self,
            calibration_model,
            calibration_products,
            simulation_builder,
            config=config,
        )
        return result.model

    def __repr__(self) -> str:
        parameters = self.get_parameter()
        shown = None if parameters is None else parameters.tolist()
        return f"{type(self).__name__}(parameters={shown})"


__all__ = ["ShortRateVolatilityModel", "ParametricVolatilityModel"]

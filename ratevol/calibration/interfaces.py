"""Protocols for the collaborators of the calibration engine."""

from __future__ import annotations

from typing import Any, Callable, Protocol, Sequence

import numpy as np

from ratevol.volatility.base import ShortRateVolatilityModel


ObjectiveFunction = Callable[[np.ndarray], np.ndarray]
"""Maps a trial parameter vector to the vector of model values."""


class ShortRateModel(Protocol):
    """Short-rate model whose volatility structure can be substituted."""

    def with_volatility_model(self, volatility_model: ShortRateVolatilityModel) -> Any:
        """Return a new model instance using ``volatility_model``; must not mutate ``self``."""
        ...


class ValuationProduct(Protocol):
    """Instrument that can be valued against a simulation."""

    def get_value(self, evaluation_time: float, simulation: Any) -> float | np.ndarray:
        """Return the value, either a scalar or per-path values to be averaged."""
        ...


SimulationBuilder = Callable[[Any, Any], Any]
"""Builds a valuation-capable simulation from ``(short_rate_model, brownian_motion)``."""


class Optimizer(Protocol):
    """Iterative solver driving ``objective(x) - target`` to zero."""

    def run(self) -> None:
        ...

    def get_best_fit_parameters(self) -> np.ndarray:
        ...

    def get_iterations(self) -> int:
        ...


class OptimizerFactory(Protocol):
    """Builds an :class:`Optimizer` for one calibration problem."""

    def get_optimizer(
        self,
        objective_function: ObjectiveFunction,
        initial_parameters: np.ndarray,
        lower_bound: np.ndarray,
        upper_bound: np.ndarray,
        parameter_step: np.ndarray,
        target_values: np.ndarray,
    ) -> Optimizer:
        ...


class ValuationExecutor(Protocol):
    """Runs independent valuation tasks and returns their results in order."""

    def run_all(self, tasks: Sequence[Callable[[], Any]]) -> list[Any]:
        ...

    def close(self) -> None:
        ...

    def __enter__(self) -> "ValuationExecutor":
        ...

    def __exit__(self, *exc_info: Any) -> None:
        ...


__all__ = [
    "ObjectiveFunction",
    "ShortRateModel",
    "ValuationProduct",
    "SimulationBuilder",
    "Optimizer",
    "OptimizerFactory",
    "ValuationExecutor",
]

"""Objective function mapping trial parameters to weighted pricing residuals."""

from __future__ import annotations

import math
from typing import Any, Sequence

import numpy as np

from ratevol.calibration.interfaces import (
    ShortRateModel,
    SimulationBuilder,
    ValuationExecutor,
)
from ratevol.calibration.products import CalibrationProduct, ValuationOutcome
from ratevol.core.errors import CalculationError, SolverError
from ratevol.logging import get_logger
from ratevol.volatility.base import ParametricVolatilityModel

logger = get_logger(__name__)

EVALUATION_TIME = 0.0


def value_calibration_product(
    index: int, calibration_product: CalibrationProduct, simulation: Any
) -> ValuationOutcome:
    """Value one product and return its weighted residual ``w (value - target)``.

    Any exception raised by the product, or a non-finite value, yields a
    failed outcome instead of propagating.
    """

    try:
        values = np.asarray(
            calibration_product.product.get_value(EVALUATION_TIME, simulation),
            dtype=float,
        )
        value = float(np.mean(values))
        if not math.isfinite(value):
            raise CalculationError(f"Non-finite value {value!r}")
    except Exception as exc:
        logger.debug("Valuation of calibration product %d failed: %r", index, exc)
        return ValuationOutcome.failure(exc)

    residual = calibration_product.weight * (value - calibration_product.target_value)
    return ValuationOutcome.success(residual)


class CalibrationObjective:
    """Residual vector of the calibration products for a trial parameter vector.

    Each call clones the volatility model with the trial parameters, swaps it
    into ``calibration_model``, builds a simulation with the shared
    ``brownian_motion`` and values every product through ``executor``.
    Failed valuations contribute ``0.0``; residuals keep the order of
    ``calibration_products``.

    Args:
        volatility_model: Model providing the structure to clone.
        calibration_model: Short-rate model receiving the cloned volatility.
        calibration_products: Products with target values and weights.
        simulation_builder: Builds a simulation from the model and randomness.
        brownian_motion: Randomness source reused by every evaluation.
        executor: Strategy running the product valuations.
    """

    def __init__(
        self,
        volatility_model: ParametricVolatilityModel,
        calibration_model: ShortRateModel,
        calibration_products: Sequence[CalibrationProduct],
        simulation_builder: SimulationBuilder,
        brownian_motion: Any,
        executor: ValuationExecutor,
    ):
        self.volatility_model = volatility_model
        self.calibration_model = calibration_model
        self.calibration_products = tuple(calibration_products)
        self.simulation_builder = simulation_builder
        self.brownian_motion = brownian_motion
        self.executor = executor

    @property
    def number_of_products(self) -> int:
        return len(self.calibration_products)

    def evaluate(self, parameters: Sequence[float] | np.ndarray) -> list[ValuationOutcome]:
        """Return the valuation outcome of every product for ``parameters``.

        Raises:
            SolverError: If the simulation for ``parameters`` cannot be built,
                or a valuation task cannot be synchronised.
        """

        try:
            volatility_model = self.volatility_model.get_clone_with_modified_parameters(
                parameters
            )
            model = self.calibration_model.with_volatility_model(volatility_model)
            simulation = self.simulation_builder(model, self.brownian_motion)
        except Exception as exc:
            raise SolverError(f"Simulation could not be built: {exc!r}") from exc

        tasks = [
            (
                lambda index=index, product=product: value_calibration_product(
                    index, product, simulation
                )
            )
            for index, product in enumerate(self.calibration_products)
        ]
        return self.executor.run_all(tasks)

    def __call__(self, parameters: Sequence[float] | np.ndarray) -> np.ndarray:
        outcomes = self.evaluate(parameters)
        return np.array([outcome.residual_or_zero for outcome in outcomes], dtype=float)


__all__ = ["CalibrationObjective", "value_calibration_product", "EVALUATION_TIME"]

"""Generic calibration of parametric volatility models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd

from ratevol.calibration.config import CalibrationConfig, resolve_config
from ratevol.calibration.executor import make_valuation_executor
from ratevol.calibration.interfaces import (
    OptimizerFactory,
    ShortRateModel,
    SimulationBuilder,
)
from ratevol.calibration.objective import CalibrationObjective
from ratevol.calibration.optimizer import LevenbergMarquardtOptimizerFactory
from ratevol.calibration.products import CalibrationProduct
from ratevol.core.errors import CalibrationError, InvalidInputError
from ratevol.core.parameters import as_parameter_vector, parameter_log_string
from ratevol.logging import get_logger
from ratevol.montecarlo.brownian_motion import BrownianMotionLazyInit
from ratevol.volatility.base import ParametricVolatilityModel

logger = get_logger(__name__)


@dataclass(frozen=True)
class CalibrationResult:
    """Outcome of a successful calibration run.

    Attributes:
        parameters: Best-fit parameter vector (empty if the model is not
            calibrateable).
        iterations: Iterations reported by the optimizer.
        model: Calibrated volatility model.
    """

    parameters: np.ndarray
    iterations: int
    model: ParametricVolatilityModel

    def to_frame(self) -> pd.DataFrame:
        """Return the best-fit parameters as a one-column table."""

        index = pd.Index(
            [f"parameter[{i}]" for i in range(self.parameters.size)], name="parameter"
        )
        return pd.DataFrame({"value": np.asarray(self.parameters, dtype=float)}, index=index)


def _default_brownian_motion(
    volatility_model: ParametricVolatilityModel, config: CalibrationConfig
) -> BrownianMotionLazyInit:
    return BrownianMotionLazyInit(
        volatility_model.time_discretization,
        config.number_of_factors,
        config.number_of_paths,
        config.seed,
    )


def _default_optimizer_factory(config: CalibrationConfig) -> OptimizerFactory:
    return LevenbergMarquardtOptimizerFactory(
        max_iterations=config.max_iterations,
        accuracy=config.accuracy,
        number_of_threads=config.optimizer_threads,
    )


def calibrate(
    volatility_model: ParametricVolatilityModel,
    calibration_model: ShortRateModel,
    calibration_products: Sequence[CalibrationProduct],
    simulation_builder: SimulationBuilder,
    *,
    config: CalibrationConfig | Mapping[str, Any] | None = None,
) -> CalibrationResult:
    """Calibrate ``volatility_model`` to the target values of ``calibration_products``.

    The optimizer drives the weighted residuals ``w_k (value_k - target_k)``
    to zero, starting from ``volatility_model.get_parameter()`` with
    unbounded parameters. Every objective evaluation re-simulates
    ``calibration_model`` with a cloned volatility model and the same
    randomness source.

    Args:
        volatility_model: Model to calibrate. It is never mutated.
        calibration_model: Short-rate model supplying everything but the
            volatility structure.
        calibration_products: Products with target values and weights.
        simulation_builder: Builds a simulation from
            ``(short_rate_model, brownian_motion)``.
        config: :class:`CalibrationConfig`, a string-keyed mapping of
            options, or ``None`` for the defaults.

    Returns:
        The best-fit parameters, optimizer iterations and calibrated model.
        A model that is not calibrateable is returned unchanged with an empty
        parameter vector.

    Raises:
        CalibrationError: If the optimizer fails, a simulation cannot be
            built or a valuation task cannot be synchronised. ``__cause__``
            holds the underlying error.
    """

    config = resolve_config(config)
    products = tuple(calibration_products)
    for product in products:
        if not isinstance(product, CalibrationProduct):
            raise InvalidInputError(
                f"Expected CalibrationProduct, got {type(product).__name__}"
            )

    initial_parameters = volatility_model.get_parameter()
    if initial_parameters is None:
        logger.info("%r is not calibrateable; returning it unchanged", volatility_model)
        return CalibrationResult(
            parameters=as_parameter_vector(()), iterations=0, model=volatility_model
        )

    initial_parameters = np.array(initial_parameters, dtype=float)
    number_of_parameters = initial_parameters.size
    lower_bound = np.full(number_of_parameters, -np.inf)
    upper_bound = np.full(number_of_parameters, np.inf)
    parameter_step = np.full(number_of_parameters, config.parameter_step)
    zero = np.zeros(len(products))

    brownian_motion = (
        config.brownian_motion
        if config.brownian_motion is not None
        else _default_brownian_motion(volatility_model, config)
    )
    optimizer_factory = (
        config.optimizer_factory
        if config.optimizer_factory is not None
        else _default_optimizer_factory(config)
    )

    with make_valuation_executor(config.valuation_threads) as executor:
        objective = CalibrationObjective(
            volatility_model,
            calibration_model,
            products,
            simulation_builder,
            brownian_motion,
            executor,
        )
        optimizer = optimizer_factory.get_optimizer(
            objective,
            initial_parameters,
            lower_bound,
            upper_bound,
            parameter_step,
            zero,
        )
        try:
            optimizer.run()
        except Exception as exc:
            raise CalibrationError(f"Calibration failed: {exc}") from exc

    best_parameters = as_parameter_vector(optimizer.get_best_fit_parameters())
    iterations = int(optimizer.get_iterations())
    calibrated_model = volatility_model.get_clone_with_modified_parameters(best_parameters)

    logger.info(
        "The solver required %d iterations. Best parameters: %s",
        iterations,
        parameter_log_string(best_parameters),
    )

    return CalibrationResult(
        parameters=best_parameters, iterations=iterations, model=calibrated_model
    )


__all__ = ["CalibrationResult", "calibrate"]

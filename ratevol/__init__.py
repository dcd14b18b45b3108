# ratevol - Parametric short-rate volatility models and their calibration
"""Calibrate parametric volatility models of short-rate simulations to market instruments."""

from ratevol.core import (
    CalculationError,
    CalibrationError,
    InvalidInputError,
    RateVolError,
    SolverError,
    TimeDiscretization,
    ValuationError,
)
from ratevol.volatility import (
    CapletVolatilityParametric,
    FourParameterExponentialVolatilityModel,
    ParametricVolatilityModel,
    ShortRateVolatilityModel,
)
from ratevol.montecarlo import BrownianMotionLazyInit
from ratevol.calibration import (
    CalibrationConfig,
    CalibrationObjective,
    CalibrationProduct,
    CalibrationResult,
    LevenbergMarquardtOptimizerFactory,
    ValuationOutcome,
    calibrate,
)
from ratevol.logging import configure_logging, get_logger

__version__ = "0.1.0"

__all__ = [
    # Exceptions
    "RateVolError",
    "InvalidInputError",
    "CalculationError",
    "CalibrationError",
    "SolverError",
    "ValuationError",
    # Grids and randomness
    "TimeDiscretization",
    "BrownianMotionLazyInit",
    # Volatility models
    "ShortRateVolatilityModel",
    "ParametricVolatilityModel",
    "CapletVolatilityParametric",
    "FourParameterExponentialVolatilityModel",
    # Calibration
    "CalibrationConfig",
    "CalibrationObjective",
    "CalibrationProduct",
    "CalibrationResult",
    "LevenbergMarquardtOptimizerFactory",
    "ValuationOutcome",
    "calibrate",
    # Logging
    "configure_logging",
    "get_logger",
]

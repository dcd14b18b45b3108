from ratevol.calibration.config import CalibrationConfig
from ratevol.calibration.engine import CalibrationResult, calibrate
from ratevol.calibration.executor import (
    InlineValuationExecutor,
    ThreadPoolValuationExecutor,
    make_valuation_executor,
)
from ratevol.calibration.interfaces import (
    Optimizer,
    OptimizerFactory,
    ShortRateModel,
    SimulationBuilder,
    ValuationExecutor,
    ValuationProduct,
)
from ratevol.calibration.objective import CalibrationObjective
from ratevol.calibration.optimizer import (
    LevenbergMarquardtOptimizer,
    LevenbergMarquardtOptimizerFactory,
)
from ratevol.calibration.products import CalibrationProduct, ValuationOutcome


__all__ = [
    "CalibrationConfig",
    "CalibrationResult",
    "calibrate",
    "CalibrationObjective",
    "CalibrationProduct",
    "ValuationOutcome",
    "InlineValuationExecutor",
    "ThreadPoolValuationExecutor",
    "make_valuation_executor",
    "LevenbergMarquardtOptimizer",
    "LevenbergMarquardtOptimizerFactory",
    "Optimizer",
    "OptimizerFactory",
    "ShortRateModel",
    "SimulationBuilder",
    "ValuationExecutor",
    "ValuationProduct",
]

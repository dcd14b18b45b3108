from ratevol.core.errors import (
    CalculationError,
    CalibrationError,
    InvalidInputError,
    RateVolError,
    SolverError,
    ValuationError,
)
from ratevol.core.parameters import as_parameter_vector, parameter_log_string
from ratevol.core.time_discretization import TimeDiscretization


__all__ = [
    "RateVolError",
    "InvalidInputError",
    "CalculationError",
    "CalibrationError",
    "SolverError",
    "ValuationError",
    "TimeDiscretization",
    "as_parameter_vector",
    "parameter_log_string",
]

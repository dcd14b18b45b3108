from __future__ import annotations

"""Centralized error types for the ratevol package."""


class RateVolError(Exception):
    """Base exception for the ratevol package."""

    pass


class InvalidInputError(RateVolError):
    """Exception raised for invalid input parameters."""

    pass


class CalculationError(RateVolError):
    """Exception raised when calculations fail."""

    pass


class CalibrationError(CalculationError):
    """Raised when a calibration run fails.

    The underlying solver or task synchronization error is available as
    ``__cause__``.
    """

    pass


class SolverError(RateVolError):
    """Raised by optimizers and valuation executors on internal failure."""

    pass


class ValuationError(CalculationError):
    """Domain error a calibration product may raise while pricing."""

    pass


__all__ = [
    "RateVolError",
    "InvalidInputError",
    "CalculationError",
    "CalibrationError",
    "SolverError",
    "ValuationError",
]

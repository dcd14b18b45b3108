"""Calibration products and per-product valuation outcomes."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ratevol.calibration.interfaces import ValuationProduct
from ratevol.core.errors import InvalidInputError


@dataclass(frozen=True)
class CalibrationProduct:
    """Instrument used as a calibration target.

    Attributes:
        product: Valuation handle exposing ``get_value(evaluation_time, simulation)``.
        target_value: Value the calibrated model should reproduce.
        weight: Non-negative weight applied to the pricing error.
    """

    product: ValuationProduct
    target_value: float
    weight: float = 1.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.target_value):
            raise InvalidInputError("target_value must be finite")
        if not math.isfinite(self.weight) or self.weight < 0.0:
            raise InvalidInputError(
                f"weight must be finite and non-negative, got {self.weight}"
            )


@dataclass(frozen=True)
class ValuationOutcome:
    """Result of valuing one calibration product for one trial parameter vector.

    Exactly one of ``residual`` and ``error`` is set.
    """

    residual: Optional[float] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, residual: float) -> "ValuationOutcome":
        return cls(residual=float(residual))

    @classmethod
    def failure(cls, error: BaseException) -> "ValuationOutcome":
        return cls(error=error)

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def residual_or_zero(self) -> float:
        """Weighted residual, or ``0.0`` for a failed valuation."""

        if self.residual is None:
            return 0.0
        return self.residual


__all__ = ["CalibrationProduct", "ValuationOutcome"]

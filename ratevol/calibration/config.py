"""Typed configuration of a calibration run."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from numbers import Integral, Real
from typing import Any, Mapping, Optional

from ratevol.calibration.interfaces import OptimizerFactory
from ratevol.core.errors import InvalidInputError
from ratevol.logging import get_logger

logger = get_logger(__name__)

_ALIASES: dict[str, str] = {
    "numberOfPaths": "number_of_paths",
    "seed": "seed",
    "maxIterations": "max_iterations",
    "parameterStep": "parameter_step",
    "accuracy": "accuracy",
    "brownianMotion": "brownian_motion",
    "optimizerFactory": "optimizer_factory",
    "numberOfFactors": "number_of_factors",
    "optimizerThreads": "optimizer_threads",
    "valuationThreads": "valuation_threads",
}

_INTEGER_FIELDS = (
    "number_of_paths",
    "seed",
    "max_iterations",
    "number_of_factors",
    "optimizer_threads",
    "valuation_threads",
)
_REAL_FIELDS = ("parameter_step", "accuracy")


@dataclass(frozen=True)
class CalibrationConfig:
    """Options of :func:`ratevol.calibration.calibrate`.

    Attributes:
        number_of_paths: Paths of the Brownian motion built for re-simulation.
        seed: Seed of the Brownian motion built for re-simulation.
        max_iterations: Cap on the residual evaluations of the default
            optimizer (scipy's ``max_nfev``). Rejected Levenberg-Marquardt
            steps count against it, so the reported iteration count, the
            number of Jacobian evaluations, never exceeds this cap.
        parameter_step: Finite-difference step for every parameter.
        accuracy: Convergence tolerance of the default optimizer.
        brownian_motion: Randomness source reused by every iteration. When
            ``None`` one is built from ``seed``, ``number_of_paths`` and
            ``number_of_factors`` on the model's simulation time grid.
        optimizer_factory: Optimizer override. When ``None`` a
            Levenberg-Marquardt optimizer with ``optimizer_threads`` workers
            is used.
        number_of_factors: Factors of the default Brownian motion.
        optimizer_threads: Trial parameter vectors the default optimizer may
            evaluate concurrently.
        valuation_threads: Worker threads valuing products. ``0`` values
            products inline, in order.
    """

    number_of_paths: int = 2000
    seed: int = 31415
    max_iterations: int = 400
    parameter_step: float = 1e-4
    accuracy: float = 1e-7
    brownian_motion: Optional[Any] = None
    optimizer_factory: Optional[OptimizerFactory] = None
    number_of_factors: int = 2
    optimizer_threads: int = 2
    valuation_threads: int = 0

    def __post_init__(self) -> None:
        for name in _INTEGER_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Integral):
                raise TypeError(f"{name} must be an integer, got {type(value).__name__}")
        for name in _REAL_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise TypeError(f"{name} must be a real number, got {type(value).__name__}")

        if self.number_of_paths < 1:
            raise InvalidInputError("number_of_paths must be at least 1")
        if self.max_iterations < 1:
            raise InvalidInputError("max_iterations must be at least 1")
        if self.number_of_factors < 1:
            raise InvalidInputError("number_of_factors must be at least 1")
        if self.optimizer_threads < 1:
            raise InvalidInputError("optimizer_threads must be at least 1")
        if self.valuation_threads < 0:
            raise InvalidInputError("valuation_threads must be non-negative")
        if not math.isfinite(self.parameter_step) or self.parameter_step <= 0.0:
            raise InvalidInputError("parameter_step must be finite and positive")
        if not math.isfinite(self.accuracy) or self.accuracy < 0.0:
            raise InvalidInputError("accuracy must be finite and non-negative")
        if self.optimizer_factory is not None and not callable(
            getattr(self.optimizer_factory, "get_optimizer", None)
        ):
            raise TypeError("optimizer_factory must provide get_optimizer()")

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "CalibrationConfig":
        """Build a config from string-keyed options.

        Keys may be given in camelCase (``"numberOfPaths"``) or snake_case
        (``"number_of_paths"``). Absent keys take their defaults and unknown
        keys are ignored.

        Raises:
            TypeError: If an option has the wrong type.
            InvalidInputError: If an option has an invalid value.
        """

        if options is None:
            return cls()
        if not isinstance(options, Mapping):
            raise TypeError("Calibration options must be a mapping")

        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in options.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                logger.debug("Ignoring unknown calibration option %r", key)
                continue
            if value is None:
                continue
            kwargs[name] = value
        return cls(**kwargs)


def resolve_config(
    config: CalibrationConfig | Mapping[str, Any] | None,
) -> CalibrationConfig:
    """Return ``config`` as a :class:`CalibrationConfig`."""

    if isinstance(config, CalibrationConfig):
        return config
    return CalibrationConfig.from_mapping(config)


__all__ = ["CalibrationConfig", "resolve_config"]

"""Seeded multi-factor Brownian motion with lazily generated increments."""

from __future__ import annotations

import threading
from typing import Optional

import numpy as np

from ratevol.core.errors import InvalidInputError
from ratevol.core.time_discretization import TimeDiscretization


class BrownianMotionLazyInit:
    """Brownian increments on a time grid, generated on first access.

    The same instance is meant to be shared by every simulation built during
    a calibration, so that objective values differ only through the model
    parameters. Generation happens once, under a lock, so concurrent readers
    see identical increments.

    Args:
        time_discretization: Simulation time grid.
        number_of_factors: Number of independent Brownian drivers.
        number_of_paths: Number of Monte Carlo paths.
        seed: Seed of the ``numpy`` random generator.
    """

    def __init__(
        self,
        time_discretization: TimeDiscretization,
        number_of_factors: int,
        number_of_paths: int,
        seed: int,
    ):
        if number_of_factors < 1:
            raise InvalidInputError("number_of_factors must be at least 1")
        if number_of_paths < 1:
            raise InvalidInputError("number_of_paths must be at least 1")

        self._time_discretization = time_discretization
        self._number_of_factors = int(number_of_factors)
        self._number_of_paths = int(number_of_paths)
        self._seed = int(seed)
        self._increments: Optional[np.ndarray] = None
        self._lock = threading.Lock()

    @property
    def time_discretization(self) -> TimeDiscretization:
        return self._time_discretization

    @property
    def number_of_factors(self) -> int:
        return self._number_of_factors

    @property
    def number_of_paths(self) -> int:
        return self._number_of_paths

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def is_initialized(self) -> bool:
        return self._increments is not None

    def _generate(self) -> np.ndarray:
        generator = np.random.default_rng(self._seed)
        steps = self._time_discretization.time_steps
        normals = generator.standard_normal(
            (steps.size, self._number_of_factors, self._number_of_paths)
        )
        increments = normals * np.sqrt(steps)[:, np.newaxis, np.newaxis]
        increments.flags.writeable = False
        return increments

    def _get_increments(self) -> np.ndarray:
        if self._increments is None:
            with self._lock:
                if self._increments is None:
                    self._increments = self._generate()
        return self._increments

    def get_increment(self, time_index: int, factor: int) -> np.ndarray:
        """Return the path increments ``W(t_{i+1}) - W(t_i)`` of one factor."""

        if not 0 <= time_index < self._time_discretization.number_of_time_steps:
            raise IndexError(f"Time step index {time_index} out of range")
        if not 0 <= factor < self._number_of_factors:
            raise IndexError(f"Factor {factor} out of range")
        return self._get_increments()[time_index, factor]

    def get_paths(self, factor: int) -> np.ndarray:
        """Return ``W(t_i)`` for one factor, shape ``(number_of_times, number_of_paths)``."""

        if not 0 <= factor < self._number_of_factors:
            raise IndexError(f"Factor {factor} out of range")
        increments = self._get_increments()[:, factor, :]
        paths = np.zeros((increments.shape[0] + 1, self._number_of_paths))
        np.cumsum(increments, axis=0, out=paths[1:])
        return paths

    def __repr__(self) -> str:
        return (
            f"BrownianMotionLazyInit(number_of_factors={self._number_of_factors}, "
            f"number_of_paths={self._number_of_paths}, seed={self._seed})"
        )


__all__ = ["BrownianMotionLazyInit"]

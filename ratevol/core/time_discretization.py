"""Immutable time grids for simulation times and tenor structures."""

from __future__ import annotations

from typing import Iterable, Iterator

import numpy as np

from ratevol.core.errors import InvalidInputError


class TimeDiscretization:
    """Strictly increasing, finite sequence of times ``t_0 < t_1 < ... < t_n``.

    Args:
        times: Grid points in year fractions.

    Raises:
        InvalidInputError: If the grid is empty, not one-dimensional, contains
            non-finite values or is not strictly increasing.
    """

    __slots__ = ("_times",)

    def __init__(self, times: Iterable[float] | np.ndarray):
        arr = np.array(times, dtype=float)
        if arr.ndim != 1 or arr.size == 0:
            raise InvalidInputError("Time discretization requires a non-empty 1-D grid")
        if not np.all(np.isfinite(arr)):
            raise InvalidInputError("Time discretization must contain finite values")
        if arr.size > 1 and np.any(np.diff(arr) <= 0.0):
            raise InvalidInputError("Time discretization must be strictly increasing")
        arr.flags.writeable = False
        self._times = arr

    @classmethod
    def from_uniform(
        cls, start: float, number_of_steps: int, step: float
    ) -> "TimeDiscretization":
        """Return the grid ``start, start + step, ..., start + number_of_steps * step``."""

        if number_of_steps < 0:
            raise InvalidInputError("number_of_steps must be non-negative")
        if step <= 0.0:
            raise InvalidInputError("step must be strictly positive")
        return cls(start + step * np.arange(number_of_steps + 1, dtype=float))

    @property
    def times(self) -> np.ndarray:
        return self._times

    @property
    def number_of_times(self) -> int:
        return int(self._times.size)

    @property
    def number_of_time_steps(self) -> int:
        return int(self._times.size) - 1

    def get_time(self, index: int) -> float:
        if not 0 <= index < self._times.size:
            raise IndexError(
                f"Time index {index} outside [0, {self._times.size - 1}]"
            )
        return float(self._times[index])

    def get_time_step(self, index: int) -> float:
        if not 0 <= index < self._times.size - 1:
            raise IndexError(
                f"Time step index {index} outside [0, {self._times.size - 2}]"
            )
        return float(self._times[index + 1] - self._times[index])

    @property
    def time_steps(self) -> np.ndarray:
        return np.diff(self._times)

    def __len__(self) -> int:
        return int(self._times.size)

    def __iter__(self) -> Iterator[float]:
        return iter(float(t) for t in self._times)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeDiscretization):
            return NotImplemented
        return np.array_equal(self._times, other._times)

    def __hash__(self) -> int:
        return hash(self._times.tobytes())

    def __repr__(self) -> str:
        return (
            f"TimeDiscretization(first={self._times[0]!r}, last={self._times[-1]!r}, "
            f"number_of_times={self._times.size})"
        )


__all__ = ["TimeDiscretization"]

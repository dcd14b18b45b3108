"""Helpers for the real-valued parameter vectors of parametric models."""

from __future__ import annotations

from typing import Iterable, Optional

import numpy as np

from ratevol.core.errors import InvalidInputError


def as_parameter_vector(
    values: Iterable[float] | np.ndarray, *, length: Optional[int] = None
) -> np.ndarray:
    """Return ``values`` as a read-only 1-D float array.

    Args:
        values: Ordered parameter values.
        length: Required vector length, if any.

    Raises:
        InvalidInputError: If ``values`` is not one-dimensional or does not
            have the required length.
    """

    vector = np.array(values, dtype=float)
    if vector.ndim != 1:
        raise InvalidInputError("Parameter vector must be one-dimensional")
    if length is not None and vector.size != length:
        raise InvalidInputError(
            f"Parameter vector must have length {length}, got {vector.size}"
        )
    vector.flags.writeable = False
    return vector


def parameter_log_string(parameters: np.ndarray) -> str:
    """Format a parameter vector as ``parameter[i]: value`` entries."""

    return "\t".join(
        f"parameter[{i}]: {float(value)!r}" for i, value in enumerate(parameters)
    )


__all__ = ["as_parameter_vector", "parameter_log_string"]

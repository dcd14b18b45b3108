"""Levenberg-Marquardt optimizer on top of ``scipy.optimize.least_squares``."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np
from scipy import optimize

from ratevol.calibration.interfaces import ObjectiveFunction
from ratevol.core.errors import InvalidInputError, SolverError
from ratevol.logging import get_logger

logger = get_logger(__name__)

_MIN_TOLERANCE = float(np.finfo(float).eps)


class LevenbergMarquardtOptimizer:
    """Minimise ``||objective(x) - target_values||^2``.

    The Jacobian is built by forward differences with ``parameter_step``;
    its columns are evaluated by up to ``number_of_threads`` concurrent calls
    of ``objective_function``. MINPACK's Levenberg-Marquardt (``"lm"``) is
    used when there are at least as many residuals as parameters and the
    bounds are infinite, the trust-region reflective method otherwise.

    Args:
        objective_function: Maps parameters to model values.
        initial_parameters: Starting point.
        lower_bound: Lower bound per parameter.
        upper_bound: Upper bound per parameter.
        parameter_step: Finite-difference step per parameter.
        target_values: Values the objective should reproduce.
        max_iterations: Cap on objective evaluations.
        accuracy: Relative tolerance on cost, parameters and gradient.
        number_of_threads: Maximum number of concurrent objective calls.
    """

    def __init__(
        self,
        objective_function: ObjectiveFunction,
        initial_parameters: np.ndarray,
        lower_bound: np.ndarray,
        upper_bound: np.ndarray,
        parameter_step: np.ndarray,
        target_values: np.ndarray,
        *,
        max_iterations: int = 400,
        accuracy: float = 1e-7,
        number_of_threads: int = 2,
    ):
        self.objective_function = objective_function
        self.initial_parameters = np.array(initial_parameters, dtype=float)
        self.lower_bound = np.array(lower_bound, dtype=float)
        self.upper_bound = np.array(upper_bound, dtype=float)
        self.parameter_step = np.array(parameter_step, dtype=float)
        self.target_values = np.array(target_values, dtype=float)
        self.max_iterations = int(max_iterations)
        self.accuracy = float(accuracy)
        self.number_of_threads = int(number_of_threads)

        n = self.initial_parameters.size
        for name in ("lower_bound", "upper_bound", "parameter_step"):
            if getattr(self, name).shape != (n,):
                raise InvalidInputError(f"{name} must have length {n}")
        if np.any(self.parameter_step <= 0.0):
            raise InvalidInputError("parameter_step must be strictly positive")
        if self.number_of_threads < 1:
            raise InvalidInputError("number_of_threads must be at least 1")

        self._best_fit_parameters = self.initial_parameters.copy()
        self._iterations = 0
        self._cost: Optional[float] = None
        self._cache_lock = threading.Lock()
        self._cache: Optional[tuple[bytes, np.ndarray]] = None

    def _residuals(self, parameters: np.ndarray) -> np.ndarray:
        values = np.asarray(self.objective_function(parameters), dtype=float)
        if values.shape != self.target_values.shape:
            raise SolverError(
                f"Objective returned shape {values.shape}, expected {self.target_values.shape}"
            )
        residuals = values - self.target_values
        with self._cache_lock:
            self._cache = (np.asarray(parameters, dtype=float).tobytes(), residuals)
        return residuals

    def _cached_residuals(self, parameters: np.ndarray) -> np.ndarray:
        key = np.asarray(parameters, dtype=float).tobytes()
        with self._cache_lock:
            cached = self._cache
        if cached is not None and cached[0] == key:
            return cached[1]
        return self._residuals(parameters)

    def _jacobian(self, parameters: np.ndarray, pool: ThreadPoolExecutor) -> np.ndarray:
        base = self._cached_residuals(parameters)

        def column(index: int) -> np.ndarray:
            shifted = np.array(parameters, dtype=float)
            shifted[index] += self.parameter_step[index]
            values = np.asarray(self.objective_function(shifted), dtype=float)
            return (values - self.target_values - base) / self.parameter_step[index]

        columns = list(pool.map(column, range(parameters.size)))
        return np.column_stack(columns)

    def run(self) -> None:
        """Run the optimisation.

        Raises:
            SolverError: On improper input or numerical breakdown, including
                failures raised by the objective function.
        """

        m = self.target_values.size
        n = self.initial_parameters.size
        if m == 0 or n == 0:
            self._best_fit_parameters = self.initial_parameters.copy()
            self._iterations = 0
            self._cost = 0.0
            return

        bounded = np.any(np.isfinite(self.lower_bound)) or np.any(
            np.isfinite(self.upper_bound)
        )
        method = "lm" if (m >= n and not bounded) else "trf"
        tolerance = max(self.accuracy, _MIN_TOLERANCE)

        with ThreadPoolExecutor(
            max_workers=self.number_of_threads, thread_name_prefix="ratevol-optimizer"
        ) as pool:
            try:
                result = optimize.least_squares(
                    self._residuals,
                    self.initial_parameters,
                    jac=lambda x: self._jacobian(x, pool),
                    bounds=(self.lower_bound, self.upper_bound),
                    method=method,
                    ftol=tolerance,
                    xtol=tolerance,
                    gtol=tolerance,
                    max_nfev=self.max_iterations,
                )
            except SolverError:
                raise
            except Exception as exc:
                raise SolverError(f"Levenberg-Marquardt optimisation failed: {exc}") from exc

        if result.status < 0 or not np.all(np.isfinite(result.x)):
            raise SolverError(f"Levenberg-Marquardt optimisation failed: {result.message}")
        if result.status == 0:
            logger.warning(
                "Optimizer stopped after %d objective evaluations without meeting accuracy %g",
                result.nfev,
                self.accuracy,
            )

        self._best_fit_parameters = np.array(result.x, dtype=float)
        self._iterations = int(result.njev if result.njev is not None else result.nfev)
        self._cost = float(result.cost)

    def get_best_fit_parameters(self) -> np.ndarray:
        return self._best_fit_parameters.copy()

    def get_iterations(self) -> int:
        """Return the number of Jacobian evaluations of the last run.

        This counts accepted iterations, unlike ``max_iterations``, which
        caps residual evaluations including rejected steps.
        """

        return self._iterations

    def get_root_mean_squared_error(self) -> Optional[float]:
        """Return the root-mean-square residual of the best fit, once run."""

        if self._cost is None:
            return None
        m = self.target_values.size
        if m == 0:
            return 0.0
        return float(np.sqrt(2.0 * self._cost / m))


class LevenbergMarquardtOptimizerFactory:
    """Factory for :class:`LevenbergMarquardtOptimizer` instances.

    Args:
        max_iterations: Cap on objective evaluations.
        accuracy: Convergence tolerance.
        number_of_threads: Concurrent objective calls per optimizer.
    """

    def __init__(
        self, max_iterations: int = 400, accuracy: float = 1e-7, number_of_threads: int = 2
    ):
        self.max_iterations = max_iterations
        self.accuracy = accuracy
        self.number_of_threads = number_of_threads

    def get_optimizer(
        self,
        objective_function: ObjectiveFunction,
        initial_parameters: np.ndarray,
        lower_bound: np.ndarray,
        upper_bound: np.ndarray,
        parameter_step: np.ndarray,
        target_values: np.ndarray,
    ) -> LevenbergMarquardtOptimizer:
        return LevenbergMarquardtOptimizer(
            objective_function,
            initial_parameters,
            lower_bound,
            upper_bound,
            parameter_step,
            target_values,
            max_iterations=self.max_iterations,
            accuracy=self.accuracy,
            number_of_threads=self.number_of_threads,
        )

    def __repr__(self) -> str:
        return (
            f"LevenbergMarquardtOptimizerFactory(max_iterations={self.max_iterations}, "
            f"accuracy={self.accuracy}, number_of_threads={self.number_of_threads})"
        )


__all__ = ["LevenbergMarquardtOptimizer", "LevenbergMarquardtOptimizerFactory"]

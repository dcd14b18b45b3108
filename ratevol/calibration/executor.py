"""Execution strategies for the per-evaluation fan-out over calibration products.

Both strategies return task results in submission order and only return once
every task has completed. Tasks are expected to trap their own pricing
errors; an exception escaping a task, or a result that cannot be retrieved
from the runtime, is a synchronization failure and raises
:class:`~ratevol.core.errors.SolverError`.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Sequence

from ratevol.core.errors import InvalidInputError, SolverError


class InlineValuationExecutor:
    """Runs tasks synchronously in submission order."""

    def run_all(self, tasks: Sequence[Callable[[], Any]]) -> list[Any]:
        results = []
        for index, task in enumerate(tasks):
            try:
                results.append(task())
            except Exception as exc:
                raise SolverError(f"Valuation task {index} failed") from exc
        return results

    def close(self) -> None:
        pass

    def __enter__(self) -> "InlineValuationExecutor":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class ThreadPoolValuationExecutor:
    """Submits every task to a thread pool and joins them in order.

    Args:
        max_workers: Number of worker threads.
    """

    def __init__(self, max_workers: int):
        if max_workers < 1:
            raise InvalidInputError("max_workers must be at least 1")
        self._max_workers = int(max_workers)
        self._pool = ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="ratevol-valuation"
        )
        self._closed = False

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def closed(self) -> bool:
        return self._closed

    def run_all(self, tasks: Sequence[Callable[[], Any]]) -> list[Any]:
        try:
            futures: list[Future] = [self._pool.submit(task) for task in tasks]
        except RuntimeError as exc:
            raise SolverError("Valuation thread pool is not accepting tasks") from exc

        wait(futures)
        results = []
        for index, future in enumerate(futures):
            try:
                results.append(future.result())
            except Exception as exc:
                raise SolverError(f"Valuation task {index} failed") from exc
        return results

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._pool.shutdown(wait=True)

    def __enter__(self) -> "ThreadPoolValuationExecutor":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def make_valuation_executor(
    valuation_threads: int,
) -> InlineValuationExecutor | ThreadPoolValuationExecutor:
    """Return the inline executor for ``0`` threads, a thread pool otherwise."""

    if valuation_threads < 0:
        raise InvalidInputError("valuation_threads must be non-negative")
    if valuation_threads == 0:
        return InlineValuationExecutor()
    return ThreadPoolValuationExecutor(valuation_threads)


__all__ = [
    "InlineValuationExecutor",
    "ThreadPoolValuationExecutor",
    "make_valuation_executor",
]

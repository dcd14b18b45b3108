"""Logging helpers for the ratevol package.

Library modules obtain loggers through :func:`get_logger`, which keeps the
package silent until an application calls :func:`configure_logging` or
attaches its own handlers.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

ROOT_LOGGER_NAME = "ratevol"
VALUATION_LOGGER_NAME = "ratevol.calibration.objective"
_NULL_HANDLER = logging.NullHandler()


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Return a logger below the ``ratevol`` root with a null handler attached.

    Args:
        name: Fully qualified logger name, usually ``__name__``.
    """

    logger = logging.getLogger(name)
    if not any(isinstance(handler, logging.NullHandler) for handler in logger.handlers):
        logger.addHandler(_NULL_HANDLER)
    return logger


def configure_logging(
    level: int = logging.INFO,
    *,
    handlers: Optional[Iterable[logging.Handler]] = None,
    format_string: str | None = None,
    show_valuation_failures: bool = False,
) -> logging.Logger:
    """Set the level of the ``ratevol`` root logger and attach handlers.

    Calibration diagnostics (best-fit parameters, iteration counts) are
    emitted at ``INFO``; soft valuation failures at ``DEBUG``.

    Args:
        level: Level applied to the package root logger.
        handlers: Optional handlers to attach. A ``StreamHandler`` is created
            when none are given.
        format_string: Optional format applied to the attached handlers.
        show_valuation_failures: If True, the per-product valuation failures
            that calibration absorbs are logged regardless of ``level``.

    Returns:
        The configured package root logger.
    """

    logger = get_logger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    attached = list(handlers) if handlers else [logging.StreamHandler()]
    for handler in attached:
        if format_string:
            handler.setFormatter(logging.Formatter(format_string))
        logger.addHandler(handler)

    get_logger(VALUATION_LOGGER_NAME).setLevel(
        logging.DEBUG if show_valuation_failures else logging.NOTSET
    )
    return logger


__all__ = [
    "ROOT_LOGGER_NAME",
    "VALUATION_LOGGER_NAME",
    "configure_logging",
    "get_logger",
]

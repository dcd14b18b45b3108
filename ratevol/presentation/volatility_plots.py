"""Plots of calibrated volatility structures.

``plot_volatility_grid`` shows the instantaneous volatility of every
(simulation interval, tenor) cell as a heatmap; ``plot_caplet_term_structure``
shows the caplet volatility curve the model is bootstrapped from.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from ratevol.volatility.exponential import FourParameterExponentialVolatilityModel

TEXT_COLOR = "#333333"
GRID_COLOR = "#CCCCCC"
LINE_COLOR = "#1f77b4"


def _style_axes(ax: Any) -> None:
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    for side in ("left", "bottom"):
        ax.spines[side].set_color(GRID_COLOR)
        ax.spines[side].set_linewidth(0.5)
    ax.tick_params(axis="both", which="major", labelsize=10, colors="#666666", length=0)


def plot_volatility_grid(
    model: FourParameterExponentialVolatilityModel,
    *,
    title: str = "Instantaneous Volatility",
    figsize: tuple[float, float] = (10, 6),
    cmap: str = "viridis",
    as_percent: bool = True,
) -> Figure:
    """Plot the instantaneous volatility matrix of ``model`` as a heatmap.

    Args:
        model: Volatility model providing ``volatility_matrix()``.
        title: Plot title.
        figsize: Figure size (width, height) in inches.
        cmap: Matplotlib colormap name.
        as_percent: If True, show volatilities in percent.

    Returns:
        matplotlib.figure.Figure: The generated figure.
    """
    matrix = model.volatility_matrix()
    if as_percent:
        matrix = matrix * 100.0

    times = model.time_discretization.times
    tenors = model.tenor_discretization.times

    fig, ax = plt.subplots(figsize=figsize, facecolor="white")
    mesh = ax.pcolormesh(
        _cell_edges(tenors),
        times,
        matrix,
        cmap=cmap,
        shading="flat",
    )
    colorbar = fig.colorbar(mesh, ax=ax)
    colorbar.set_label("Volatility (%)" if as_percent else "Volatility", color=TEXT_COLOR)

    _style_axes(ax)
    ax.set_xlabel("Tenor Time (years)", fontsize=12, color=TEXT_COLOR)
    ax.set_ylabel("Simulation Time (years)", fontsize=12, color=TEXT_COLOR)
    ax.set_title(title, fontsize=14, color=TEXT_COLOR, pad=15)
    ax.invert_yaxis()

    fig.tight_layout()
    return fig


def _cell_edges(centres: np.ndarray) -> np.ndarray:
    """Return ``len(centres) + 1`` edges around tenor times for ``pcolormesh``."""

    centres = np.asarray(centres, dtype=float)
    if centres.size == 1:
        return np.array([centres[0] - 0.5, centres[0] + 0.5])
    mid = 0.5 * (centres[1:] + centres[:-1])
    first = centres[0] - (mid[0] - centres[0])
    last = centres[-1] + (centres[-1] - mid[-1])
    return np.concatenate([[first], mid, [last]])


def plot_caplet_term_structure(
    model: FourParameterExponentialVolatilityModel,
    *,
    max_time_to_maturity: Optional[float] = None,
    num_points: int = 200,
    title: str = "Caplet Volatility Term Structure",
    figsize: tuple[float, float] = (10, 6),
    show_instantaneous: bool = True,
) -> Figure:
    """Plot caplet volatility against time-to-maturity.

    Args:
        model: Volatility model providing the caplet curve.
        max_time_to_maturity: Right end of the x-axis. Defaults to the last
            tenor time.
        num_points: Number of evaluation points.
        title: Plot title.
        figsize: Figure size (width, height) in inches.
        show_instantaneous: If True, overlay ``f(t) = (a + b t) exp(-c t) + d``.

    Returns:
        matplotlib.figure.Figure: The generated figure.
    """
    horizon = max_time_to_maturity
    if horizon is None:
        horizon = float(model.tenor_discretization.times[-1])
    if horizon <= 0.0:
        raise ValueError("max_time_to_maturity must be positive")

    tau = np.linspace(horizon / num_points, horizon, num_points)
    caplet = model.caplet_volatility

    fig, ax = plt.subplots(figsize=figsize, facecolor="white")
    ax.plot(tau, caplet.value(tau) * 100.0, color=LINE_COLOR, linewidth=2, label="Caplet (Black-76)")
    if show_instantaneous:
        ax.plot(
            tau,
            caplet.instantaneous_volatility(tau) * 100.0,
            color="#ff7f0e",
            linewidth=1.5,
            linestyle="--",
            label="Instantaneous",
        )

    _style_axes(ax)
    ax.grid(True, linestyle="--", alpha=0.5, color=GRID_COLOR)
    ax.set_xlabel("Time to Maturity (years)", fontsize=12, color=TEXT_COLOR)
    ax.set_ylabel("Volatility (%)", fontsize=12, color=TEXT_COLOR)
    ax.set_title(title, fontsize=14, color=TEXT_COLOR, pad=15)
    ax.legend(frameon=False)

    fig.tight_layout()
    return fig


__all__ = ["plot_volatility_grid", "plot_caplet_term_structure"]

from ratevol.presentation.volatility_plots import (
    plot_caplet_term_structure,
    plot_volatility_grid,
)

__all__ = ["plot_volatility_grid", "plot_caplet_term_structure"]

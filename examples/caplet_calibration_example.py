"""Calibrate the four-parameter exponential volatility to a caplet volatility strip.

The short-rate model here is a stand-in: its "simulation" only carries the
volatility model, and each caplet is valued with Black-76 at the caplet
volatility its instantaneous volatilities integrate to.
"""

import logging

import matplotlib.pyplot as plt
import numpy as np

from ratevol import (
    CalibrationProduct,
    FourParameterExponentialVolatilityModel,
    TimeDiscretization,
    configure_logging,
)
from ratevol.pricing import black76_caplet_price
from ratevol.presentation import plot_caplet_term_structure, plot_volatility_grid

configure_logging(logging.INFO, show_valuation_failures=True)

FORWARD = 0.03
STRIKE = 0.03
PERIOD_LENGTH = 1.0


class ToyShortRateModel:
    def __init__(self, volatility_model=None):
        self.volatility_model = volatility_model

    def with_volatility_model(self, volatility_model):
        return ToyShortRateModel(volatility_model)


class ToySimulation:
    def __init__(self, model, brownian_motion):
        self.volatility_model = model.volatility_model
        self.brownian_motion = brownian_motion


class CapletProduct:
    def __init__(self, tenor_index):
        self.tenor_index = tenor_index

    def get_value(self, evaluation_time, simulation):
        model = simulation.volatility_model
        steps = model.time_discretization.time_steps
        fixing_time = model.tenor_discretization.get_time(self.tenor_index)
        fixing_index = int(np.searchsorted(model.time_discretization.times, fixing_time))

        vols = model.volatility_matrix()[:fixing_index, self.tenor_index]
        volatility = np.sqrt(np.sum(vols * vols * steps[:fixing_index]) / fixing_time)
        discount = np.exp(-FORWARD * (fixing_time + PERIOD_LENGTH))
        return black76_caplet_price(
            FORWARD, STRIKE, volatility, fixing_time, PERIOD_LENGTH, discount
        )


# ---- market strip: caplet volatility by fixing year ---- #
market_vols = {1: 0.215, 2: 0.228, 3: 0.226, 4: 0.219, 5: 0.211, 7: 0.198, 10: 0.184}

time_grid = TimeDiscretization.from_uniform(0.0, 40, 0.25)
tenor_grid = TimeDiscretization.from_uniform(0.0, 10, 1.0)

products = []
for tenor_index, vol in market_vols.items():
    fixing_time = tenor_grid.get_time(tenor_index)
    discount = np.exp(-FORWARD * (fixing_time + PERIOD_LENGTH))
    target = float(
        black76_caplet_price(FORWARD, STRIKE, vol, fixing_time, PERIOD_LENGTH, discount)
    )
    # relative price errors
    products.append(
        CalibrationProduct(CapletProduct(tenor_index), target, weight=1.0 / target)
    )

initial = FourParameterExponentialVolatilityModel(
    time_grid, tenor_grid, a=0.15, b=0.1, c=0.5, d=0.15
)

calibrated = initial.get_clone_calibrated(
    ToyShortRateModel(),
    products,
    ToySimulation,
    {"maxIterations": 200, "accuracy": 1e-10, "valuationThreads": 4},
)
print(calibrated)

for tenor_index, vol in market_vols.items():
    fitted = float(calibrated.caplet_volatility.value(tenor_grid.get_time(tenor_index)))
    print(f"{tenor_index:>3}y  market {vol:.4f}  model {fitted:.4f}")

print(calibrated.to_frame().round(4))

plot_caplet_term_structure(calibrated, title="Calibrated caplet volatility")
plot_volatility_grid(calibrated, title="Calibrated instantaneous volatility")
plt.show()

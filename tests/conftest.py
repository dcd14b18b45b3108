"""Shared fakes for the short-rate model, simulation and calibration products."""

from __future__ import annotations

import threading

import numpy as np
import pytest

from ratevol.core.errors import ValuationError
from ratevol.core.time_discretization import TimeDiscretization
from ratevol.volatility.exponential import FourParameterExponentialVolatilityModel


class FakeShortRateModel:
    """Short-rate model stand-in that only carries its volatility model."""

    def __init__(self, volatility_model=None):
        self.volatility_model = volatility_model

    def with_volatility_model(self, volatility_model):
        return FakeShortRateModel(volatility_model)


class FakeSimulation:
    """Holds the model, the randomness and the volatility matrix of the model."""

    def __init__(self, model, brownian_motion):
        self.model = model
        self.brownian_motion = brownian_motion
        volatility_model = model.volatility_model
        self.volatility = (
            None if volatility_model is None else volatility_model.volatility_matrix()
        )

    @property
    def volatility_model(self):
        return self.model.volatility_model


class RecordingSimulationBuilder:
    """Builds :class:`FakeSimulation` objects and remembers their inputs."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, model, brownian_motion):
        with self._lock:
            self.calls.append((model, brownian_motion))
        return FakeSimulation(model, brownian_motion)


class IntegratedVarianceProduct:
    """Deterministic value ``Σ_{i < fixing_index} σ_j(t_i)^2 Δt_i``."""

    def __init__(self, tenor_index, fixing_index):
        self.tenor_index = tenor_index
        self.fixing_index = fixing_index

    def get_value(self, evaluation_time, simulation):
        steps = simulation.volatility_model.time_discretization.time_steps
        vols = simulation.volatility[: self.fixing_index, self.tenor_index]
        return float(np.sum(vols * vols * steps[: self.fixing_index]))


class PathwiseVarianceProduct:
    """Per-path ``(Σ_i σ_j(t_i) ΔW_i)^2`` on the first Brownian factor."""

    def __init__(self, tenor_index, fixing_index):
        self.tenor_index = tenor_index
        self.fixing_index = fixing_index

    def get_value(self, evaluation_time, simulation):
        bm = simulation.brownian_motion
        paths = np.zeros(bm.number_of_paths)
        for i in range(self.fixing_index):
            paths = paths + simulation.volatility[i, self.tenor_index] * bm.get_increment(i, 0)
        return paths * paths


class ConstantProduct:
    def __init__(self, value):
        self.value = value

    def get_value(self, evaluation_time, simulation):
        return self.value


class FailingProduct:
    """Raises ``error`` on every valuation and counts the attempts."""

    def __init__(self, error=None):
        self.error = error if error is not None else ValuationError("instrument cannot be priced")
        self.calls = 0

    def get_value(self, evaluation_time, simulation):
        self.calls += 1
        raise self.error


@pytest.fixture
def time_grid():
    return TimeDiscretization.from_uniform(0.0, 20, 0.25)


@pytest.fixture
def tenor_grid():
    return TimeDiscretization.from_uniform(0.0, 5, 1.0)


@pytest.fixture
def make_model(time_grid, tenor_grid):
    def _make(a=0.10, b=0.05, c=0.8, d=0.12, is_calibrateable=True):
        return FourParameterExponentialVolatilityModel(
            time_grid, tenor_grid, a, b, c, d, is_calibrateable=is_calibrateable
        )

    return _make


@pytest.fixture
def variance_products():
    """(tenor_index, fixing_index) pairs covering several times-to-maturity."""

    pairs = [(j, k) for j in range(1, 6) for k in (1, 2, 3, 4 * j)]
    return [IntegratedVarianceProduct(j, k) for j, k in pairs]


@pytest.fixture
def simulation_builder():
    return RecordingSimulationBuilder()


@pytest.fixture
def short_rate_model():
    return FakeShortRateModel()


@pytest.fixture
def build_simulation():
    """Simulation builder that does not record its calls."""

    return FakeSimulation


@pytest.fixture
def model_values():
    """Return ``values(model, products)``: product values under ``model``."""

    def _values(model, products):
        simulation = FakeSimulation(FakeShortRateModel(model), None)
        return [float(product.get_value(0.0, simulation)) for product in products]

    return _values


@pytest.fixture
def constant_product():
    return ConstantProduct


@pytest.fixture
def pathwise_product():
    return PathwiseVarianceProduct


@pytest.fixture
def failing_product():
    """Return a factory of products raising the given error (a ``ValuationError`` by default)."""

    return FailingProduct

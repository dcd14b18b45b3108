import logging
import threading

import numpy as np
import pytest

from ratevol.calibration import engine as engine_module
from ratevol.calibration.config import CalibrationConfig
from ratevol.calibration.engine import CalibrationResult, calibrate
from ratevol.calibration.executor import ThreadPoolValuationExecutor
from ratevol.calibration.optimizer import LevenbergMarquardtOptimizerFactory
from ratevol.calibration.products import CalibrationProduct
from ratevol.core.errors import CalibrationError, SolverError
from ratevol.montecarlo.brownian_motion import BrownianMotionLazyInit

TRUE_PARAMETERS = (0.10, 0.05, 0.8, 0.12)
INITIAL_PARAMETERS = (0.12, 0.02, 0.6, 0.10)
TIGHT = {"maxIterations": 400, "parameterStep": 1e-7, "accuracy": 1e-12}


@pytest.fixture
def exact_products(make_model, variance_products, model_values):
    """Products whose targets are their values under ``TRUE_PARAMETERS``."""

    targets = model_values(make_model(*TRUE_PARAMETERS), variance_products)
    return [
        CalibrationProduct(product, target_value=target, weight=1.0)
        for product, target in zip(variance_products, targets)
    ]


class RecordingOptimizerFactory:
    """Delegates to a real factory and records every objective evaluation."""

    def __init__(self, inner):
        self.inner = inner
        self.evaluations = []
        self._lock = threading.Lock()

    def get_optimizer(self, objective, *args):
        def recording(parameters):
            values = objective(parameters)
            with self._lock:
                self.evaluations.append(np.array(values))
            return values

        return self.inner.get_optimizer(recording, *args)


class FailingOptimizer:
    def __init__(self, error):
        self.error = error

    def run(self):
        raise self.error

    def get_best_fit_parameters(self):  # pragma: no cover - never reached
        raise AssertionError

    def get_iterations(self):  # pragma: no cover - never reached
        raise AssertionError


class FailingOptimizerFactory:
    def __init__(self, error=None):
        self.error = error if error is not None else SolverError("did not converge")

    def get_optimizer(self, *args):
        return FailingOptimizer(self.error)


def test_recovers_parameters_from_exact_targets(
    make_model, exact_products, variance_products, model_values, short_rate_model, simulation_builder
):
    model = make_model(*INITIAL_PARAMETERS)

    result = calibrate(model, short_rate_model, exact_products, simulation_builder, config=TIGHT)

    assert isinstance(result, CalibrationResult)
    assert result.iterations > 0
    assert np.allclose(result.parameters, TRUE_PARAMETERS, atol=1e-2)
    assert np.array_equal(result.model.get_parameter(), result.parameters)
    calibrated = model_values(result.model, variance_products)
    assert np.allclose(calibrated, [p.target_value for p in exact_products], atol=1e-7)
    assert np.array_equal(model.get_parameter(), INITIAL_PARAMETERS)


def test_get_clone_calibrated_returns_the_model(
    make_model, exact_products, short_rate_model, simulation_builder
):
    model = make_model(*INITIAL_PARAMETERS)

    calibrated = model.get_clone_calibrated(
        short_rate_model, exact_products, simulation_builder, TIGHT
    )

    assert calibrated is not model
    assert np.allclose(calibrated.get_parameter(), TRUE_PARAMETERS, atol=1e-2)


def test_zero_products_converge_immediately(make_model, short_rate_model, simulation_builder):
    model = make_model(*INITIAL_PARAMETERS)

    result = calibrate(model, short_rate_model, [], simulation_builder)

    assert result.iterations == 0
    assert np.allclose(result.parameters, INITIAL_PARAMETERS, atol=1e-4)
    assert result.model is model
    assert simulation_builder.calls == []


def test_always_failing_product_does_not_block_calibration(
    make_model, exact_products, failing_product, short_rate_model, simulation_builder
):
    products = list(exact_products)
    failing_index = 3
    products.insert(
        failing_index, CalibrationProduct(failing_product(), target_value=1.0, weight=5.0)
    )
    factory = RecordingOptimizerFactory(
        LevenbergMarquardtOptimizerFactory(max_iterations=400, accuracy=1e-12)
    )

    result = calibrate(
        make_model(*INITIAL_PARAMETERS),
        short_rate_model,
        products,
        simulation_builder,
        config=CalibrationConfig(parameter_step=1e-7, optimizer_factory=factory),
    )

    assert factory.evaluations
    assert all(values[failing_index] == 0.0 for values in factory.evaluations)
    assert np.allclose(result.parameters, TRUE_PARAMETERS, atol=1e-2)


def test_every_product_failing_still_completes(
    make_model, failing_product, short_rate_model, simulation_builder
):
    products = [
        CalibrationProduct(failing_product(KeyError("fixing")), target_value=0.5)
        for _ in range(5)
    ]
    model = make_model(*INITIAL_PARAMETERS)

    result = calibrate(model, short_rate_model, products, simulation_builder)

    assert np.all(np.isfinite(result.parameters))
    assert result.parameters.size == 4


def test_same_brownian_motion_used_for_every_iteration(
    make_model, exact_products, short_rate_model, simulation_builder
):
    calibrate(
        make_model(*INITIAL_PARAMETERS),
        short_rate_model,
        exact_products,
        simulation_builder,
        config={"maxIterations": 10},
    )

    brownian_motions = {id(bm) for _, bm in simulation_builder.calls}
    assert len(simulation_builder.calls) > 1
    assert len(brownian_motions) == 1
    bm = simulation_builder.calls[0][1]
    assert isinstance(bm, BrownianMotionLazyInit)
    assert bm.seed == 31415
    assert bm.number_of_paths == 2000
    assert bm.number_of_factors == 2
    assert bm.time_discretization == make_model().time_discretization


def test_supplied_brownian_motion_is_reused(
    make_model, exact_products, short_rate_model, simulation_builder, time_grid
):
    supplied = BrownianMotionLazyInit(time_grid, 1, 10, seed=2)

    calibrate(
        make_model(*INITIAL_PARAMETERS),
        short_rate_model,
        exact_products,
        simulation_builder,
        config={"brownianMotion": supplied, "maxIterations": 5},
    )

    assert all(bm is supplied for _, bm in simulation_builder.calls)


def test_solver_failure_is_wrapped_in_calibration_error(
    make_model, exact_products, short_rate_model, simulation_builder
):
    with pytest.raises(CalibrationError) as info:
        calibrate(
            make_model(),
            short_rate_model,
            exact_products,
            simulation_builder,
            config=CalibrationConfig(optimizer_factory=FailingOptimizerFactory()),
        )

    assert isinstance(info.value.__cause__, SolverError)


def test_unexpected_optimizer_error_is_wrapped_in_calibration_error(
    make_model, exact_products, short_rate_model, simulation_builder
):
    error = RuntimeError("optimizer crashed")

    with pytest.raises(CalibrationError) as info:
        calibrate(
            make_model(),
            short_rate_model,
            exact_products,
            simulation_builder,
            config=CalibrationConfig(optimizer_factory=FailingOptimizerFactory(error)),
        )

    assert info.value.__cause__ is error


@pytest.mark.parametrize(
    "error",
    [RuntimeError("simulation could not be built"), TypeError("bad model"), KeyError("curve")],
)
def test_simulation_builder_failure_is_a_calibration_error(
    make_model, constant_product, short_rate_model, error
):
    def builder(model, brownian_motion):
        raise error

    products = [CalibrationProduct(constant_product(1.0), 0.5) for _ in range(5)]

    with pytest.raises(CalibrationError) as info:
        calibrate(make_model(), short_rate_model, products, builder)

    cause = info.value.__cause__
    assert isinstance(cause, SolverError)
    assert cause.__cause__ is error


def test_short_rate_model_substitution_failure_is_a_calibration_error(
    make_model, constant_product, simulation_builder
):
    class BrokenShortRateModel:
        def with_volatility_model(self, volatility_model):
            raise RuntimeError("model cannot take this volatility")

    products = [CalibrationProduct(constant_product(1.0), 0.5) for _ in range(5)]

    with pytest.raises(CalibrationError) as info:
        calibrate(make_model(), BrokenShortRateModel(), products, simulation_builder)

    assert isinstance(info.value.__cause__.__cause__, RuntimeError)


@pytest.mark.parametrize("fail", [False, True])
def test_valuation_pool_released_on_success_and_failure(
    make_model, exact_products, short_rate_model, simulation_builder, monkeypatch, fail
):
    created = []

    def make_executor(threads):
        executor = ThreadPoolValuationExecutor(threads)
        created.append(executor)
        return executor

    monkeypatch.setattr(engine_module, "make_valuation_executor", make_executor)
    config = CalibrationConfig(
        valuation_threads=2,
        max_iterations=5,
        optimizer_factory=FailingOptimizerFactory() if fail else None,
    )

    if fail:
        with pytest.raises(CalibrationError):
            calibrate(make_model(), short_rate_model, exact_products, simulation_builder, config=config)
    else:
        calibrate(make_model(), short_rate_model, exact_products, simulation_builder, config=config)

    assert len(created) == 1
    assert created[0].closed


def test_task_synchronisation_failure_fails_calibration(
    make_model, exact_products, short_rate_model, simulation_builder, monkeypatch
):
    class InterruptedExecutor(ThreadPoolValuationExecutor):
        def run_all(self, tasks):
            raise SolverError("worker interrupted")

    monkeypatch.setattr(engine_module, "make_valuation_executor", InterruptedExecutor)

    with pytest.raises(CalibrationError) as info:
        calibrate(
            make_model(),
            short_rate_model,
            exact_products,
            simulation_builder,
            config={"valuationThreads": 1},
        )

    assert "worker interrupted" in str(info.value.__cause__)


def test_parallel_and_inline_valuation_agree(
    make_model, exact_products, short_rate_model, build_simulation
):
    results = []
    for threads in (0, 3):
        results.append(
            calibrate(
                make_model(*INITIAL_PARAMETERS),
                short_rate_model,
                exact_products,
                build_simulation,
                config=dict(TIGHT, valuationThreads=threads),
            )
        )

    assert np.allclose(results[0].parameters, results[1].parameters, atol=1e-12)
    assert results[0].iterations == results[1].iterations


def test_not_calibrateable_model_is_returned_unchanged(
    make_model, exact_products, short_rate_model, simulation_builder
):
    model = make_model(is_calibrateable=False)

    result = calibrate(model, short_rate_model, exact_products, simulation_builder)

    assert result.model is model
    assert result.parameters.size == 0
    assert result.iterations == 0
    assert simulation_builder.calls == []


def test_completion_is_logged(make_model, exact_products, short_rate_model, simulation_builder, caplog):
    with caplog.at_level(logging.INFO, logger="ratevol"):
        calibrate(
            make_model(*INITIAL_PARAMETERS),
            short_rate_model,
            exact_products,
            simulation_builder,
            config={"maxIterations": 5},
        )

    messages = [record.getMessage() for record in caplog.records]
    assert any("Best parameters" in m and "parameter[3]" in m for m in messages)


def test_result_to_frame(make_model):
    result = CalibrationResult(
        parameters=np.array([0.1, 0.2]), iterations=3, model=make_model()
    )
    frame = result.to_frame()

    assert list(frame.index) == ["parameter[0]", "parameter[1]"]
    assert np.allclose(frame["value"], [0.1, 0.2])

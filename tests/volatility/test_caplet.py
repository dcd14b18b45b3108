import numpy as np
import pytest
from scipy import integrate

from ratevol.volatility.caplet import CapletVolatilityParametric


@pytest.mark.parametrize(
    "params",
    [
        (0.10, 0.05, 0.8, 0.12),
        (0.20, -0.10, 1.5, 0.05),
        (0.15, 0.30, 1e-7, 0.02),
        (0.10, 0.05, 0.0, 0.12),
        (0.10, 0.05, -0.2, 0.12),
    ],
)
@pytest.mark.parametrize("tau", [1e-4, 0.3, 1.0, 7.5, -0.6])
def test_integrated_variance_matches_quadrature(params, tau):
    curve = CapletVolatilityParametric(*params)

    expected, _ = integrate.quad(
        lambda t: float(curve.instantaneous_volatility(t)) ** 2, 0.0, tau
    )
    assert float(curve.integrated_variance(tau)) == pytest.approx(expected, rel=1e-9, abs=1e-14)


def test_flat_curve_has_flat_caplet_volatility():
    curve = CapletVolatilityParametric(0.25, 0.0, 0.0, 0.0)
    tau = np.array([0.1, 1.0, 10.0, -2.0])

    assert np.allclose(curve.value(tau), 0.25)


def test_long_term_level_reached_for_long_maturities():
    curve = CapletVolatilityParametric(0.10, 0.05, 2.0, 0.12)

    assert float(curve.value(200.0)) == pytest.approx(0.12, abs=2e-3)


def test_zero_time_to_maturity_has_zero_volatility():
    curve = CapletVolatilityParametric(0.10, 0.05, 0.8, 0.12)

    assert float(curve.value(0.0)) == 0.0
    assert float(curve.integrated_variance(0.0)) == 0.0


def test_value_is_vectorised():
    curve = CapletVolatilityParametric(0.10, 0.05, 0.8, 0.12)
    tau = np.linspace(0.5, 5.0, 10)

    vector = curve.value(tau)
    scalars = np.array([float(curve.value(t)) for t in tau])

    assert vector.shape == tau.shape
    assert np.allclose(vector, scalars)

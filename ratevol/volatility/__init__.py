from ratevol.volatility.base import ParametricVolatilityModel, ShortRateVolatilityModel
from ratevol.volatility.caplet import CapletVolatilityParametric
from ratevol.volatility.exponential import FourParameterExponentialVolatilityModel


__all__ = [
    "ShortRateVolatilityModel",
    "ParametricVolatilityModel",
    "CapletVolatilityParametric",
    "FourParameterExponentialVolatilityModel",
]

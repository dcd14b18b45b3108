from ratevol.pricing.black76 import (
    black76_caplet_implied_volatility,
    black76_caplet_price,
)


__all__ = ["black76_caplet_price", "black76_caplet_implied_volatility"]

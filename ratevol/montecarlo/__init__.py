from ratevol.montecarlo.brownian_motion import BrownianMotionLazyInit


__all__ = ["BrownianMotionLazyInit"]

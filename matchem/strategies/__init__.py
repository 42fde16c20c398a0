"""Query and guess strategies.

Two capabilities share one interface:
1. basic: first-available candidates, no belief model
2. belief: greedy on a doubly stochastic odds matrix
"""

from .base import Strategy
from .basic import BasicStrategy
from .belief import BeliefStrategy

STRATEGIES: dict[str, type[Strategy]] = {
    "basic": BasicStrategy,
    "belief": BeliefStrategy,
}


def get_strategy(name: str) -> Strategy:
    """Instantiate a strategy by registry name."""
    strategy_cls = STRATEGIES.get(name)
    if strategy_cls is None:
        raise ValueError(f"Unknown strategy: {name}")
    return strategy_cls()


__all__ = [
    "Strategy",
    "BasicStrategy",
    "BeliefStrategy",
    "STRATEGIES",
    "get_strategy",
]

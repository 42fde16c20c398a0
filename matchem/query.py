"""Truth-query selection policies."""

from typing import Optional

from .bitmask import iter_bits
from .errors import ExhaustionError
from .knowledge import KnowledgeStore
from .odds import OddsModel


def first_unknown_query(store: KnowledgeStore) -> tuple[int, int]:
    """First unmatched left item, paired with its first unknown right item.

    Raises:
        ExhaustionError: every left item already has a proven match
    """
    for i in range(store.size):
        if store.has_match(i):
            continue
        for j in iter_bits(store.unknown_mask(i)):
            return (i, j)
    raise ExhaustionError("no unknown pair left to query")


def best_odds_query(
    store: KnowledgeStore,
    odds: OddsModel,
    round_num: int
) -> tuple[int, int]:
    """Unknown pair with the highest current odds.

    This is greedy exploitation of the current best belief, not a search
    for the most informative question. On round 0 nothing is known and
    every pair is equivalent, so (0, 0) is asked.

    Args:
        store: Current knowledge
        odds: Current beliefs
        round_num: 0-based round number

    Returns:
        (left, right) pair; ties go to the first pair in row-major order

    Raises:
        ExhaustionError: no unknown pair exists
    """
    if round_num == 0 and store.is_unknown(0, 0):
        return (0, 0)

    best: Optional[tuple[int, int]] = None
    best_odds = -1.0
    for i in range(store.size):
        for j in iter_bits(store.unknown_mask(i)):
            value = odds[i, j]
            if value > best_odds:
                best = (i, j)
                best_odds = value

    if best is None:
        raise ExhaustionError("no unknown pair left to query")
    return best

"""Construction of a full guessed bijection for a round."""

from typing import Optional

from .bitmask import bit, iter_bits, first_clear
from .errors import ExhaustionError
from .knowledge import KnowledgeStore
from .odds import OddsModel


def build_guess(store: KnowledgeStore, odds: Optional[OddsModel] = None) -> list[int]:
    """Greedy bipartite assignment of right items to left items.

    Left items are visited in order. A proven match is always used.
    Otherwise the unclaimed unknown candidate with the highest odds is
    taken (the first unclaimed one when `odds` is None). Left items whose
    candidates were all claimed get the lowest unclaimed right item
    (a proven miss at that point), so the guess stays a permutation.

    Args:
        store: Current knowledge
        odds: Current beliefs, or None for the first-candidate variant

    Returns:
        guess[i] = right item guessed for left item i

    Raises:
        ExhaustionError: the result is not a permutation
    """
    size = store.size
    guess = [-1] * size
    claimed = 0

    for i in range(size):
        match = store.match_of(i)
        if match is not None:
            guess[i] = match
            claimed |= bit(match)
            continue

        candidates = store.unknown_mask(i) & ~claimed
        pick = -1
        if odds is None:
            pick = next(iter_bits(candidates), -1)
        else:
            best_odds = -1.0
            for j in iter_bits(candidates):
                if odds[i, j] > best_odds:
                    pick = j
                    best_odds = odds[i, j]
        if pick >= 0:
            guess[i] = pick
            claimed |= bit(pick)

    # Left items with exhausted candidate lists
    for i in range(size):
        if guess[i] >= 0:
            continue
        spare = first_clear(claimed, size)
        if spare is None:
            raise ExhaustionError(f"no right item left for left item {i}")
        guess[i] = spare
        claimed |= bit(spare)

    if sorted(guess) != list(range(size)):
        raise ExhaustionError(f"guess is not a permutation: {guess}")
    return guess

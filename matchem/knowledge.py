"""Proven facts about the hidden bijection.

Each left item i owns two bit-sets over right items:

- known_match[i]: the proven partner (empty or exactly one bit)
- known_miss[i]: right items proven NOT to be the partner

The store is the single source of truth for what is certain. Only the
inference engine writes to it.
"""

from typing import Optional

from .bitmask import (
    bit,
    full_mask,
    has_bit,
    popcount,
    first_clear,
    single_index,
    to_bitstring,
)
from .errors import ContradictionError, InvariantViolationError
from .models import MatchState


class KnowledgeStore:
    """Per left item record of proven matches and non-matches."""

    def __init__(self, size: int):
        self.size = size
        self.known_match: list[int] = [0] * size
        self.known_miss: list[int] = [0] * size

    def reset(self) -> None:
        """Forget everything (all pairs unknown)."""
        for i in range(self.size):
            self.known_match[i] = 0
            self.known_miss[i] = 0

    def state(self, left: int, right: int) -> MatchState:
        """What is known about the pair (left, right)."""
        is_match = has_bit(self.known_match[left], right)
        is_miss = has_bit(self.known_miss[left], right)
        if is_match and is_miss:
            raise InvariantViolationError(
                [f"pair ({left}, {right}) is both a known match and a known miss"]
            )
        if is_match:
            return MatchState.MATCH
        if is_miss:
            return MatchState.NO_MATCH
        return MatchState.UNKNOWN

    def is_unknown(self, left: int, right: int) -> bool:
        return self.state(left, right) is MatchState.UNKNOWN

    def record(self, left: int, right: int, outcome: MatchState) -> None:
        """Record a proven outcome for an unknown pair.

        A match closes the rest of the row (every other right item becomes a
        miss for `left`) and the column (`right` becomes a miss for every
        other left item).

        Args:
            left: Left item index
            right: Right item index
            outcome: MatchState.MATCH or MatchState.NO_MATCH

        Raises:
            ContradictionError: the pair is already known, or the right item
                already belongs to another left item
        """
        current = self.state(left, right)
        if current is not MatchState.UNKNOWN:
            raise ContradictionError(
                left, right, f"already known as {current.value}, cannot record {outcome.value}"
            )

        if outcome is MatchState.MATCH:
            owner = self.owner_of(right)
            if owner is not None:
                raise ContradictionError(left, right, f"right item already matched to left {owner}")
            self.known_match[left] = bit(right)
            self.known_miss[left] = full_mask(self.size) & ~bit(right)
            for k in range(self.size):
                if k != left:
                    self.known_miss[k] |= bit(right)
        elif outcome is MatchState.NO_MATCH:
            self.known_miss[left] |= bit(right)
        else:
            raise ValueError(f"cannot record outcome {outcome}")

    # ------------------------------------------------------------------
    # Derived queries
    # ------------------------------------------------------------------

    def has_match(self, left: int) -> bool:
        return self.known_match[left] != 0

    def match_of(self, left: int) -> Optional[int]:
        """Proven partner of `left`, or None."""
        return single_index(self.known_match[left])

    def owner_of(self, right: int) -> Optional[int]:
        """Left item proven to own `right`, or None."""
        for i in range(self.size):
            if has_bit(self.known_match[i], right):
                return i
        return None

    def candidate_count(self, left: int) -> int:
        """Right items not yet ruled out for `left`."""
        return self.size - popcount(self.known_miss[left])

    def back_candidate_count(self, right: int) -> int:
        """Left items not yet ruled out for `right`."""
        return sum(1 for i in range(self.size) if not has_bit(self.known_miss[i], right))

    def first_candidate(self, left: int) -> Optional[int]:
        return first_clear(self.known_miss[left], self.size)

    def first_back_candidate(self, right: int) -> Optional[int]:
        for i in range(self.size):
            if not has_bit(self.known_miss[i], right):
                return i
        return None

    def unknown_mask(self, left: int) -> int:
        """Bit-set of right items whose pair with `left` is still unknown."""
        return full_mask(self.size) & ~(self.known_miss[left] | self.known_match[left])

    def num_unknown(self) -> int:
        return sum(popcount(self.unknown_mask(i)) for i in range(self.size))

    def is_solved(self) -> bool:
        return all(self.has_match(i) for i in range(self.size))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KnowledgeStore):
            return NotImplemented
        return (
            self.size == other.size
            and self.known_match == other.known_match
            and self.known_miss == other.known_miss
        )

    def render(self) -> str:
        """Grid of the store, one row per left item (M = match, x = miss, . = unknown)."""
        lines = []
        for i in range(self.size):
            cells = []
            for j in range(self.size):
                s = self.state(i, j)
                cells.append("M" if s is MatchState.MATCH else "x" if s is MatchState.NO_MATCH else ".")
            lines.append(
                f"{i:>2}: {' '.join(cells)}  match={to_bitstring(self.known_match[i], self.size)}"
                f" miss={to_bitstring(self.known_miss[i], self.size)}"
            )
        return "\n".join(lines)

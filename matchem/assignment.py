"""The secret bijection a trial has to discover."""

import random
from typing import Optional, Sequence


class HiddenAssignment:
    """Secret one-to-one mapping from left items to right items.

    `truth[i]` is the right item matched to left item i. The mapping never
    changes after construction and is only consulted through `is_match`
    (truth queries) and `score` (guess scoring).
    """

    def __init__(self, truth: Sequence[int]):
        size = len(truth)
        if sorted(truth) != list(range(size)):
            raise ValueError(f"not a permutation of [0, {size}): {list(truth)}")
        self._truth = tuple(truth)

    @classmethod
    def random(cls, size: int, rng: Optional[random.Random] = None) -> "HiddenAssignment":
        """Draw a uniformly random permutation of [0, size)."""
        rng = rng or random.Random()
        truth = list(range(size))
        rng.shuffle(truth)
        return cls(truth)

    @property
    def size(self) -> int:
        return len(self._truth)

    def is_match(self, left: int, right: int) -> bool:
        """Answer a truth query: does `left` map to `right`?"""
        return self._truth[left] == right

    def score(self, guess: Sequence[int]) -> int:
        """Count positions where the guess agrees with the secret."""
        return sum(1 for i, j in enumerate(guess) if self._truth[i] == j)

    def __repr__(self) -> str:
        # Keep the secret out of logs and state dumps
        return f"HiddenAssignment(size={self.size})"

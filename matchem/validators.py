"""Consistency checks for trial state.

Each validator returns a ValidationResult listing every violation found.
Callers decide whether a violation is fatal.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from .assignment import HiddenAssignment
from .bitmask import bit, has_bit, is_singleton, popcount
from .knowledge import KnowledgeStore
from .odds import OddsModel

# Allowed distance of a row or column sum from 1.0
ODDS_EPSILON = 1e-4


@dataclass
class ValidationResult:
    """Result of a state validation."""
    violations: list[str] = field(default_factory=list)
    metrics: dict = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return not self.violations

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(
            violations=self.violations + other.violations,
            metrics={**self.metrics, **other.metrics},
        )


def validate_knowledge(
    store: KnowledgeStore,
    assignment: Optional[HiddenAssignment] = None
) -> ValidationResult:
    """Check the bit-set invariants of the store.

    - known_match[i] is empty or a single bit
    - known_match[i] and known_miss[i] are disjoint
    - a matched right item is a known miss for every other left item
    - no right item is matched twice

    When `assignment` is given, also check that no recorded fact
    contradicts the secret.
    """
    violations = []
    owners: dict[int, int] = {}

    for i in range(store.size):
        match_bits = store.known_match[i]
        miss_bits = store.known_miss[i]
        if match_bits and not is_singleton(match_bits):
            violations.append(f"left {i}: {popcount(match_bits)} known matches")
        if match_bits & miss_bits:
            violations.append(f"left {i}: match and miss sets overlap")
        if not match_bits and store.candidate_count(i) == 0:
            violations.append(f"left {i}: no match and no candidate left")
        if is_singleton(match_bits):
            j = store.match_of(i)
            if j in owners:
                violations.append(f"right {j}: matched to both left {owners[j]} and left {i}")
            owners[j] = i
            for k in range(store.size):
                if k != i and not has_bit(store.known_miss[k], j):
                    violations.append(f"right {j} owned by left {i} but not a known miss for left {k}")

    if assignment is not None:
        for i in range(store.size):
            for j in range(store.size):
                truth = assignment.is_match(i, j)
                if has_bit(store.known_match[i], j) and not truth:
                    violations.append(f"({i}, {j}) recorded as match but is not")
                if has_bit(store.known_miss[i], j) and truth:
                    violations.append(f"({i}, {j}) recorded as miss but is the match")

    return ValidationResult(
        violations=violations,
        metrics={"known_matches": len(owners), "unknown_pairs": store.num_unknown()},
    )


def validate_odds(
    odds: OddsModel,
    store: Optional[KnowledgeStore] = None,
    epsilon: float = ODDS_EPSILON
) -> ValidationResult:
    """Check that the belief matrix is doubly stochastic.

    With a store, proven matches must hold 1 and proven misses 0.
    """
    violations = []
    matrix = odds.odds

    if (matrix < 0.0).any() or (matrix > 1.0 + epsilon).any():
        violations.append("odds outside [0, 1]")

    row_sums = odds.row_sums()
    col_sums = odds.col_sums()
    for i, total in enumerate(row_sums):
        if abs(total - 1.0) > epsilon:
            violations.append(f"row {i} sums to {total:.6f}")
    for j, total in enumerate(col_sums):
        if abs(total - 1.0) > epsilon:
            violations.append(f"column {j} sums to {total:.6f}")

    if store is not None:
        for i in range(store.size):
            for j in range(store.size):
                if has_bit(store.known_match[i], j) and abs(matrix[i, j] - 1.0) > epsilon:
                    violations.append(f"({i}, {j}) is a known match with odds {matrix[i, j]:.6f}")
                elif has_bit(store.known_miss[i], j) and matrix[i, j] > epsilon:
                    violations.append(f"({i}, {j}) is a known miss with odds {matrix[i, j]:.6f}")

    return ValidationResult(
        violations=violations,
        metrics={
            "max_row_error": float(np.abs(row_sums - 1.0).max()),
            "max_col_error": float(np.abs(col_sums - 1.0).max()),
        },
    )


def validate_guess(guess: Sequence[int], size: int) -> ValidationResult:
    """Check that the guess is a permutation of [0, size)."""
    violations = []
    if len(guess) != size:
        violations.append(f"guess has {len(guess)} entries, expected {size}")
    seen = 0
    for i, j in enumerate(guess):
        if not 0 <= j < size:
            violations.append(f"left {i} guessed out-of-range right {j}")
            continue
        if has_bit(seen, j):
            violations.append(f"right {j} guessed more than once")
        seen |= bit(j)
    return ValidationResult(violations=violations)


def validate_state(
    store: KnowledgeStore,
    odds: Optional[OddsModel] = None,
    guess: Optional[Sequence[int]] = None,
    assignment: Optional[HiddenAssignment] = None
) -> ValidationResult:
    """Run every applicable validator and merge the results."""
    result = validate_knowledge(store, assignment)
    if odds is not None:
        result = result.merge(validate_odds(odds, store))
    if guess is not None:
        result = result.merge(validate_guess(guess, store.size))
    return result

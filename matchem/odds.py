"""Belief matrix over (left, right) pairs.

`odds[i, j]` is the believed probability that left item i maps to right
item j given everything proven so far. Whenever the model is active every
row and every column sums to 1 (doubly stochastic), proven matches are
pinned to 1 and proven misses to 0.

Each recorded outcome is first absorbed with a cheap local rule that moves
the eliminated mass to neighbouring unknown entries. Once an inference
cascade is complete, `rebalance` zeroes the unknown pairs that no longer
fit any consistent bijection and restores the row and column sums with
Sinkhorn-Knopp scaling.
"""

import logging

import numpy as np

from .errors import InvariantViolationError
from .knowledge import KnowledgeStore
from .matching import viable_pairs

logger = logging.getLogger(__name__)

# Viable unknown entries never drop below this during rebalancing
ODDS_FLOOR = 1e-6

# Sinkhorn stopping rule
REBALANCE_TOLERANCE = 1e-10
REBALANCE_MAX_ITERATIONS = 2000


def unknown_matrix(store: KnowledgeStore) -> np.ndarray:
    """Boolean matrix of pairs whose outcome is still unknown."""
    size = store.size
    mask = np.zeros((size, size), dtype=bool)
    for i in range(size):
        unknown = store.unknown_mask(i)
        for j in range(size):
            mask[i, j] = (unknown >> j) & 1 == 1
    return mask


class OddsModel:
    """Doubly stochastic matrix of match beliefs."""

    def __init__(self, size: int):
        self.size = size
        self.odds = np.full((size, size), 1.0 / size)

    def reset(self) -> None:
        """Back to the uniform prior (1/N everywhere)."""
        self.odds.fill(1.0 / self.size)

    def row_sums(self) -> np.ndarray:
        return self.odds.sum(axis=1)

    def col_sums(self) -> np.ndarray:
        return self.odds.sum(axis=0)

    def __getitem__(self, pair: tuple[int, int]) -> float:
        return float(self.odds[pair])

    # ------------------------------------------------------------------
    # Local updates, applied right after the store recorded an outcome
    # ------------------------------------------------------------------

    def apply_match(self, store: KnowledgeStore, left: int, right: int) -> None:
        """Pin row `left` to `right` and move column `right` mass elsewhere.

        Mass row `left` held on other columns goes to those columns' other
        unknown rows. Mass other rows held on column `right` goes to their
        own remaining unknown columns, weighted by what they already hold.
        """
        unknown = unknown_matrix(store)

        for col in range(self.size):
            if col == right:
                continue
            lost = self.odds[left, col]
            if lost <= 0.0:
                continue
            rows = unknown[:, col].copy()
            rows[left] = False
            if rows.any():
                self._spread(self.odds[:, col], rows, lost)

        self.odds[left, :] = 0.0
        self.odds[left, right] = 1.0

        for k in range(self.size):
            if k == left:
                continue
            moved = self.odds[k, right]
            if moved <= 0.0:
                continue
            self.odds[k, right] = 0.0
            cols = unknown[k]
            if not cols.any():
                if store.has_match(k):
                    continue
                raise InvariantViolationError(
                    [f"left {k} lost right {right} but has no unknown candidate left"]
                )
            self._spread(self.odds[k], cols, moved)

    def apply_miss(self, store: KnowledgeStore, left: int, right: int) -> None:
        """Remove the (left, right) mass and compensate the columns.

        Row `left` gains the removed mass on its remaining unknown columns.
        Each such column c then gives the same amount back from rows k whose
        (k, c) and (k, right) are both unknown; those rows claim it on
        column `right`, so every touched row and column keeps its total.
        """
        before = self.odds[left, right]
        self.odds[left, right] = 0.0
        if before <= 0.0:
            return

        unknown = unknown_matrix(store)
        cols = unknown[left]
        if not cols.any():
            raise InvariantViolationError(
                [f"left {left} has no unknown candidate to absorb mass from right {right}"]
            )
        gains = self._spread(self.odds[left], cols, before)

        donors = unknown & unknown[:, right][:, None]
        donors[left, :] = False
        returned = np.zeros(self.size)
        for col in np.flatnonzero(gains):
            rows = donors[:, col]
            if not rows.any():
                continue
            available = self.odds[rows, col]
            total = available.sum()
            if total <= 0.0:
                continue
            take = min(gains[col], total) * available / total
            # round-off can push entries very slightly below zero
            self.odds[rows, col] = np.clip(available - take, 0.0, None)
            returned[rows] += take
        self.odds[:, right] += returned

    @staticmethod
    def _spread(line: np.ndarray, targets: np.ndarray, amount: float) -> np.ndarray:
        """Add `amount` to line[targets] in proportion to their current mass.

        Falls back to an even split when the targets hold no mass. `line`
        is a view into the matrix and is updated in place.

        Returns:
            The per-entry increments (same shape as `line`)
        """
        weights = np.where(targets, line, 0.0)
        total = weights.sum()
        if total > 0.0:
            delta = amount * weights / total
        else:
            delta = np.where(targets, amount / targets.sum(), 0.0)
        line += delta
        return delta

    # ------------------------------------------------------------------
    # Global repair
    # ------------------------------------------------------------------

    def rebalance(self, store: KnowledgeStore) -> int:
        """Restore the doubly stochastic invariant against the store.

        Proven pairs are pinned, unknown pairs outside every consistent
        bijection are zeroed and the rest is rescaled until each open row
        and column sums to 1.

        Returns:
            Number of Sinkhorn iterations used

        Raises:
            InvariantViolationError: the store admits no bijection at all
        """
        unknown = unknown_matrix(store)
        self.odds[~unknown] = 0.0
        for i in range(self.size):
            match = store.match_of(i)
            if match is not None:
                self.odds[i, match] = 1.0

        open_rows = np.flatnonzero(unknown.any(axis=1))
        open_cols = np.flatnonzero(unknown.any(axis=0))
        if open_rows.size == 0:
            return 0
        if open_rows.size != open_cols.size:
            raise InvariantViolationError(
                [f"{open_rows.size} unmatched left items but {open_cols.size} unmatched right items"]
            )

        support = unknown[np.ix_(open_rows, open_cols)]
        try:
            viable = viable_pairs(support)
        except ValueError as e:
            raise InvariantViolationError([f"knowledge admits no bijection: {e}"]) from e

        block = self.odds[np.ix_(open_rows, open_cols)]
        block = np.where(viable, np.maximum(block, ODDS_FLOOR), 0.0)

        iterations = 0
        for iterations in range(1, REBALANCE_MAX_ITERATIONS + 1):
            block /= block.sum(axis=1, keepdims=True)
            block /= block.sum(axis=0, keepdims=True)
            if np.abs(block.sum(axis=1) - 1.0).max() < REBALANCE_TOLERANCE:
                break
        else:
            logger.warning(
                "rebalance stopped after %d iterations (row error %.3g)",
                iterations, np.abs(block.sum(axis=1) - 1.0).max(),
            )

        self.odds[np.ix_(open_rows, open_cols)] = block
        return iterations

    def render(self, precision: int = 3) -> str:
        """Matrix as text, one row per left item."""
        width = precision + 3
        lines = []
        for i in range(self.size):
            cells = " ".join(f"{v:{width}.{precision}f}" for v in self.odds[i])
            lines.append(f"{i:>2}: {cells}")
        return "\n".join(lines)

"""Turning truth-query answers into knowledge and forced deductions.

One answer can force further matches: when a left item is down to a
single candidate, or a right item to a single possible owner, that pair
must be the match. Forced pairs go through a FIFO worklist so the
cascade has bounded stack depth and a well-defined order.
"""

import logging
from collections import deque
from typing import Optional

from .errors import ContradictionError
from .knowledge import KnowledgeStore
from .models import Deduction, MatchState
from .odds import OddsModel

logger = logging.getLogger(__name__)


class InferenceEngine:
    """Updates knowledge and beliefs from one truth-query answer.

    Args:
        store: Knowledge store to write to
        odds: Belief model to keep consistent, or None for the basic variant
    """

    def __init__(self, store: KnowledgeStore, odds: Optional[OddsModel] = None):
        self.store = store
        self.odds = odds

    def apply(self, left: int, right: int, outcome: MatchState) -> list[Deduction]:
        """Record a query answer and everything it forces.

        Args:
            left: Queried left item
            right: Queried right item
            outcome: The answer, MATCH or NO_MATCH

        Returns:
            Recorded deductions in processing order, the query itself first

        Raises:
            ContradictionError: the pair (or a forced pair) is already known
                with a different outcome
        """
        worklist: deque[Deduction] = deque([Deduction(left, right, outcome, "query")])
        pending = {(left, right)}
        recorded: list[Deduction] = []

        while worklist:
            deduction = worklist.popleft()
            i, j = deduction.pair
            pending.discard((i, j))

            current = self.store.state(i, j)
            if current is not MatchState.UNKNOWN:
                if deduction.source != "query" and current is deduction.outcome:
                    # already settled by an earlier step of this cascade
                    continue
                raise ContradictionError(
                    i, j, f"cannot record {deduction.outcome.value}, already {current.value}"
                )

            self._record(deduction)
            recorded.append(deduction)

            for forced in self._forced_by(deduction):
                if forced.pair not in pending:
                    pending.add(forced.pair)
                    worklist.append(forced)

        if self.odds is not None:
            self.odds.rebalance(self.store)
        return recorded

    def _record(self, deduction: Deduction) -> None:
        i, j = deduction.pair
        self.store.record(i, j, deduction.outcome)
        if self.odds is not None:
            if deduction.outcome is MatchState.MATCH:
                self.odds.apply_match(self.store, i, j)
            else:
                self.odds.apply_miss(self.store, i, j)
        logger.debug(
            "left %d %s right %d (%s)",
            i, "matched" if deduction.outcome is MatchState.MATCH else "did not match", j,
            deduction.source,
        )

    def _forced_by(self, deduction: Deduction) -> list[Deduction]:
        """Matches that became certain after recording `deduction`.

        A miss can only narrow its own row and column. A match removes its
        right item from every other row and closes its own row, which
        narrows every other column.
        """
        i, j = deduction.pair
        if deduction.outcome is MatchState.NO_MATCH:
            rows = [i]
            cols = [j]
        else:
            rows = [k for k in range(self.store.size) if k != i]
            cols = [c for c in range(self.store.size) if c != j]

        forced = []
        for row in rows:
            pair = self._single_candidate(row)
            if pair is not None:
                forced.append(Deduction(pair[0], pair[1], MatchState.MATCH, "forced_row"))
        for col in cols:
            pair = self._single_back_candidate(col)
            if pair is not None:
                forced.append(Deduction(pair[0], pair[1], MatchState.MATCH, "forced_column"))
        return forced

    def _single_candidate(self, left: int) -> Optional[tuple[int, int]]:
        if self.store.candidate_count(left) != 1:
            return None
        right = self.store.first_candidate(left)
        if not self.store.is_unknown(left, right):
            return None
        return (left, right)

    def _single_back_candidate(self, right: int) -> Optional[tuple[int, int]]:
        if self.store.back_candidate_count(right) != 1:
            return None
        left = self.store.first_back_candidate(right)
        if not self.store.is_unknown(left, right):
            return None
        return (left, right)


def replay(
    store: KnowledgeStore,
    odds: Optional[OddsModel],
    answers: list[tuple[int, int, MatchState]]
) -> list[Deduction]:
    """Reset the state and re-apply a sequence of query answers.

    Pairs already settled by an earlier cascade are skipped.

    Returns:
        Every deduction recorded, in order
    """
    store.reset()
    if odds is not None:
        odds.reset()
    engine = InferenceEngine(store, odds)
    recorded = []
    for left, right, outcome in answers:
        if store.is_unknown(left, right):
            recorded.extend(engine.apply(left, right, outcome))
    return recorded

"""Tests for the inference engine and forced-deduction cascade."""

import numpy as np
import pytest
from matchem.errors import ContradictionError
from matchem.inference import InferenceEngine, replay
from matchem.knowledge import KnowledgeStore
from matchem.models import Deduction, MatchState
from matchem.odds import OddsModel
from matchem.validators import validate_knowledge, validate_odds

M = MatchState.MATCH
NO = MatchState.NO_MATCH


class CountingStore(KnowledgeStore):
    """Knowledge store that counts record() calls."""

    def __init__(self, size: int):
        super().__init__(size)
        self.calls = 0

    def record(self, left, right, outcome):
        self.calls += 1
        super().record(left, right, outcome)


class TestCascade:
    def test_miss_without_consequences(self):
        store = KnowledgeStore(4)
        recorded = InferenceEngine(store).apply(0, 0, NO)
        assert recorded == [Deduction(0, 0, NO, "query")]
        assert store.num_unknown() == 15

    def test_miss_forces_row_then_column(self):
        store = KnowledgeStore(2)
        recorded = InferenceEngine(store).apply(0, 0, NO)
        assert recorded == [
            Deduction(0, 0, NO, "query"),
            Deduction(0, 1, M, "forced_row"),
            Deduction(1, 0, M, "forced_column"),
        ]
        assert store.is_solved()

    def test_match_forces_remaining_pair_once(self):
        store = CountingStore(2)
        recorded = InferenceEngine(store).apply(0, 0, M)
        assert recorded == [
            Deduction(0, 0, M, "query"),
            Deduction(1, 1, M, "forced_row"),
        ]
        # (1, 1) is forced by both its row and its column but recorded once
        assert store.calls == 2

    def test_match_forces_through_rows_and_columns(self):
        store = KnowledgeStore(3)
        engine = InferenceEngine(store)
        engine.apply(1, 2, NO)
        recorded = engine.apply(0, 0, M)
        assert recorded == [
            Deduction(0, 0, M, "query"),
            Deduction(1, 1, M, "forced_row"),
            Deduction(2, 2, M, "forced_column"),
        ]
        assert store.is_solved()
        assert [store.match_of(i) for i in range(3)] == [0, 1, 2]

    def test_chain_through_misses(self):
        store = KnowledgeStore(3)
        engine = InferenceEngine(store)
        engine.apply(0, 0, NO)
        engine.apply(0, 1, NO)
        # left 0 is down to right 2
        assert store.match_of(0) == 2
        assert validate_knowledge(store).passed

    def test_query_on_known_pair_raises(self):
        store = KnowledgeStore(3)
        engine = InferenceEngine(store)
        engine.apply(0, 0, NO)
        with pytest.raises(ContradictionError):
            engine.apply(0, 0, M)
        with pytest.raises(ContradictionError):
            engine.apply(0, 0, NO)

    def test_query_on_matched_column_raises(self):
        store = KnowledgeStore(3)
        engine = InferenceEngine(store)
        engine.apply(0, 1, M)
        with pytest.raises(ContradictionError):
            engine.apply(2, 1, M)


class TestWithOdds:
    def test_first_miss_keeps_odds_exact(self):
        store = KnowledgeStore(4)
        odds = OddsModel(4)
        InferenceEngine(store, odds).apply(0, 0, NO)

        assert odds[0, 0] == 0.0
        assert odds[0, 1] == pytest.approx(1.0 / 3)
        assert odds[1, 0] == pytest.approx(1.0 / 3)
        assert odds[1, 1] == pytest.approx(2.0 / 9)
        assert validate_odds(odds, store).passed

    def test_match_pins_and_spreads(self):
        store = KnowledgeStore(3)
        odds = OddsModel(3)
        InferenceEngine(store, odds).apply(0, 0, M)

        assert odds[0, 0] == 1.0
        assert np.allclose(odds.odds[1], [0.0, 0.5, 0.5])
        assert np.allclose(odds.odds[2], [0.0, 0.5, 0.5])

    def test_solved_by_cascade(self):
        store = KnowledgeStore(2)
        odds = OddsModel(2)
        InferenceEngine(store, odds).apply(0, 0, NO)
        assert np.array_equal(odds.odds, np.array([[0.0, 1.0], [1.0, 0.0]]))


class TestReplay:
    def test_rebuilds_same_state(self):
        answers = [(0, 0, NO), (1, 1, NO), (0, 1, M)]
        store = KnowledgeStore(4)
        odds = OddsModel(4)
        engine = InferenceEngine(store, odds)
        for left, right, outcome in answers:
            engine.apply(left, right, outcome)

        other_store = KnowledgeStore(4)
        other_odds = OddsModel(4)
        other_store.record(3, 3, NO)
        replay(other_store, other_odds, answers)

        assert other_store == store
        assert np.allclose(other_odds.odds, odds.odds)

    def test_skips_settled_pairs(self):
        store = KnowledgeStore(2)
        # (0, 1) is already forced by the first answer
        recorded = replay(store, None, [(0, 0, NO), (0, 1, M)])
        assert [d.source for d in recorded] == ["query", "forced_row", "forced_column"]

"""Tests for the knowledge store."""

import pytest
from matchem.errors import ContradictionError, InvariantViolationError
from matchem.knowledge import KnowledgeStore
from matchem.models import MatchState


class TestInitialState:
    def test_all_unknown(self):
        store = KnowledgeStore(4)
        for i in range(4):
            for j in range(4):
                assert store.state(i, j) is MatchState.UNKNOWN

    def test_counts(self):
        store = KnowledgeStore(5)
        assert store.candidate_count(2) == 5
        assert store.back_candidate_count(3) == 5
        assert store.first_candidate(0) == 0
        assert store.first_back_candidate(4) == 0
        assert not store.has_match(0)
        assert store.match_of(0) is None
        assert store.num_unknown() == 25


class TestRecordMiss:
    def test_marks_only_pair(self):
        store = KnowledgeStore(4)
        store.record(1, 2, MatchState.NO_MATCH)
        assert store.state(1, 2) is MatchState.NO_MATCH
        assert store.state(1, 3) is MatchState.UNKNOWN
        assert store.state(0, 2) is MatchState.UNKNOWN

    def test_counts_shrink(self):
        store = KnowledgeStore(4)
        store.record(1, 0, MatchState.NO_MATCH)
        assert store.candidate_count(1) == 3
        assert store.back_candidate_count(0) == 3
        assert store.first_candidate(1) == 1
        assert store.first_back_candidate(0) == 0

    def test_first_back_candidate_skips_misses(self):
        store = KnowledgeStore(3)
        store.record(0, 1, MatchState.NO_MATCH)
        assert store.first_back_candidate(1) == 1


class TestRecordMatch:
    def test_pins_row_and_column(self):
        store = KnowledgeStore(4)
        store.record(0, 2, MatchState.MATCH)

        assert store.state(0, 2) is MatchState.MATCH
        assert store.has_match(0)
        assert store.match_of(0) == 2
        assert store.owner_of(2) == 0
        for j in (0, 1, 3):
            assert store.state(0, j) is MatchState.NO_MATCH
        for k in (1, 2, 3):
            assert store.state(k, 2) is MatchState.NO_MATCH
            assert store.candidate_count(k) == 3

    def test_back_count_of_owned_column(self):
        store = KnowledgeStore(4)
        store.record(0, 2, MatchState.MATCH)
        assert store.back_candidate_count(2) == 1
        assert store.first_back_candidate(2) == 0

    def test_match_and_miss_disjoint(self):
        store = KnowledgeStore(4)
        store.record(3, 1, MatchState.MATCH)
        for i in range(4):
            assert store.known_match[i] & store.known_miss[i] == 0

    def test_is_solved(self):
        store = KnowledgeStore(2)
        assert not store.is_solved()
        store.record(0, 1, MatchState.MATCH)
        store.record(1, 0, MatchState.MATCH)
        assert store.is_solved()


class TestContradictions:
    def test_record_known_pair_twice(self):
        store = KnowledgeStore(3)
        store.record(0, 0, MatchState.NO_MATCH)
        with pytest.raises(ContradictionError):
            store.record(0, 0, MatchState.NO_MATCH)

    def test_match_after_miss(self):
        store = KnowledgeStore(3)
        store.record(0, 0, MatchState.NO_MATCH)
        with pytest.raises(ContradictionError):
            store.record(0, 0, MatchState.MATCH)

    def test_second_match_in_row(self):
        store = KnowledgeStore(3)
        store.record(0, 0, MatchState.MATCH)
        with pytest.raises(ContradictionError):
            store.record(0, 1, MatchState.MATCH)

    def test_unknown_outcome_rejected(self):
        store = KnowledgeStore(3)
        with pytest.raises(ValueError):
            store.record(0, 0, MatchState.UNKNOWN)

    def test_corrupted_bits_detected(self):
        store = KnowledgeStore(3)
        store.known_match[1] = 0b010
        store.known_miss[1] = 0b010
        with pytest.raises(InvariantViolationError):
            store.state(1, 1)


class TestMonotonicity:
    def test_match_never_retracted(self):
        store = KnowledgeStore(4)
        store.record(2, 3, MatchState.MATCH)
        store.record(0, 0, MatchState.NO_MATCH)
        store.record(1, 1, MatchState.NO_MATCH)
        store.record(0, 1, MatchState.MATCH)
        assert store.state(2, 3) is MatchState.MATCH


class TestReset:
    def test_reset(self):
        store = KnowledgeStore(3)
        store.record(0, 1, MatchState.MATCH)
        store.reset()
        assert store == KnowledgeStore(3)


class TestRender:
    def test_symbols(self):
        store = KnowledgeStore(3)
        store.record(0, 1, MatchState.MATCH)
        store.record(1, 0, MatchState.NO_MATCH)
        lines = store.render().splitlines()
        assert len(lines) == 3
        assert lines[0].startswith(" 0: x M x")
        assert lines[1].startswith(" 1: x x .")

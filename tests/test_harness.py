"""Tests for the multi-trial harness."""

import pytest
from matchem.config import RunConfig, TrialConfig
from matchem.errors import ConfigError
from matchem.harness import TrialRunner, WorkspacePool, summarize, trial_seeds
from matchem.strategies import get_strategy


def make_run_config(**kwargs) -> RunConfig:
    trial = TrialConfig(
        size=kwargs.pop("size", 5),
        strategy=kwargs.pop("strategy", "belief"),
    )
    return RunConfig(trial=trial, **kwargs)


class TestWorkspacePool:
    def test_acquire_release(self):
        pool = WorkspacePool(2, 3, get_strategy("basic"))
        assert pool.num_free == 2
        idx = pool.acquire()
        assert pool.num_free == 1
        assert pool.workspace(idx).size == 3
        pool.release(idx)
        assert pool.num_free == 2

    def test_slot_context(self):
        pool = WorkspacePool(1, 4, get_strategy("belief"))
        with pool.slot() as workspace:
            assert pool.num_free == 0
            assert workspace.odds is not None
        assert pool.num_free == 1

    def test_slot_released_on_error(self):
        pool = WorkspacePool(1, 4, get_strategy("basic"))
        with pytest.raises(KeyError):
            with pool.slot():
                raise KeyError("boom")
        assert pool.num_free == 1

    def test_needs_a_slot(self):
        with pytest.raises(ValueError):
            WorkspacePool(0, 4, get_strategy("basic"))


class TestTrialSeeds:
    def test_deterministic(self):
        assert trial_seeds(5, 10) == trial_seeds(5, 10)
        assert trial_seeds(5, 10) != trial_seeds(6, 10)

    def test_prefix_stable(self):
        assert trial_seeds(1, 20)[:5] == trial_seeds(1, 5)


class TestSummarize:
    def test_reduce(self):
        summary = summarize([3, 5, 3], size=4, strategy="basic", elapsed_seconds=0.5, workers=2, seed=9)
        assert summary.num_runs == 3
        assert summary.total_rounds == 11
        assert summary.min_rounds == 3
        assert summary.max_rounds == 5
        assert summary.histogram == {3: 2, 5: 1}
        assert summary.avg_rounds == pytest.approx(11 / 3)
        assert summary.workers == 2
        assert summary.seed == 9

    def test_empty(self):
        summary = summarize([], size=4, strategy="basic", elapsed_seconds=0.0)
        assert summary.total_rounds == 0
        assert summary.avg_rounds == 0.0


class TestTrialRunner:
    def test_invalid_config(self):
        with pytest.raises(ConfigError):
            TrialRunner(make_run_config(size=1))
        with pytest.raises(ConfigError):
            TrialRunner(make_run_config(num_runs=0))

    def test_workers_capped_by_runs(self):
        runner = TrialRunner(make_run_config(num_runs=2, workers=8))
        assert runner.num_workers == 2

    @pytest.mark.parametrize("strategy", ["basic", "belief"])
    def test_concurrency_does_not_change_results(self, strategy):
        serial = TrialRunner(make_run_config(strategy=strategy, num_runs=24, seed=11, workers=1)).run()
        parallel = TrialRunner(make_run_config(strategy=strategy, num_runs=24, seed=11, workers=3)).run()

        assert serial.total_rounds == parallel.total_rounds
        assert serial.histogram == parallel.histogram
        assert parallel.workers == 3
        assert serial.num_runs == 24

    def test_run_one_reproducible(self):
        a = TrialRunner(make_run_config(num_runs=3, seed=4)).run_one(2)
        b = TrialRunner(make_run_config(num_runs=3, seed=4)).run_one(2)
        assert a.rounds == b.rounds
        assert a.seed == b.seed

    def test_totals_match_single_trials(self):
        runner = TrialRunner(make_run_config(size=4, num_runs=6, seed=0, workers=2))
        expected = sum(runner.run_one(i).rounds for i in range(6))
        assert runner.run().total_rounds == expected

    def test_size_two_average(self):
        summary = TrialRunner(make_run_config(size=2, num_runs=10, seed=1)).run()
        assert summary.avg_rounds == 1.0

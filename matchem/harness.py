"""Running many independent trials and reducing their round counts.

Trials never share state. Each running trial borrows a workspace slot
from a fixed pool (acquire before use, release after completion), so a
slot has at most one user at a time and is reused serially. The only
cross-trial interaction is the final sum of round counts.
"""

import logging
import os
import queue
import random
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Iterator, Optional

from .config import RunConfig
from .models import RunSummary, TrialResult
from .strategies import Strategy, get_strategy
from .trial import Trial, Workspace

logger = logging.getLogger(__name__)


class WorkspacePool:
    """Fixed pool of reusable trial workspaces."""

    def __init__(self, num_slots: int, size: int, strategy: Strategy):
        if num_slots < 1:
            raise ValueError(f"pool needs at least one slot, got {num_slots}")
        self.num_slots = num_slots
        self._free: queue.Queue[int] = queue.Queue()
        self._slots = [Workspace.create(size, strategy) for _ in range(num_slots)]
        for idx in range(num_slots):
            self._free.put(idx)

    def acquire(self) -> int:
        """Block until a slot is free and return its index."""
        return self._free.get()

    def release(self, idx: int) -> None:
        self._free.put(idx)

    def workspace(self, idx: int) -> Workspace:
        return self._slots[idx]

    @contextmanager
    def slot(self) -> Iterator[Workspace]:
        """Borrow a workspace for the duration of a with-block."""
        idx = self.acquire()
        try:
            yield self._slots[idx]
        finally:
            self.release(idx)

    @property
    def num_free(self) -> int:
        return self._free.qsize()


def trial_seeds(seed: Optional[int], num_runs: int) -> list[int]:
    """Per-trial seeds, derived up front so results do not depend on scheduling."""
    rng = random.Random(seed)
    return [rng.getrandbits(64) for _ in range(num_runs)]


class TrialRunner:
    """Runs `config.num_runs` trials across a pool of workspace slots.

    Args:
        config: Run configuration (validated on construction)
    """

    def __init__(self, config: RunConfig):
        config.check()
        self.config = config
        self.strategy = get_strategy(config.trial.strategy)
        self.num_workers = min(config.workers or os.cpu_count() or 1, config.num_runs)
        self.seeds = trial_seeds(config.seed, config.num_runs)

    def run_one(self, index: int, workspace: Optional[Workspace] = None) -> TrialResult:
        """Run trial number `index` (0-based) and return its result."""
        seed = self.seeds[index]
        trial = Trial(
            self.config.trial,
            strategy=self.strategy,
            rng=random.Random(seed),
            workspace=workspace,
            seed=seed,
        )
        return trial.run()

    def run(self) -> RunSummary:
        """Run every trial and reduce the round counts.

        Returns:
            RunSummary with total/average rounds and elapsed wall-clock time
        """
        start = time.perf_counter()
        pool = WorkspacePool(self.num_workers, self.config.trial.size, self.strategy)
        logger.info("Running with %d concurrent workspace slots", self.num_workers)

        def run_in_slot(index: int) -> int:
            with pool.slot() as workspace:
                return self.run_one(index, workspace).rounds

        if self.num_workers == 1:
            rounds = [run_in_slot(i) for i in range(self.config.num_runs)]
        else:
            with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
                rounds = list(executor.map(run_in_slot, range(self.config.num_runs)))

        elapsed = time.perf_counter() - start
        return summarize(
            rounds,
            size=self.config.trial.size,
            strategy=self.strategy.name,
            elapsed_seconds=elapsed,
            workers=self.num_workers,
            seed=self.config.seed,
        )


def summarize(
    rounds: list[int],
    size: int,
    strategy: str,
    elapsed_seconds: float,
    workers: int = 1,
    seed: Optional[int] = None
) -> RunSummary:
    """Reduce per-trial round counts into a RunSummary."""
    return RunSummary(
        num_runs=len(rounds),
        total_rounds=sum(rounds),
        size=size,
        strategy=strategy,
        elapsed_seconds=elapsed_seconds,
        workers=workers,
        seed=seed,
        min_rounds=min(rounds) if rounds else 0,
        max_rounds=max(rounds) if rounds else 0,
        histogram=dict(sorted(Counter(rounds).items())),
    )

"""Data models for deduction trials."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional


class MatchState(Enum):
    """What is known about one (left, right) pair."""
    UNKNOWN = "unknown"
    MATCH = "match"
    NO_MATCH = "no_match"


DeductionSource = Literal["query", "forced_row", "forced_column"]


@dataclass(frozen=True)
class Deduction:
    """One outcome recorded into the knowledge store."""
    left: int
    right: int
    outcome: MatchState  # MATCH or NO_MATCH
    source: DeductionSource = "query"

    @property
    def pair(self) -> tuple[int, int]:
        return (self.left, self.right)


@dataclass
class RoundRecord:
    """Record of a single round of a trial."""
    round: int
    query: tuple[int, int]
    outcome: MatchState

    # Every outcome recorded this round, the queried pair first
    deductions: list[Deduction] = field(default_factory=list)

    guess: list[int] = field(default_factory=list)
    matches: int = 0  # correctly guessed pairs

    @property
    def forced(self) -> list[Deduction]:
        return [d for d in self.deductions if d.source != "query"]


@dataclass
class TrialResult:
    """Outcome of one complete trial."""
    rounds: int
    size: int
    strategy: str
    seed: Optional[int] = None
    records: list[RoundRecord] = field(default_factory=list)

    @property
    def num_queries(self) -> int:
        return len(self.records)

    @property
    def num_forced(self) -> int:
        return sum(len(r.forced) for r in self.records)


@dataclass
class RunSummary:
    """Aggregate statistics over many trials."""
    num_runs: int
    total_rounds: int
    size: int
    strategy: str
    elapsed_seconds: float
    workers: int = 1
    seed: Optional[int] = None
    min_rounds: int = 0
    max_rounds: int = 0

    # rounds -> number of trials that finished in that many rounds
    histogram: dict[int, int] = field(default_factory=dict)

    @property
    def avg_rounds(self) -> float:
        if self.num_runs == 0:
            return 0.0
        return self.total_rounds / self.num_runs

"""One deduction trial from a fresh secret to a fully correct guess.

Each round runs Querying -> Guessing -> Scoring; the trial is Done when
the guess matches the secret in every position.
"""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .assignment import HiddenAssignment
from .config import TrialConfig
from .errors import ExhaustionError, InvariantViolationError
from .inference import InferenceEngine
from .knowledge import KnowledgeStore
from .models import MatchState, RoundRecord, TrialResult
from .odds import OddsModel
from .strategies import Strategy, get_strategy
from .validators import validate_state

logger = logging.getLogger(__name__)


class TrialPhase(Enum):
    INIT = "init"
    QUERYING = "querying"
    GUESSING = "guessing"
    SCORING = "scoring"
    DONE = "done"


@dataclass
class Workspace:
    """Reusable per-trial state buffers."""
    size: int
    store: KnowledgeStore
    odds: Optional[OddsModel] = None
    guess: list[int] = field(default_factory=list)

    @classmethod
    def create(cls, size: int, strategy: Strategy) -> "Workspace":
        return cls(
            size=size,
            store=KnowledgeStore(size),
            odds=strategy.create_odds(size),
            guess=[-1] * size,
        )

    def reset(self) -> None:
        """All pairs unknown, uniform odds, no guess."""
        self.store.reset()
        if self.odds is not None:
            self.odds.reset()
        self.guess = [-1] * self.size


class Trial:
    """Runs a single trial.

    Args:
        config: Trial configuration
        strategy: Strategy instance (default: the one named in config)
        assignment: Secret to discover (default: drawn from rng)
        rng: Random source for drawing the secret
        workspace: State buffers to reuse (default: freshly allocated)
        seed: Seed recorded in the result, for reporting only
    """

    def __init__(
        self,
        config: TrialConfig,
        strategy: Optional[Strategy] = None,
        assignment: Optional[HiddenAssignment] = None,
        rng: Optional[random.Random] = None,
        workspace: Optional[Workspace] = None,
        seed: Optional[int] = None
    ):
        self.config = config
        self.strategy = strategy or get_strategy(config.strategy)
        self.seed = seed
        self.assignment = assignment or HiddenAssignment.random(config.size, rng or random.Random(seed))
        if self.assignment.size != config.size:
            raise ValueError(f"assignment size {self.assignment.size} != configured size {config.size}")

        self.workspace = workspace or Workspace.create(config.size, self.strategy)
        if self.strategy.uses_odds and self.workspace.odds is None:
            self.workspace.odds = OddsModel(config.size)

        self.phase = TrialPhase.INIT
        self.round = 0
        self.records: list[RoundRecord] = []

    @property
    def store(self) -> KnowledgeStore:
        return self.workspace.store

    @property
    def odds(self) -> Optional[OddsModel]:
        return self.workspace.odds if self.strategy.uses_odds else None

    @property
    def max_rounds(self) -> int:
        # Safety net only: trials finish within size*(size-1)//2 + size-1
        # rounds. N*N holds regardless of strategy because every round
        # settles at least one of the N*N pairs.
        return self.config.size * self.config.size

    def run(self) -> TrialResult:
        """Play rounds until the guess is fully correct."""
        self._init()
        while self.phase is not TrialPhase.DONE:
            self.step()
        return TrialResult(
            rounds=self.round,
            size=self.config.size,
            strategy=self.strategy.name,
            seed=self.seed,
            records=self.records,
        )

    def step(self) -> RoundRecord:
        """Play one round: query, infer, guess, score."""
        if self.phase is TrialPhase.INIT:
            self._init()
        if self.phase is TrialPhase.DONE:
            raise RuntimeError("trial already finished")
        if self.round >= self.max_rounds:
            raise ExhaustionError(f"no fully correct guess after {self.round} rounds")

        self.phase = TrialPhase.QUERYING
        left, right = self.strategy.select_query(self.store, self.odds, self.round)
        # the only place the secret is consulted for knowledge
        outcome = MatchState.MATCH if self.assignment.is_match(left, right) else MatchState.NO_MATCH
        deductions = InferenceEngine(self.store, self.odds).apply(left, right, outcome)

        self.phase = TrialPhase.GUESSING
        self.workspace.guess = self.strategy.build_guess(self.store, self.odds)

        self.phase = TrialPhase.SCORING
        matches = self.assignment.score(self.workspace.guess)
        record = RoundRecord(
            round=self.round,
            query=(left, right),
            outcome=outcome,
            deductions=deductions,
            guess=list(self.workspace.guess),
            matches=matches,
        )
        self.records.append(record)
        logger.debug(
            "round %d: asked %s -> %s, %d forced, guess %s scored %d/%d",
            self.round, (left, right), outcome.value, len(record.forced),
            record.guess, matches, self.config.size,
        )

        if self.config.validate:
            self._validate()
        if self.config.verbose:
            logger.info("At end of round %d, trial state is:\n%s", self.round, self.render())

        self.round += 1
        self.phase = TrialPhase.DONE if matches == self.config.size else TrialPhase.QUERYING
        return record

    def _init(self) -> None:
        self.workspace.reset()
        self.round = 0
        self.records = []
        self.phase = TrialPhase.QUERYING

    def _validate(self) -> None:
        result = validate_state(self.store, self.odds, self.workspace.guess, self.assignment)
        if not result.passed:
            raise InvariantViolationError(result.violations, state_dump=self.render())

    def render(self) -> str:
        """Human-readable dump of the trial state (the secret is left out)."""
        rule = "=" * 79
        parts = [
            rule,
            f"strategy={self.strategy.name} size={self.config.size} round={self.round} phase={self.phase.value}",
            "",
            "known_info:",
            self.store.render(),
            "",
            "guess_state:",
            " ".join(f"{i}:{j}" for i, j in enumerate(self.workspace.guess)),
        ]
        if self.odds is not None:
            parts += ["", "odds_info:", self.odds.render()]
        parts.append(rule)
        return "\n".join(parts)

"""Hidden-bijection deduction engine.

A secret one-to-one mapping between two equally sized item sets is
discovered through yes/no truth queries, while every round submits a full
guessed bijection scored only by its number of correct pairs.
"""

from .assignment import HiddenAssignment
from .config import Config, RunConfig, TrialConfig, OutputConfig, load_config
from .errors import (
    MatchemError,
    ContradictionError,
    InvariantViolationError,
    ExhaustionError,
    ConfigError,
)
from .guess import build_guess
from .harness import TrialRunner, WorkspacePool
from .inference import InferenceEngine
from .knowledge import KnowledgeStore
from .models import MatchState, Deduction, RoundRecord, TrialResult, RunSummary
from .odds import OddsModel
from .query import first_unknown_query, best_odds_query
from .strategies import Strategy, BasicStrategy, BeliefStrategy, get_strategy
from .trial import Trial, TrialPhase, Workspace
from .validators import ValidationResult, validate_state

__all__ = [
    "HiddenAssignment",
    "Config",
    "RunConfig",
    "TrialConfig",
    "OutputConfig",
    "load_config",
    "MatchemError",
    "ContradictionError",
    "InvariantViolationError",
    "ExhaustionError",
    "ConfigError",
    "build_guess",
    "TrialRunner",
    "WorkspacePool",
    "InferenceEngine",
    "KnowledgeStore",
    "MatchState",
    "Deduction",
    "RoundRecord",
    "TrialResult",
    "RunSummary",
    "OddsModel",
    "first_unknown_query",
    "best_odds_query",
    "Strategy",
    "BasicStrategy",
    "BeliefStrategy",
    "get_strategy",
    "Trial",
    "TrialPhase",
    "Workspace",
    "ValidationResult",
    "validate_state",
]

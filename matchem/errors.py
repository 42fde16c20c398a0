"""Error types raised by the deduction engine.

All engine errors are programmer-facing: they mean the bookkeeping went wrong,
not that a caller supplied bad input. None of them are retried.
"""

from typing import Optional


class MatchemError(Exception):
    """Base class for engine errors."""


class ContradictionError(MatchemError):
    """A pair was asserted when its outcome is already known, or inconsistently."""

    def __init__(self, left: int, right: int, message: str):
        super().__init__(f"({left}, {right}): {message}")
        self.left = left
        self.right = right


class InvariantViolationError(MatchemError):
    """Knowledge or odds failed a consistency check."""

    def __init__(self, violations: list[str], state_dump: Optional[str] = None):
        summary = "; ".join(violations[:3])
        if len(violations) > 3:
            summary += f" (+{len(violations) - 3} more)"
        super().__init__(summary)
        self.violations = violations
        self.state_dump = state_dump


class ExhaustionError(MatchemError):
    """No valid candidate was left although the trial has not finished."""


class ConfigError(ValueError):
    """Invalid run configuration."""

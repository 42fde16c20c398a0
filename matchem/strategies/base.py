"""Base class for deduction strategies."""

from abc import ABC, abstractmethod
from typing import Optional

from ..knowledge import KnowledgeStore
from ..odds import OddsModel


class Strategy(ABC):
    """How a trial picks its truth queries and builds its guesses.

    Strategies are stateless; all per-trial state lives in the knowledge
    store and the (optional) odds model passed to every call.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry name of the strategy."""
        pass

    @property
    def uses_odds(self) -> bool:
        """Whether trials under this strategy track an odds model."""
        return False

    def create_odds(self, size: int) -> Optional[OddsModel]:
        """Fresh belief model for a trial, or None if beliefs are not tracked."""
        if not self.uses_odds:
            return None
        return OddsModel(size)

    @abstractmethod
    def select_query(
        self,
        store: KnowledgeStore,
        odds: Optional[OddsModel],
        round_num: int
    ) -> tuple[int, int]:
        """Pick the next (left, right) pair to ask about.

        Args:
            store: Current knowledge
            odds: Current beliefs (None if not tracked)
            round_num: 0-based round number

        Returns:
            An unknown (left, right) pair
        """
        pass

    @abstractmethod
    def build_guess(
        self,
        store: KnowledgeStore,
        odds: Optional[OddsModel]
    ) -> list[int]:
        """Build this round's full guessed bijection."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

"""Belief-driven strategy backed by the odds model."""

from typing import Optional

from ..errors import MatchemError
from ..guess import build_guess
from ..knowledge import KnowledgeStore
from ..odds import OddsModel
from ..query import best_odds_query
from .base import Strategy


class BeliefStrategy(Strategy):
    """Query and guess the pairs with the highest current odds."""

    @property
    def name(self) -> str:
        return "belief"

    @property
    def uses_odds(self) -> bool:
        return True

    def select_query(
        self,
        store: KnowledgeStore,
        odds: Optional[OddsModel],
        round_num: int
    ) -> tuple[int, int]:
        return best_odds_query(store, self._require(odds), round_num)

    def build_guess(
        self,
        store: KnowledgeStore,
        odds: Optional[OddsModel]
    ) -> list[int]:
        return build_guess(store, self._require(odds))

    @staticmethod
    def _require(odds: Optional[OddsModel]) -> OddsModel:
        if odds is None:
            raise MatchemError("belief strategy needs an odds model")
        return odds

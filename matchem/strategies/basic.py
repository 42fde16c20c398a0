"""First-candidate strategy without a belief model."""

from typing import Optional

from ..guess import build_guess
from ..knowledge import KnowledgeStore
from ..odds import OddsModel
from ..query import first_unknown_query
from .base import Strategy


class BasicStrategy(Strategy):
    """Ask about the first open pair; guess the first unclaimed candidates."""

    @property
    def name(self) -> str:
        return "basic"

    def select_query(
        self,
        store: KnowledgeStore,
        odds: Optional[OddsModel],
        round_num: int
    ) -> tuple[int, int]:
        return first_unknown_query(store)

    def build_guess(
        self,
        store: KnowledgeStore,
        odds: Optional[OddsModel]
    ) -> list[int]:
        return build_guess(store)

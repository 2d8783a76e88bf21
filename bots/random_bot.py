"""Random baseline bot."""

from __future__ import annotations

import random
from typing import List, Optional

from besigue.cards import TrackedCard
from besigue.game import BesigueGame
from besigue.melds import Meld

from .base import DecisionProvider


class RandomBot(DecisionProvider):
    name = "Random"

    def __init__(self, seed: Optional[int] = None, meld_rate: float = 0.5) -> None:
        self._rng = random.Random(seed)
        self.meld_rate = meld_rate

    def decide_melds(self, game: BesigueGame, seat: int) -> List[Meld]:
        return [meld for meld in game.possible_melds(seat) if self._rng.random() < self.meld_rate]

    def choose_card_to_play(self, game: BesigueGame, seat: int) -> Optional[TrackedCard]:
        legal = game.playable_cards(seat)
        if not legal:
            return None
        return self._rng.choice(legal)

"""Common decision provider interfaces."""

from __future__ import annotations

from typing import List, Optional

from besigue.cards import TrackedCard
from besigue.game import BesigueGame
from besigue.melds import Meld


class DecisionProvider:
    """Base class for non-human seats.

    Providers only read the game; the scheduler applies their decisions.
    """

    name: str = "BaseBot"

    def on_game_start(self, game: BesigueGame, seat: int) -> None:
        """Optional hook invoked when a new game starts."""
        return None

    def decide_melds(self, game: BesigueGame, seat: int) -> List[Meld]:
        """Return the melds to declare, in order, while the meld window is open."""
        return []

    def choose_card_to_play(self, game: BesigueGame, seat: int) -> Optional[TrackedCard]:
        """Return one of the seat's playable cards."""
        legal = game.playable_cards(seat)
        return legal[0] if legal else None

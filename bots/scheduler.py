"""Drives non-human seats through the engine's turn order."""

from __future__ import annotations

import logging
import time
from typing import Callable, Mapping, Optional, Set, Tuple

from besigue.game import ActionResult, BesigueGame
from besigue.state import Phase

from .base import DecisionProvider

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 100_000


class BotActionFailed(RuntimeError):
    """Raised when a provider picks an action the engine rejects."""


class TurnScheduler:
    """Apply provider decisions for every bot seat until a human must act.

    `delay` only paces the actions for presentation; turn order comes from the
    engine's expected actor.
    """

    def __init__(
        self,
        game: BesigueGame,
        providers: Mapping[int, DecisionProvider],
        *,
        delay: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
        max_steps: int = DEFAULT_MAX_STEPS,
    ) -> None:
        self.game = game
        self.providers = dict(providers)
        self.delay = delay
        self._sleep = sleep
        self.max_steps = max_steps
        self._meld_windows_seen: Set[Tuple[int, int]] = set()

    def start_game(self) -> ActionResult:
        """Start a fresh game and let every provider see it."""
        self._meld_windows_seen.clear()
        result = self.game.start_new_game()
        for seat, provider in self.providers.items():
            provider.on_game_start(self.game, seat)
        return result

    def is_bot(self, seat: Optional[int]) -> bool:
        return seat is not None and seat in self.providers

    def step(self) -> bool:
        """Perform one bot action; return False when no bot is due to act."""
        game = self.game
        if self._offer_melds():
            return True

        actor = game.expected_actor()
        if not self.is_bot(actor):
            return False
        assert actor is not None
        provider = self.providers[actor]

        if game.phase is Phase.DEALER_DETERMINATION:
            result = game.draw_for_dealer(actor)
        elif game.expects_draw():
            result = game.draw_card(actor)
        else:
            card = provider.choose_card_to_play(game, actor)
            if card is None:
                raise BotActionFailed(f"{provider.name} found no card to play for seat {actor}.")
            result = game.play_card(actor, card)
        self._require(result, provider, actor)
        self._pace()
        return True

    def run_until_human(self) -> int:
        """Advance bot seats until a human is expected or the game ends."""
        steps = 0
        while not self.game.is_over and self.step():
            steps += 1
            if steps >= self.max_steps:
                raise BotActionFailed(f"Scheduler stopped after {steps} steps without finishing.")
        return steps

    def _offer_melds(self) -> bool:
        state = self.game.round
        if state is None or state.meld_window is None or not self.is_bot(state.meld_window):
            return False
        key = (state.round_number, len(state.history))
        if key in self._meld_windows_seen:
            return False
        self._meld_windows_seen.add(key)
        seat = state.meld_window
        provider = self.providers[seat]
        declared = 0
        for meld in provider.decide_melds(self.game, seat):
            result = self.game.declare_meld(seat, list(meld.cards))
            if result.ok:
                declared += 1
                self._pace()
            else:
                # Earlier melds in the same window can consume the cards a later one needed.
                logger.debug("%s skipped %s: %s", provider.name, meld.meld_type.value, result.message)
        return declared > 0

    def _require(self, result: ActionResult, provider: DecisionProvider, seat: int) -> None:
        if not result.ok:
            raise BotActionFailed(f"{provider.name} at seat {seat} was rejected: {result.message}")

    def _pace(self) -> None:
        if self.delay > 0:
            self._sleep(self.delay)

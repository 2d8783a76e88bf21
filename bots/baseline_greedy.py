"""Baseline greedy bot."""

from __future__ import annotations

from typing import List, Optional, Sequence

from besigue.cards import Suit, TrackedCard, beats, card_strength, cards_of_suit
from besigue.game import BesigueGame
from besigue.melds import Meld, MeldType

from .base import DecisionProvider

STRONG_MELD_POINTS = 60


def _suit_strength(held: Sequence[TrackedCard], suit: Suit) -> int:
    cards = cards_of_suit(held, suit)
    return len(cards) * 10 + sum(card_strength(card) for card in cards)


def _by_strength(cards: Sequence[TrackedCard]) -> List[TrackedCard]:
    return sorted(cards, key=lambda card: (card_strength(card), card.slot))


class GreedyBot(DecisionProvider):
    name = "Greedy"

    def decide_melds(self, game: BesigueGame, seat: int) -> List[Meld]:
        candidates = game.possible_melds(seat)
        if not candidates:
            return []
        if game.trump is None:
            # The first marriage fixes trump, so pick the suit we hold most of.
            held = game.players[seat].held
            best = max(candidates, key=lambda meld: _suit_strength(held, meld.cards[0].suit))
            return [best]
        chosen = [
            meld
            for meld in candidates
            if meld.meld_type in (MeldType.BESIGUE, MeldType.ROYAL_MARRIAGE) or meld.points >= STRONG_MELD_POINTS
        ]
        return sorted(chosen, key=lambda meld: -meld.points)

    def choose_card_to_play(self, game: BesigueGame, seat: int) -> Optional[TrackedCard]:
        legal = game.playable_cards(seat)
        if not legal:
            return None
        state = game.round
        assert state is not None and state.current_trick is not None
        trump = state.trump
        trick = state.current_trick

        if trick.is_empty():
            side = [card for card in legal if card.is_joker or card.suit is not trump]
            return _by_strength(side or legal)[-1]

        leading = trick.leading_play(trump)
        assert leading is not None
        led = trick.led_suit()
        winning = [card for card in legal if beats(card.card, leading[1].card, led, trump)]
        if winning:
            return _by_strength(winning)[-1]
        return _by_strength(legal)[0]

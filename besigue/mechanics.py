"""Legal move generation for Bésigue."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .cards import Suit, TrackedCard, card_strength, cards_of_suit
from .trick import Trick


def _ordered(cards: Iterable[TrackedCard]) -> List[TrackedCard]:
    return sorted(cards, key=lambda card: (card_strength(card), card.slot))


def legal_moves(
    held: Iterable[TrackedCard],
    trick: Trick,
    trump: Optional[Suit],
    *,
    endgame: bool = False,
) -> List[TrackedCard]:
    """Return the held cards that may be played into the current trick.

    Jokers are only playable once nothing else is held. Outside the endgame
    any other held card is allowed; in the endgame the follow, overtake and
    trump obligations apply.
    """
    cards = list(held)
    suited = [card for card in cards if not card.is_joker]
    if not suited:
        return _ordered(cards)
    if not endgame or trick.is_empty():
        return _ordered(suited)

    led = trick.led_suit()
    if led is None:
        return _ordered(suited)

    in_led = cards_of_suit(suited, led)
    if in_led:
        best = trick.best_of_suit(led)
        if best is None:
            return _ordered(in_led)
        higher = [card for card in in_led if card_strength(card) > card_strength(best)]
        return _ordered(higher or in_led)

    if trump is not None:
        trumps = cards_of_suit(suited, trump)
        if trumps:
            return _ordered(trumps)

    return _ordered(suited)

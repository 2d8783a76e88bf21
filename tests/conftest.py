from __future__ import annotations

import itertools
from typing import Callable, List, Optional

import pytest

from besigue.cards import Card, CardLocation, Rank, Suit, TrackedCard
from besigue.game import BesigueGame


@pytest.fixture
def make_card() -> Callable[..., TrackedCard]:
    """Build tracked cards with unique slots; call with no arguments for a joker."""
    slots = itertools.count()

    def _make(rank: Optional[Rank] = None, suit: Optional[Suit] = None) -> TrackedCard:
        return TrackedCard(slot=next(slots), card=Card(rank, suit))

    return _make


def give_cards(game: BesigueGame, seat: int, *faces: Card) -> List[TrackedCard]:
    """Swap the requested faces into a seat's hand from the draw pile, keeping 132 cards in play."""
    assert game.round is not None
    pile = game.round.deck.cards
    player = game.players[seat]
    given: List[TrackedCard] = []
    for face in faces:
        already = next((card for card in player.held if card.card == face and card not in given), None)
        if already is not None:
            given.append(already)
            continue
        incoming = next(card for card in pile if card.card == face)
        outgoing = next(card for card in player.held if card.card not in faces)
        pile[pile.index(incoming)] = outgoing
        outgoing.move_to(CardLocation.DRAW_PILE)
        player.held.remove(outgoing)
        player.cards.add_cards([incoming])
        given.append(incoming)
    return given


@pytest.fixture
def give() -> Callable[..., List[TrackedCard]]:
    return give_cards

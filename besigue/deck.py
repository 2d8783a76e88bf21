"""Deck creation and dealing utilities for Bésigue."""

from __future__ import annotations

import logging
from collections import Counter
from random import Random
from typing import Iterable, List, Optional, Sequence

from .cards import (
    COPIES_PER_CARD,
    DECK_SIZE,
    JOKER_COUNT,
    RANK_ORDER,
    Card,
    CardLocation,
    Suit,
    TrackedCard,
)

logger = logging.getLogger(__name__)

DEFAULT_PACKET_SIZE = 3


def build_deck() -> List[TrackedCard]:
    """Return the ordered 132-card deck: four piquet packs plus four jokers."""
    cards = [
        Card(rank, suit)
        for _ in range(COPIES_PER_CARD)
        for suit in Suit
        for rank in RANK_ORDER
    ]
    cards.extend(Card.joker() for _ in range(JOKER_COUNT))
    return [TrackedCard(slot=slot, card=card) for slot, card in enumerate(cards)]


def verify_composition(cards: Iterable[TrackedCard | Card]) -> bool:
    """Return True if the cards are exactly four of every suit/rank pair plus four jokers."""
    counts: Counter[Card] = Counter(
        card.card if isinstance(card, TrackedCard) else card for card in cards
    )
    if sum(counts.values()) != DECK_SIZE:
        return False
    if counts[Card.joker()] != JOKER_COUNT:
        return False
    return all(counts[Card(rank, suit)] == COPIES_PER_CARD for suit in Suit for rank in RANK_ORDER)


class Deck:
    """Front-biased draw pile backed by a seeded random generator."""

    def __init__(
        self,
        cards: Optional[Sequence[TrackedCard]] = None,
        *,
        rng: Optional[Random] = None,
    ) -> None:
        self.cards: List[TrackedCard] = list(cards) if cards is not None else build_deck()
        self.rng = rng or Random()
        for card in self.cards:
            card.move_to(CardLocation.DRAW_PILE)

    def __len__(self) -> int:
        return len(self.cards)

    def is_empty(self) -> bool:
        return not self.cards

    def shuffle(self) -> None:
        self.rng.shuffle(self.cards)

    def draw(self) -> Optional[TrackedCard]:
        """Pop the next card, or return None when the pile is exhausted."""
        if not self.cards:
            return None
        return self.cards.pop(0)

    def deal_initial(
        self,
        player_count: int,
        hand_size: int,
        *,
        packet_size: int = DEFAULT_PACKET_SIZE,
    ) -> List[List[TrackedCard]]:
        """Deal `hand_size` cards to each player round robin, `packet_size` at a time."""
        if player_count < 1 or hand_size < 0:
            raise ValueError("Player count must be positive and hand size non-negative.")
        if packet_size < 1:
            raise ValueError("Packet size must be at least one card.")
        if player_count * hand_size > len(self.cards):
            raise ValueError("Not enough cards left to deal the requested hands.")

        hands: List[List[TrackedCard]] = [[] for _ in range(player_count)]
        while any(len(hand) < hand_size for hand in hands):
            for hand in hands:
                take = min(packet_size, hand_size - len(hand))
                for _ in range(take):
                    card = self.draw()
                    assert card is not None
                    hand.append(card)
        logger.debug("Dealt %d cards to %d players, %d left", hand_size, player_count, len(self.cards))
        return hands

    def return_cards(self, cards: Iterable[TrackedCard]) -> None:
        for card in cards:
            card.move_to(CardLocation.DRAW_PILE)
            self.cards.append(card)

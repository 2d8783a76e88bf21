"""Trick representation and resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .cards import BRISQUE_RANKS, Rank, Suit, TrackedCard, beats
from .errors import IllegalCard


def lead_suit_of(cards: Sequence[TrackedCard]) -> Optional[Suit]:
    """Suit of the first non-joker card played, if any."""
    for card in cards:
        if not card.is_joker:
            return card.suit
    return None


def trick_winner(
    cards: Sequence[TrackedCard],
    leader: int,
    trump: Optional[Suit],
    player_count: int,
) -> int:
    """Return the seat that wins a full trick; cards are in play order from the leader."""
    if len(cards) != player_count:
        raise ValueError(f"A trick needs exactly {player_count} cards, got {len(cards)}.")
    led = lead_suit_of(cards)
    if led is None:
        return leader

    best_index = 0
    for index, card in enumerate(cards[1:], start=1):
        if beats(card.card, cards[best_index].card, led, trump):
            best_index = index
    return (leader + best_index) % player_count


@dataclass
class Trick:
    leader: int
    player_count: int
    plays: List[Tuple[int, TrackedCard]] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.plays

    def is_full(self) -> bool:
        return len(self.plays) == self.player_count

    def next_seat(self) -> int:
        return (self.leader + len(self.plays)) % self.player_count

    def add_play(self, player: int, card: TrackedCard) -> None:
        if self.is_full():
            raise IllegalCard("Trick already complete.")
        if player != self.next_seat():
            raise IllegalCard(f"Seat {player} cannot play out of turn.")
        self.plays.append((player, card))

    @property
    def cards(self) -> List[TrackedCard]:
        return [card for _, card in self.plays]

    def led_suit(self) -> Optional[Suit]:
        return lead_suit_of(self.cards)

    def best_of_suit(self, suit: Suit) -> Optional[TrackedCard]:
        """Highest card of the given suit already in the trick."""
        best: Optional[TrackedCard] = None
        for card in self.cards:
            if card.is_joker or card.suit is not suit:
                continue
            if best is None or beats(card.card, best.card, suit, None):
                best = card
        return best

    def leading_play(self, trump: Optional[Suit]) -> Optional[Tuple[int, TrackedCard]]:
        """The play currently winning a partial trick."""
        if not self.plays:
            return None
        led = self.led_suit()
        best = self.plays[0]
        for play in self.plays[1:]:
            if beats(play[1].card, best[1].card, led, trump):
                best = play
        return best

    def winner(self, trump: Optional[Suit]) -> int:
        return trick_winner(self.cards, self.leader, trump, self.player_count)


@dataclass(frozen=True)
class CompletedTrick:
    leader: int
    winner: int
    plays: Tuple[Tuple[int, TrackedCard], ...]

    @property
    def cards(self) -> List[TrackedCard]:
        return [card for _, card in self.plays]

    def brisque_count(self) -> int:
        return sum(1 for card in self.cards if card.rank in BRISQUE_RANKS)

    def sevens_of(self, trump: Optional[Suit]) -> int:
        if trump is None:
            return 0
        return sum(1 for card in self.cards if card.rank is Rank.SEVEN and card.suit is trump)

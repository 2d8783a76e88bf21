"""Player records and per-player card pools."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List

from .cards import CardLocation, Suit, TrackedCard, card_label, cards_of_suit
from .errors import IllegalCard

if TYPE_CHECKING:
    from .melds import Meld, MeldType

logger = logging.getLogger(__name__)


@dataclass
class PlayerCards:
    """Held and melded cards of one seat."""

    seat: int
    held: List[TrackedCard] = field(default_factory=list)
    melded: List[TrackedCard] = field(default_factory=list)

    def add_cards(self, cards: Iterable[TrackedCard]) -> None:
        for card in cards:
            card.move_to(CardLocation.HELD, self.seat)
            self.held.append(card)

    def remove_card(self, card: TrackedCard) -> TrackedCard:
        """Take a held card out of the pool."""
        try:
            index = self.held.index(card)
        except ValueError as exc:
            raise IllegalCard(f"{card_label(card)} is not held by seat {self.seat}.") from exc
        return self.held.pop(index)

    def holds(self, card: TrackedCard) -> bool:
        return card in self.held

    def owns(self, card: TrackedCard) -> bool:
        return card in self.held or card in self.melded

    def cards_of_suit(self, suit: Suit) -> List[TrackedCard]:
        return cards_of_suit(self.held, suit)

    def can_follow_suit(self, suit: Suit) -> bool:
        return bool(self.cards_of_suit(suit))

    def move_to_melded(self, card: TrackedCard) -> None:
        if card in self.held:
            self.held.remove(card)
            self.melded.append(card)
            card.move_to(CardLocation.MELDED, self.seat)
        elif card not in self.melded:
            raise IllegalCard(f"{card_label(card)} is not owned by seat {self.seat}.")

    def return_melded_to_held(self) -> List[TrackedCard]:
        returned = list(self.melded)
        self.melded.clear()
        self.add_cards(returned)
        return returned

    def clear(self) -> None:
        self.held.clear()
        self.melded.clear()

    def __len__(self) -> int:
        return len(self.held) + len(self.melded)


@dataclass
class Player:
    seat: int
    name: str
    is_human: bool = False
    cards: PlayerCards = field(init=False)
    melds: List["Meld"] = field(default_factory=list)
    score: int = 0
    tricks_won: int = 0
    brisques: int = 0
    is_dealer: bool = False
    is_current: bool = False

    def __post_init__(self) -> None:
        self.cards = PlayerCards(seat=self.seat)

    @property
    def held(self) -> List[TrackedCard]:
        return self.cards.held

    @property
    def melded(self) -> List[TrackedCard]:
        return self.cards.melded

    def add_points(self, points: int) -> None:
        self.score += points

    def has_declared(self, meld_type: "MeldType") -> bool:
        return any(meld.meld_type is meld_type for meld in self.melds)

    def reset_for_round(self) -> None:
        self.cards.clear()
        self.brisques = 0
        self.is_dealer = False
        self.is_current = False

    def reset(self) -> None:
        """Clear everything a new game starts without."""
        self.reset_for_round()
        self.melds.clear()
        self.score = 0
        self.tricks_won = 0
        logger.debug("Reset player %s", self.name)

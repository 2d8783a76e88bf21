"""Card-related data structures and helpers for Bésigue."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Iterable, List, Mapping, Optional, Set

if TYPE_CHECKING:
    from .melds import MeldType


class Suit(Enum):
    HEARTS = auto()
    DIAMONDS = auto()
    CLUBS = auto()
    SPADES = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def symbol(self) -> str:
        return SUIT_SYMBOLS[self]


SUIT_SYMBOLS: dict[Suit, str] = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}


class Rank(Enum):
    SEVEN = auto()
    EIGHT = auto()
    NINE = auto()
    JACK = auto()
    QUEEN = auto()
    KING = auto()
    TEN = auto()
    ACE = auto()

    def __str__(self) -> str:
        return self.name.lower()


# Rank order from lowest to highest for trick resolution.
RANK_ORDER: list[Rank] = [
    Rank.SEVEN,
    Rank.EIGHT,
    Rank.NINE,
    Rank.JACK,
    Rank.QUEEN,
    Rank.KING,
    Rank.TEN,
    Rank.ACE,
]

RANK_STRENGTH: dict[Rank, int] = {rank: index for index, rank in enumerate(RANK_ORDER)}

BRISQUE_RANKS = frozenset({Rank.ACE, Rank.TEN})

COPIES_PER_CARD = 4
JOKER_COUNT = 4
DECK_SIZE = len(Suit) * len(RANK_ORDER) * COPIES_PER_CARD + JOKER_COUNT


@dataclass(frozen=True)
class Card:
    """Immutable playing card identity; a joker has neither suit nor rank."""

    rank: Optional[Rank] = None
    suit: Optional[Suit] = None

    def __post_init__(self) -> None:
        if (self.rank is None) != (self.suit is None):
            raise ValueError("A card needs both rank and suit, or neither for a joker.")

    @classmethod
    def joker(cls) -> "Card":
        return cls(None, None)

    @property
    def is_joker(self) -> bool:
        return self.rank is None

    @property
    def is_brisque(self) -> bool:
        return self.rank in BRISQUE_RANKS

    def __str__(self) -> str:
        return card_label(self)


JOKER = Card.joker()


class CardLocation(Enum):
    DRAW_PILE = auto()
    DEALER_DRAW = auto()
    HELD = auto()
    MELDED = auto()
    TRICK = auto()
    HISTORY = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(eq=False)
class TrackedCard:
    """A physical card addressed by its slot in the round's 132-card arena."""

    slot: int
    card: Card
    location: CardLocation = CardLocation.DRAW_PILE
    owner: Optional[int] = None
    meld_tags: Set["MeldType"] = field(default_factory=set)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TrackedCard):
            return NotImplemented
        return self.slot == other.slot

    def __hash__(self) -> int:
        return hash(self.slot)

    @property
    def rank(self) -> Optional[Rank]:
        return self.card.rank

    @property
    def suit(self) -> Optional[Suit]:
        return self.card.suit

    @property
    def is_joker(self) -> bool:
        return self.card.is_joker

    @property
    def is_brisque(self) -> bool:
        return self.card.is_brisque

    def move_to(self, location: CardLocation, owner: Optional[int] = None) -> None:
        self.location = location
        self.owner = owner

    def __repr__(self) -> str:
        return f"TrackedCard({self.slot}, {card_label(self.card)}, {self.location})"


def card_strength(card: Card | TrackedCard) -> int:
    """Return an integer strength used for ordering cards within a suit."""
    if card.rank is None:
        return -1
    return RANK_STRENGTH[card.rank]


def cards_of_suit(cards: Iterable[TrackedCard], suit: Suit) -> List[TrackedCard]:
    return [card for card in cards if not card.is_joker and card.suit is suit]


def beats(candidate: Card, current: Card, led_suit: Optional[Suit], trump: Optional[Suit]) -> bool:
    """Return True if candidate takes over from current within the trick context.

    Jokers never beat anything and are beaten by any suited card.
    Equal cards never overtake, so the earlier play keeps the trick.
    """
    if candidate.is_joker:
        return False
    if current.is_joker:
        return True

    candidate_trump = trump is not None and candidate.suit is trump
    current_trump = trump is not None and current.suit is trump

    if candidate_trump and not current_trump:
        return True
    if current_trump and not candidate_trump:
        return False

    if candidate.suit is current.suit:
        return card_strength(candidate) > card_strength(current)

    if candidate.suit is led_suit and current.suit is not led_suit:
        return True

    return False


def serialize_card(card: Card | TrackedCard) -> dict[str, object]:
    payload: dict[str, object] = {}
    if isinstance(card, TrackedCard):
        payload["slot"] = card.slot
        card = card.card
    if card.is_joker:
        payload.update({"rank": None, "suit": None, "joker": True})
    else:
        assert card.rank is not None and card.suit is not None
        payload.update({"rank": card.rank.name.lower(), "suit": card.suit.name.lower(), "joker": False})
    return payload


def deserialize_card(payload: Mapping[str, object]) -> Card:
    if payload.get("joker"):
        return Card.joker()
    rank_name = str(payload["rank"]).upper()
    suit_name = str(payload["suit"]).upper()
    return Card(Rank[rank_name], Suit[suit_name])


def card_label(card: Card | TrackedCard) -> str:
    if isinstance(card, TrackedCard):
        card = card.card
    if card.is_joker:
        return "Joker"
    assert card.rank is not None and card.suit is not None
    return f"{card.rank.name.title()} of {card.suit.name.title()}"

"""Meld rule table, detection and validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence, Tuple

from .cards import Card, Rank, Suit, TrackedCard, card_label
from .errors import IllegalMeld

if TYPE_CHECKING:
    from .player import Player
    from .rules_schema import RuleSet

logger = logging.getLogger(__name__)


class MeldType(Enum):
    BESIGUE = "besigue"
    COMMON_MARRIAGE = "common_marriage"
    ROYAL_MARRIAGE = "royal_marriage"
    FOUR_JACKS = "four_jacks"
    FOUR_QUEENS = "four_queens"
    FOUR_KINGS = "four_kings"
    FOUR_ACES = "four_aces"
    FOUR_JOKERS = "four_jokers"
    SEQUENCE = "sequence"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class MeldRule:
    meld_type: MeldType
    card_count: int
    rank: Optional[Rank] = None
    jokers_wild: bool = False
    trump_doubles: bool = False
    needs_trump: bool = True


MELD_RULES: Dict[MeldType, MeldRule] = {
    MeldType.BESIGUE: MeldRule(MeldType.BESIGUE, 2),
    MeldType.COMMON_MARRIAGE: MeldRule(MeldType.COMMON_MARRIAGE, 2, needs_trump=False),
    MeldType.ROYAL_MARRIAGE: MeldRule(MeldType.ROYAL_MARRIAGE, 2),
    MeldType.FOUR_JACKS: MeldRule(MeldType.FOUR_JACKS, 4, Rank.JACK, jokers_wild=True, trump_doubles=True),
    MeldType.FOUR_QUEENS: MeldRule(MeldType.FOUR_QUEENS, 4, Rank.QUEEN, jokers_wild=True, trump_doubles=True),
    MeldType.FOUR_KINGS: MeldRule(MeldType.FOUR_KINGS, 4, Rank.KING, jokers_wild=True, trump_doubles=True),
    MeldType.FOUR_ACES: MeldRule(MeldType.FOUR_ACES, 4, Rank.ACE, jokers_wild=True, trump_doubles=True),
    MeldType.FOUR_JOKERS: MeldRule(MeldType.FOUR_JOKERS, 4),
    MeldType.SEQUENCE: MeldRule(MeldType.SEQUENCE, 5),
}

FOUR_OF_A_KIND: Dict[Rank, MeldType] = {
    rule.rank: meld_type for meld_type, rule in MELD_RULES.items() if rule.rank is not None
}

BESIGUE_CARDS = (Card(Rank.QUEEN, Suit.SPADES), Card(Rank.JACK, Suit.DIAMONDS))
SEQUENCE_RANKS = (Rank.ACE, Rank.TEN, Rank.KING, Rank.QUEEN, Rank.JACK)

MIN_MELD_CARDS = 2
MAX_MELD_CARDS = 5


@dataclass(frozen=True)
class Meld:
    meld_type: MeldType
    cards: Tuple[TrackedCard, ...]
    points: int
    round_number: int

    @property
    def suit(self) -> Optional[Suit]:
        """Suit of a marriage or sequence; None for mixed-suit melds."""
        if self.meld_type in (MeldType.COMMON_MARRIAGE, MeldType.ROYAL_MARRIAGE, MeldType.SEQUENCE):
            return self.cards[0].suit
        return None

    @property
    def slots(self) -> Tuple[int, ...]:
        return tuple(card.slot for card in self.cards)

    def describe(self) -> str:
        labels = ", ".join(card_label(card) for card in self.cards)
        return f"{self.meld_type.label} ({labels}) for {self.points}"


Requirement = Callable[[TrackedCard], bool]


def _exact(card: Card) -> Requirement:
    return lambda tracked: tracked.card == card


def _rank_or_joker(rank: Rank) -> Requirement:
    return lambda tracked: tracked.is_joker or tracked.rank is rank


def _is_joker(tracked: TrackedCard) -> bool:
    return tracked.is_joker


def marriage_type(suit: Suit, trump: Optional[Suit]) -> MeldType:
    return MeldType.ROYAL_MARRIAGE if trump is not None and suit is trump else MeldType.COMMON_MARRIAGE


def detect_meld_type(cards: Sequence[TrackedCard | Card], trump: Optional[Suit]) -> Optional[MeldType]:
    """Classify an explicit selection of cards, or return None."""
    faces = [card.card if isinstance(card, TrackedCard) else card for card in cards]
    count = len(faces)

    if count == 2:
        if sorted(faces, key=str) == sorted(BESIGUE_CARDS, key=str):
            return MeldType.BESIGUE
        ranks = {card.rank for card in faces}
        suits = {card.suit for card in faces}
        if ranks == {Rank.KING, Rank.QUEEN} and len(suits) == 1:
            suit = faces[0].suit
            assert suit is not None
            return marriage_type(suit, trump)
        return None

    if count == 4:
        naturals = [card for card in faces if not card.is_joker]
        if not naturals:
            return MeldType.FOUR_JOKERS
        ranks = {card.rank for card in naturals}
        if len(ranks) == 1:
            rank = naturals[0].rank
            assert rank is not None
            return FOUR_OF_A_KIND.get(rank)
        return None

    if count == 5 and trump is not None:
        expected = sorted((Card(rank, trump) for rank in SEQUENCE_RANKS), key=str)
        if sorted(faces, key=str) == expected:
            return MeldType.SEQUENCE
    return None


def meld_points(meld_type: MeldType, cards: Sequence[TrackedCard], trump: Optional[Suit], rules: "RuleSet") -> int:
    """Resolve the points a meld scores, applying trump doubling where it applies."""
    points = rules.melds.base_points(meld_type.value)
    rule = MELD_RULES[meld_type]
    if rule.trump_doubles and trump is not None and all(
        not card.is_joker and card.suit is trump for card in cards
    ):
        points *= rules.melds.trump_four_multiplier
    if meld_type is MeldType.SEQUENCE:
        points *= rules.melds.trump_sequence_multiplier
    return points


def has_intact_royal_marriage(player: "Player", trump: Optional[Suit], round_number: int) -> bool:
    """True when the player declared a trump royal marriage this round whose cards are still melded."""
    if trump is None:
        return False
    for meld in player.melds:
        if meld.meld_type is not MeldType.ROYAL_MARRIAGE or meld.round_number != round_number:
            continue
        if meld.suit is trump and all(card in player.melded for card in meld.cards):
            return True
    return False


def _requirements(meld_type: MeldType, suit: Optional[Suit]) -> List[Requirement]:
    rule = MELD_RULES[meld_type]
    if meld_type is MeldType.BESIGUE:
        return [_exact(card) for card in BESIGUE_CARDS]
    if meld_type in (MeldType.COMMON_MARRIAGE, MeldType.ROYAL_MARRIAGE):
        assert suit is not None
        return [_exact(Card(Rank.KING, suit)), _exact(Card(Rank.QUEEN, suit))]
    if meld_type is MeldType.FOUR_JOKERS:
        return [_is_joker] * rule.card_count
    if meld_type is MeldType.SEQUENCE:
        assert suit is not None
        return [_exact(Card(rank, suit)) for rank in SEQUENCE_RANKS]
    assert rule.rank is not None
    return [_rank_or_joker(rule.rank)] * rule.card_count


def _assemble(player: "Player", meld_type: MeldType, suit: Optional[Suit]) -> Optional[List[TrackedCard]]:
    """Pick cards for one shape, reusing melded cards first but keeping one held card."""
    requirements = _requirements(meld_type, suit)
    melded = [card for card in player.melded if meld_type not in card.meld_tags]
    held = [card for card in player.held if meld_type not in card.meld_tags]
    # Natural cards before jokers, melded before held, then by slot.
    pool = sorted(melded + held, key=lambda card: (card.is_joker, card in held, card.slot))

    chosen: List[TrackedCard] = []
    for requirement in requirements:
        pick = next((card for card in pool if requirement(card) and card not in chosen), None)
        if pick is None:
            return None
        chosen.append(pick)

    if MELD_RULES[meld_type].jokers_wild and all(card.is_joker for card in chosen):
        return None

    if not any(card in held for card in chosen):
        for index in reversed(range(len(chosen))):
            swap = next(
                (card for card in held if requirements[index](card) and card not in chosen),
                None,
            )
            if swap is None:
                continue
            candidate = chosen[:index] + [swap] + chosen[index + 1 :]
            if MELD_RULES[meld_type].jokers_wild and all(card.is_joker for card in candidate):
                continue
            chosen = candidate
            break
        else:
            return None
    return chosen


def _candidate_shapes(trump: Optional[Suit]) -> List[Tuple[MeldType, Optional[Suit]]]:
    if trump is None:
        # The first marriage becomes trump, so it is offered as royal.
        return [(MeldType.ROYAL_MARRIAGE, suit) for suit in Suit]
    shapes: List[Tuple[MeldType, Optional[Suit]]] = [(MeldType.BESIGUE, None)]
    shapes.extend((marriage_type(suit, trump), suit) for suit in Suit)
    shapes.extend((meld_type, None) for meld_type in FOUR_OF_A_KIND.values())
    shapes.append((MeldType.FOUR_JOKERS, None))
    shapes.append((MeldType.SEQUENCE, trump))
    return shapes


def possible_melds(
    player: "Player",
    trump: Optional[Suit],
    round_number: int,
    rules: "RuleSet",
    *,
    window_types: Sequence[MeldType] = (),
) -> List[Meld]:
    """List every meld the player could declare right now, one candidate per shape."""
    candidates: List[Meld] = []
    for meld_type, suit in _candidate_shapes(trump):
        if meld_type in window_types:
            continue
        if meld_type.value in rules.melds.single_declaration and player.has_declared(meld_type):
            continue
        if meld_type is MeldType.SEQUENCE and not has_intact_royal_marriage(player, trump, round_number):
            continue
        cards = _assemble(player, meld_type, suit)
        if cards is None:
            continue
        points = meld_points(meld_type, cards, trump, rules)
        candidates.append(Meld(meld_type, tuple(cards), points, round_number))
    return candidates


def validate_meld(
    player: "Player",
    cards: Sequence[TrackedCard],
    trump: Optional[Suit],
    round_number: int,
    rules: "RuleSet",
    *,
    window_types: Sequence[MeldType] = (),
) -> Meld:
    """Check a declared selection and return the meld it would record.

    A common marriage declared while trump is unset is returned as a royal
    marriage; the caller establishes trump from its suit.
    """
    if not MIN_MELD_CARDS <= len(cards) <= MAX_MELD_CARDS:
        raise IllegalMeld(f"A meld needs {MIN_MELD_CARDS} to {MAX_MELD_CARDS} cards.")
    if len(set(cards)) != len(cards):
        raise IllegalMeld("The same card was selected twice.")

    detected = detect_meld_type(cards, trump)
    if detected is None:
        raise IllegalMeld("The selected cards do not form a meld.")
    if trump is None and detected is not MeldType.COMMON_MARRIAGE:
        raise IllegalMeld("Only a marriage may be declared before trump is set.")
    meld_type = MeldType.ROYAL_MARRIAGE if trump is None else detected

    for card in cards:
        if not player.cards.owns(card):
            raise IllegalMeld(f"{card_label(card)} does not belong to {player.name}.")
    if not any(player.cards.holds(card) for card in cards):
        raise IllegalMeld("At least one card of a meld must come from the hand.")
    for card in cards:
        if meld_type in card.meld_tags:
            raise IllegalMeld(f"{card_label(card)} was already used for a {meld_type.label}.")

    if meld_type.value in rules.melds.single_declaration and player.has_declared(meld_type):
        raise IllegalMeld(f"{meld_type.label} may only be declared once per game.")
    if meld_type in window_types:
        raise IllegalMeld(f"{meld_type.label} was already declared after this trick.")
    if meld_type is MeldType.SEQUENCE and not has_intact_royal_marriage(player, trump, round_number):
        raise IllegalMeld("A sequence needs an intact royal marriage declared this round.")

    if trump is None:
        points = rules.melds.base_points(MeldType.ROYAL_MARRIAGE.value)
    else:
        points = meld_points(meld_type, cards, trump, rules)
    return Meld(meld_type, tuple(cards), points, round_number)

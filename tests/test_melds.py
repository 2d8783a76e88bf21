import pytest

from besigue.cards import Rank, Suit
from besigue.errors import IllegalMeld
from besigue.melds import (
    MELD_RULES,
    MeldType,
    detect_meld_type,
    possible_melds,
    validate_meld,
)
from besigue.player import Player
from besigue.rules_schema import MeldPoints, RuleSet

RULES = RuleSet()


def _player(*cards):
    player = Player(seat=0, name="North")
    player.cards.add_cards(cards)
    return player


def _record(player, meld):
    """Apply a validated meld the way the engine does."""
    for card in meld.cards:
        player.cards.move_to_melded(card)
        card.meld_tags.add(meld.meld_type)
    player.melds.append(meld)


def test_rule_table_covers_every_meld_type():
    assert set(MELD_RULES) == set(MeldType)
    assert MELD_RULES[MeldType.SEQUENCE].card_count == 5
    assert MELD_RULES[MeldType.FOUR_KINGS].trump_doubles
    assert not MELD_RULES[MeldType.FOUR_JOKERS].trump_doubles


def test_detect_meld_types(make_card):
    besigue = [make_card(Rank.QUEEN, Suit.SPADES), make_card(Rank.JACK, Suit.DIAMONDS)]
    marriage = [make_card(Rank.KING, Suit.CLUBS), make_card(Rank.QUEEN, Suit.CLUBS)]
    kings = [make_card(Rank.KING, suit) for suit in (Suit.HEARTS, Suit.CLUBS, Suit.SPADES)] + [make_card()]
    jokers = [make_card() for _ in range(4)]
    sequence = [make_card(rank, Suit.HEARTS) for rank in (Rank.ACE, Rank.TEN, Rank.KING, Rank.QUEEN, Rank.JACK)]

    assert detect_meld_type(besigue, Suit.HEARTS) is MeldType.BESIGUE
    assert detect_meld_type(marriage, Suit.HEARTS) is MeldType.COMMON_MARRIAGE
    assert detect_meld_type(marriage, Suit.CLUBS) is MeldType.ROYAL_MARRIAGE
    assert detect_meld_type(kings, Suit.HEARTS) is MeldType.FOUR_KINGS
    assert detect_meld_type(jokers, Suit.HEARTS) is MeldType.FOUR_JOKERS
    assert detect_meld_type(sequence, Suit.HEARTS) is MeldType.SEQUENCE
    assert detect_meld_type(sequence, Suit.SPADES) is None
    assert detect_meld_type(besigue[:1] + marriage[:1], Suit.HEARTS) is None


def test_marriage_before_trump_is_recorded_as_royal(make_card):
    king = make_card(Rank.KING, Suit.SPADES)
    queen = make_card(Rank.QUEEN, Suit.SPADES)
    player = _player(king, queen, make_card(Rank.SEVEN, Suit.HEARTS))

    meld = validate_meld(player, [king, queen], None, 1, RULES)
    assert meld.meld_type is MeldType.ROYAL_MARRIAGE
    assert meld.points == 40
    assert meld.suit is Suit.SPADES


def test_only_marriages_before_trump(make_card):
    besigue = [make_card(Rank.QUEEN, Suit.SPADES), make_card(Rank.JACK, Suit.DIAMONDS)]
    player = _player(*besigue)
    with pytest.raises(IllegalMeld):
        validate_meld(player, besigue, None, 1, RULES)
    assert possible_melds(player, None, 1, RULES) == []


def test_overlapping_king_cannot_make_second_four_kings(make_card):
    kings = [make_card(Rank.KING, suit) for suit in Suit]
    extra = [make_card(Rank.KING, Suit.HEARTS) for _ in range(3)]
    player = _player(*kings, *extra)

    first = validate_meld(player, kings, Suit.CLUBS, 1, RULES)
    assert first.meld_type is MeldType.FOUR_KINGS
    _record(player, first)

    with pytest.raises(IllegalMeld):
        validate_meld(player, [kings[0]] + extra, Suit.CLUBS, 1, RULES)
    # A different meld type may still reuse the melded king.
    queen = make_card(Rank.QUEEN, Suit.HEARTS)
    player.cards.add_cards([queen])
    assert validate_meld(player, [kings[0], queen], Suit.CLUBS, 1, RULES).meld_type is MeldType.COMMON_MARRIAGE


def test_meld_needs_a_held_card(make_card):
    king = make_card(Rank.KING, Suit.HEARTS)
    queen = make_card(Rank.QUEEN, Suit.HEARTS)
    player = _player(king, queen)
    player.cards.move_to_melded(king)
    player.cards.move_to_melded(queen)
    with pytest.raises(IllegalMeld):
        validate_meld(player, [king, queen], Suit.CLUBS, 1, RULES)
    assert possible_melds(player, Suit.CLUBS, 1, RULES) == []


def test_cards_must_belong_to_the_player(make_card):
    king = make_card(Rank.KING, Suit.HEARTS)
    queen = make_card(Rank.QUEEN, Suit.HEARTS)
    player = _player(king)
    with pytest.raises(IllegalMeld):
        validate_meld(player, [king, queen], Suit.CLUBS, 1, RULES)


def test_four_of_a_kind_in_trump_is_doubled(make_card):
    trump_kings = [make_card(Rank.KING, Suit.HEARTS) for _ in range(4)]
    player = _player(*trump_kings)
    assert validate_meld(player, trump_kings, Suit.HEARTS, 1, RULES).points == 160

    wild = trump_kings[:3] + [make_card()]
    player = _player(*wild)
    assert validate_meld(player, wild, Suit.HEARTS, 1, RULES).points == 80


def test_jokers_fill_four_of_a_kind_and_make_their_own_meld(make_card):
    jokers = [make_card() for _ in range(4)]
    aces = [make_card(Rank.ACE, Suit.CLUBS), make_card(Rank.ACE, Suit.SPADES)]
    player = _player(*jokers, *aces)
    melds = {meld.meld_type: meld for meld in possible_melds(player, Suit.HEARTS, 1, RULES)}

    assert melds[MeldType.FOUR_JOKERS].points == 200
    four_aces = melds[MeldType.FOUR_ACES]
    assert four_aces.points == 100
    assert sum(1 for card in four_aces.cards if card.is_joker) == 2


def test_sequence_requires_intact_royal_marriage(make_card):
    ace, ten, king, queen, jack = (
        make_card(rank, Suit.HEARTS) for rank in (Rank.ACE, Rank.TEN, Rank.KING, Rank.QUEEN, Rank.JACK)
    )
    player = _player(ace, ten, king, queen, jack)
    with pytest.raises(IllegalMeld):
        validate_meld(player, [ace, ten, king, queen, jack], Suit.HEARTS, 1, RULES)

    marriage = validate_meld(player, [king, queen], Suit.HEARTS, 1, RULES)
    _record(player, marriage)
    candidates = {meld.meld_type: meld for meld in possible_melds(player, Suit.HEARTS, 1, RULES)}
    sequence = candidates[MeldType.SEQUENCE]
    assert sequence.points == 250
    assert set(sequence.cards) == {ace, ten, king, queen, jack}

    # The marriage from an earlier round does not count.
    assert MeldType.SEQUENCE not in {meld.meld_type for meld in possible_melds(player, Suit.HEARTS, 2, RULES)}


def test_possible_melds_prefers_melded_cards_and_is_stable(make_card):
    queen = make_card(Rank.QUEEN, Suit.SPADES)
    jack = make_card(Rank.JACK, Suit.DIAMONDS)
    king = make_card(Rank.KING, Suit.SPADES)
    spare_queen = make_card(Rank.QUEEN, Suit.SPADES)
    player = _player(queen, jack, king, spare_queen)
    besigue = validate_meld(player, [queen, jack], Suit.CLUBS, 1, RULES)
    _record(player, besigue)

    first = possible_melds(player, Suit.CLUBS, 1, RULES)
    second = possible_melds(player, Suit.CLUBS, 1, RULES)
    assert first == second
    marriage = next(meld for meld in first if meld.meld_type is MeldType.COMMON_MARRIAGE)
    assert set(marriage.cards) == {king, queen}


def test_window_and_single_declaration_limits(make_card):
    queen = make_card(Rank.QUEEN, Suit.SPADES)
    jack = make_card(Rank.JACK, Suit.DIAMONDS)
    player = _player(queen, jack)

    with pytest.raises(IllegalMeld):
        validate_meld(player, [queen, jack], Suit.CLUBS, 1, RULES, window_types=[MeldType.BESIGUE])

    rules = RuleSet(melds=MeldPoints(single_declaration=["besigue"]))
    _record(player, validate_meld(player, [queen, jack], Suit.CLUBS, 1, rules))
    queen2 = make_card(Rank.QUEEN, Suit.SPADES)
    jack2 = make_card(Rank.JACK, Suit.DIAMONDS)
    player.cards.add_cards([queen2, jack2])
    with pytest.raises(IllegalMeld):
        validate_meld(player, [queen2, jack2], Suit.CLUBS, 1, rules)
    assert validate_meld(player, [queen2, jack2], Suit.CLUBS, 1, RULES).points == 40


def test_candidates_before_trump_match_the_recorded_marriage(make_card):
    king = make_card(Rank.KING, Suit.HEARTS)
    queen = make_card(Rank.QUEEN, Suit.HEARTS)
    player = _player(king, queen, make_card(Rank.SEVEN, Suit.CLUBS))

    (candidate,) = possible_melds(player, None, 1, RULES)
    declared = validate_meld(player, list(candidate.cards), None, 1, RULES)
    assert candidate.meld_type is MeldType.ROYAL_MARRIAGE
    assert candidate.points == 40
    assert (declared.meld_type, declared.points) == (candidate.meld_type, candidate.points)
    assert possible_melds(player, None, 1, RULES, window_types=[MeldType.ROYAL_MARRIAGE]) == []

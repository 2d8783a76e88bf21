import pytest

from besigue.cards import Rank, Suit
from besigue.trick import CompletedTrick, Trick, trick_winner


def test_higher_rank_of_lead_suit_wins_without_trump(make_card):
    cards = [make_card(Rank.SEVEN, Suit.SPADES), make_card(Rank.QUEEN, Suit.SPADES)]
    assert trick_winner(cards, leader=0, trump=None, player_count=2) == 1


def test_only_trump_wins_over_higher_side_suit(make_card):
    cards = [make_card(Rank.SEVEN, Suit.HEARTS), make_card(Rank.ACE, Suit.SPADES)]
    assert trick_winner(cards, leader=0, trump=Suit.HEARTS, player_count=2) == 0


def test_equal_cards_leave_the_trick_with_the_earlier_play(make_card):
    cards = [make_card(Rank.ACE, Suit.CLUBS), make_card(Rank.ACE, Suit.CLUBS)]
    assert trick_winner(cards, leader=1, trump=None, player_count=2) == 1


def test_off_suit_card_never_wins(make_card):
    cards = [make_card(Rank.SEVEN, Suit.DIAMONDS), make_card(Rank.ACE, Suit.CLUBS)]
    assert trick_winner(cards, leader=0, trump=Suit.HEARTS, player_count=2) == 0


def test_seat_mapping_wraps_around_the_table(make_card):
    cards = [
        make_card(Rank.NINE, Suit.CLUBS),
        make_card(Rank.JACK, Suit.CLUBS),
        make_card(Rank.TEN, Suit.CLUBS),
    ]
    # Seats 2, 0, 1 play in that order.
    assert trick_winner(cards, leader=2, trump=None, player_count=3) == 1


def test_highest_trump_wins_among_several(make_card):
    cards = [
        make_card(Rank.ACE, Suit.SPADES),
        make_card(Rank.EIGHT, Suit.HEARTS),
        make_card(Rank.KING, Suit.HEARTS),
        make_card(Rank.SEVEN, Suit.HEARTS),
    ]
    assert trick_winner(cards, leader=0, trump=Suit.HEARTS, player_count=4) == 2


def test_joker_lead_hands_the_lead_suit_to_the_next_card(make_card):
    cards = [make_card(), make_card(Rank.SEVEN, Suit.DIAMONDS)]
    assert trick_winner(cards, leader=0, trump=None, player_count=2) == 1
    assert trick_winner([make_card(), make_card()], leader=1, trump=None, player_count=2) == 1


def test_trick_winner_is_deterministic(make_card):
    cards = [make_card(Rank.KING, Suit.HEARTS), make_card(Rank.TEN, Suit.HEARTS)]
    results = {trick_winner(cards, 0, Suit.CLUBS, 2) for _ in range(10)}
    assert results == {1}


def test_partial_or_oversized_tricks_are_not_evaluated(make_card):
    with pytest.raises(ValueError):
        trick_winner([make_card(Rank.SEVEN, Suit.HEARTS)], leader=0, trump=None, player_count=2)


def test_trick_tracks_turn_order_and_leading_play(make_card):
    trick = Trick(leader=1, player_count=3)
    assert trick.next_seat() == 1
    trick.add_play(1, make_card(Rank.NINE, Suit.SPADES))
    trick.add_play(2, make_card(Rank.ACE, Suit.SPADES))
    assert trick.next_seat() == 0
    seat, card = trick.leading_play(trump=None)
    assert seat == 2 and card.rank is Rank.ACE
    assert trick.best_of_suit(Suit.SPADES) is card


def test_completed_trick_counts_brisques_and_trump_sevens(make_card):
    completed = CompletedTrick(
        leader=0,
        winner=1,
        plays=(
            (0, make_card(Rank.ACE, Suit.HEARTS)),
            (1, make_card(Rank.SEVEN, Suit.CLUBS)),
        ),
    )
    assert completed.brisque_count() == 1
    assert completed.sevens_of(Suit.CLUBS) == 1
    assert completed.sevens_of(None) == 0

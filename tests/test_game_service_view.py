import pytest

from besigue.game import BesigueGame
from besigue.rules_schema import RuleSet
from besigue.service import ActionRejected, GameService


def _service(**rules):
    return GameService(BesigueGame(RuleSet(**rules), seed=6, verify_invariants=True))


def test_initial_view_shows_own_hand_and_legal_moves():
    service = _service()
    view = service.start_new_game(perspective=0)
    assert view.phase == "playing"
    assert view.round_number == 1
    assert len(view.hand) == 9
    assert len(view.hand_labels) == 9
    assert view.draw_pile == 132 - 18
    assert view.trump is None
    assert view.trick is None
    assert [player.held_count for player in view.players] == [9, 9]
    assert [player.is_current for player in view.players] == [seat == view.expected_actor for seat in (0, 1)]
    if view.expected_actor == 0:
        assert view.step == "play"
        assert view.legal_moves
    else:
        assert view.legal_moves == []


def test_play_by_slot_updates_trick_view():
    service = _service()
    view = service.start_new_game()
    actor = view.expected_actor
    slot = service.get_game_view(actor).legal_moves[0]["slot"]
    view = service.play_card(actor, slot)
    assert view.trick is not None
    assert view.trick.leader == actor
    assert view.trick.plays[0].card["slot"] == slot
    assert all(card["slot"] != slot for card in service.get_game_view(actor).hand)


def test_rejections_raise_with_engine_code():
    service = _service()
    view = service.start_new_game()
    other = 1 - view.expected_actor
    with pytest.raises(ActionRejected) as excinfo:
        service.play_card(other, service.get_game_view(other).hand[0]["slot"])
    assert excinfo.value.code == "invalid_actor"

    with pytest.raises(ActionRejected) as excinfo:
        service.play_card(view.expected_actor, 999)
    assert excinfo.value.code == "illegal_card"

    with pytest.raises(ActionRejected) as excinfo:
        service.draw_card(view.expected_actor)
    assert excinfo.value.code == "invalid_phase"


def test_dealer_draw_view_step():
    service = _service(dealer_determination="draw_jacks")
    view = service.start_new_game()
    assert view.phase == "dealer_determination"
    assert view.step == "dealer_draw"
    assert view.expected_actor == 0
    view = service.draw_for_dealer(0)
    assert view.phase in {"dealer_determination", "playing"}


def test_standings_are_listed_best_first():
    service = _service()
    service.start_new_game()
    service.game.players[1].score = 120
    standings = service.get_game_view().standings
    assert standings[0] == {"seat": 1, "name": "Player 2", "score": 120}

import pytest
from pydantic import ValidationError

from besigue.rules_schema import MeldPoints, RuleSet


def test_defaults_match_the_standard_game():
    rules = RuleSet()
    assert rules.player_count == 2
    assert rules.hand_size == 9
    assert rules.deal_packet_size == 3
    assert rules.target_score == 1000
    assert rules.melds.sequence == 250
    assert rules.melds.base_points("four_aces") == 100
    assert rules.scoring.brisque_cutoff == 600


def test_target_score_depends_on_player_count_unless_configured():
    assert RuleSet(player_count=3).target_score == 750
    assert RuleSet(player_count=4).target_score == 750
    assert RuleSet(player_count=4, winning_score=500).target_score == 500


def test_from_mapping_builds_nested_sections():
    rules = RuleSet.from_mapping(
        {
            "player_count": 3,
            "dealer_determination": "Draw-Jacks",
            "melds": {"besigue": 50, "single_declaration": ["SEQUENCE"]},
            "scoring": {"penalty": -10},
        }
    )
    assert rules.dealer_determination == "draw_jacks"
    assert rules.melds.besigue == 50
    assert rules.melds.single_declaration == ["sequence"]
    assert rules.scoring.penalty == -10


@pytest.mark.parametrize(
    "payload",
    [
        {"player_count": 5},
        {"player_count": 1},
        {"dealer_determination": "coin_flip"},
        {"scoring": {"penalty": 5}},
    ],
)
def test_invalid_rules_are_rejected(payload):
    with pytest.raises(ValidationError):
        RuleSet.from_mapping(payload)


def test_unknown_single_declaration_meld_is_rejected():
    with pytest.raises(ValidationError):
        MeldPoints(single_declaration=["five_aces"])


def test_rules_are_read_only():
    rules = RuleSet()
    with pytest.raises(ValidationError):
        rules.player_count = 3


def test_nested_sections_are_read_only():
    rules = RuleSet()
    with pytest.raises(ValidationError):
        rules.scoring.penalty = -50
    with pytest.raises(ValidationError):
        rules.melds.sequence = 500
    assert rules.scoring.penalty == -20
    assert rules.melds.sequence == 250

import pytest
from pydantic import ValidationError

from golf.rules_schema import DEFAULT_CONFIG, NINE_CARD_CONFIG, GameConfig


def test_default_config_is_classic_two_by_three():
    assert DEFAULT_CONFIG.hand_size == 6
    assert DEFAULT_CONFIG.initial_reveal_count == 2
    assert DEFAULT_CONFIG.total_rounds == 9
    assert DEFAULT_CONFIG.joker_single_score == 15
    assert DEFAULT_CONFIG.joker_pair_score == -5
    assert not DEFAULT_CONFIG.special_abilities
    assert NINE_CARD_CONFIG.hand_size == 9


def test_camel_case_payload_loads():
    config = GameConfig.model_validate({"gridRows": 3, "gridCols": 3, "includeJokers": True, "jokerPairScore": -10})
    assert config.grid_rows == 3
    assert config.include_jokers
    assert config.joker_pair_score == -10
    assert GameConfig(grid_rows=3).grid_rows == 3


def test_reveal_count_cannot_exceed_hand():
    with pytest.raises(ValidationError):
        GameConfig(initial_reveal_count=7)


def test_deck_must_cover_the_deal():
    with pytest.raises(ValidationError):
        GameConfig(max_players=6, grid_rows=3, grid_cols=3)
    assert GameConfig(max_players=6, grid_rows=3, grid_cols=3, deck_count=2).hand_size == 9


def test_rejects_non_positive_values():
    with pytest.raises(ValidationError):
        GameConfig(grid_cols=0)
    with pytest.raises(ValidationError):
        GameConfig(total_rounds=0)
    with pytest.raises(ValidationError):
        GameConfig(max_players=1)


def test_config_is_immutable():
    with pytest.raises(ValidationError):
        DEFAULT_CONFIG.grid_rows = 3

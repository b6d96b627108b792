from collections import Counter

import pytest

from bots import GolfBot, GreedyBot, RandomBot
from bots.bot_arena import main, run_match
from golf.deck import create_deck
from golf.rules_schema import GameConfig
from golf.state import GameStatus


def test_run_match_executes():
    results = run_match(GreedyBot(), GolfBot(), config=GameConfig(total_rounds=2), seed=7)
    assert len(results["scores"]) == 2
    assert len(results["history"]) == 2
    assert results["state"].status is GameStatus.FINISHED
    for index, total in enumerate(results["scores"]):
        assert total == sum(entry["scores"][index] for entry in results["history"])


@pytest.mark.parametrize(
    "config",
    [
        GameConfig(total_rounds=2, include_jokers=True),
        GameConfig(total_rounds=2, grid_rows=3, grid_cols=3, special_abilities=True, include_jokers=True),
        GameConfig(total_rounds=1, grid_rows=3, grid_cols=3, deck_count=2),
    ],
)
def test_matches_conserve_cards(config):
    expected = Counter(create_deck(config.deck_count, config.include_jokers))
    seen = []

    def observer(state):
        if state.players[0].hand:
            assert Counter(state.all_cards()) == expected
            seen.append(state.status)

    run_match(RandomBot(seed=1), GreedyBot(), config=config, seed=3, observer=observer)
    assert GameStatus.PLAYING in seen


def test_seeded_matches_repeat():
    config = GameConfig(total_rounds=2, special_abilities=True, include_jokers=True)
    first = run_match(RandomBot(seed=4), RandomBot(seed=5), config=config, seed=9)
    second = run_match(RandomBot(seed=4), RandomBot(seed=5), config=config, seed=9)
    assert first["scores"] == second["scores"]
    assert first["history"] == second["history"]


def test_cli_prints_scores(capsys):
    main(["--bot-a", "greedy", "--bot-b", "base", "--rounds", "1", "--nine-card", "--seed", "2"])
    out = capsys.readouterr().out
    assert "Scores after 1 rounds" in out

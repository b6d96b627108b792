"""Simple bot arena for Card Golf."""

from __future__ import annotations

import argparse
from random import Random
from typing import Callable, Dict, Iterable, Optional, Sequence

from golf import game
from golf.rules_schema import DEFAULT_CONFIG, GameConfig
from golf.state import GameState, GameStatus, new_game

from .base import GolfBot, Move, MoveType
from .baseline_greedy import GreedyBot
from .random_bot import RandomBot

BOT_REGISTRY: Dict[str, type[GolfBot]] = {
    "base": GolfBot,
    "greedy": GreedyBot,
    "random": RandomBot,
}

MAX_TURNS_PER_ROUND = 2000

Observer = Callable[[GameState], None]


def _resolve(state: GameState, user_id: str, move: Move) -> GameState:
    if move.kind is MoveType.PLACE:
        return game.handle_place_drawn_card(state, user_id, move.position)
    if move.kind is MoveType.DISCARD:
        return game.handle_discard_drawn_card(state, user_id)
    if move.kind is MoveType.JACK:
        state, _ = game.handle_use_jack_ability(state, user_id, move.position)
        return state
    if move.kind is MoveType.QUEEN:
        state, _ = game.handle_use_queen_ability(state, user_id, move.opponent_id, move.position)
        return state
    if move.kind is MoveType.KING:
        return game.handle_use_king_ability(state, user_id, move.position, move.opponent_id, move.other_position)
    if move.kind is MoveType.JOKER:
        return game.handle_use_joker_ability(state, user_id, move.opponent_id, move.position, move.other_position)
    raise ValueError(f"{move.kind.name} cannot resolve a drawn card.")


def play_turn(state: GameState, bots: Sequence[GolfBot], observer: Optional[Observer] = None) -> GameState:
    player = state.players[state.current_player_index]
    bot = bots[player.player_index]
    opening = bot.choose_opening(state, player)

    if opening.kind is MoveType.DRAW:
        state = game.handle_draw_card(state, player.user_id)
        if observer is not None:
            observer(state)
        move = bot.resolve_drawn_card(state, state.players[player.player_index])
        return _resolve(state, player.user_id, move)
    if opening.kind is MoveType.TAKE_DISCARD:
        return game.handle_take_discard_and_replace(state, player.user_id, opening.position)
    if opening.kind is MoveType.UNCOVER:
        return game.handle_uncover_card(state, player.user_id, opening.position)
    raise ValueError(f"{opening.kind.name} cannot open a turn.")


def play_round(state: GameState, bots: Sequence[GolfBot], observer: Optional[Observer] = None) -> GameState:
    """Play from a freshly dealt ``setup`` state until the round ends."""
    for player in list(state.players):
        positions = bots[player.player_index].choose_reveal_positions(state, state.players[player.player_index])
        state = game.handle_reveal_initial_cards(state, player.user_id, positions)
        if observer is not None:
            observer(state)

    turns = 0
    while state.status.is_turn_phase:
        turns += 1
        if turns > MAX_TURNS_PER_ROUND:
            raise RuntimeError(f"Round {state.current_round} did not finish within {MAX_TURNS_PER_ROUND} turns.")
        state = play_turn(state, bots, observer)
        if observer is not None:
            observer(state)
    return state


def run_match(
    bot_a: GolfBot,
    bot_b: GolfBot,
    *,
    config: Optional[GameConfig] = None,
    seed: int | None = None,
    observer: Optional[Observer] = None,
) -> dict:
    rng = Random(seed)
    bots = [bot_a, bot_b]
    state = new_game(
        "arena",
        "ARENA",
        [("p0", "bot-0", bot_a.name), ("p1", "bot-1", bot_b.name)],
        config or DEFAULT_CONFIG,
    )
    state = game.initialize_game(state, rng)
    history = []

    while True:
        state = play_round(state, bots, observer)
        result = game.handle_round_end(state)
        state = result.state
        history.append(
            {
                "round": state.current_round,
                "scores": [entry.score for entry in result.round_scores],
                "finish_triggered_by": state.finish_triggered_by,
            }
        )
        state = game.handle_start_next_round(state, rng)
        if state.status is GameStatus.FINISHED:
            break
        if observer is not None:
            observer(state)

    return {
        "scores": [player.total_score for player in state.players],
        "history": history,
        "state": state,
    }


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run a Card Golf bot match.")
    parser.add_argument("--bot-a", default="greedy", choices=BOT_REGISTRY.keys())
    parser.add_argument("--bot-b", default="random", choices=BOT_REGISTRY.keys())
    parser.add_argument("--rounds", type=int, default=9, help="Number of rounds to play.")
    parser.add_argument("--nine-card", action="store_true", help="Play the 3x3 layout.")
    parser.add_argument("--abilities", action="store_true", help="Enable power-card abilities.")
    parser.add_argument("--jokers", action="store_true", help="Add Jokers to the deck.")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args(argv)

    config = GameConfig(
        grid_rows=3 if args.nine_card else 2,
        grid_cols=3,
        total_rounds=args.rounds,
        special_abilities=args.abilities,
        include_jokers=args.jokers,
    )
    bot_a = BOT_REGISTRY[args.bot_a]()
    bot_b = BOT_REGISTRY[args.bot_b]()
    results = run_match(bot_a, bot_b, config=config, seed=args.seed)

    print(f"Scores after {args.rounds} rounds: {results['scores']}")
    finishers = sum(1 for entry in results["history"] if entry["finish_triggered_by"] == "bot-0")
    print(f"{bot_a.name} went out first in {finishers}/{len(results['history'])} rounds")


if __name__ == "__main__":
    main()

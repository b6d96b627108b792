"""High-level game orchestration for Card Golf.

Every entry point validates first and only then delegates to an action, so a
raised :class:`GameError` always leaves the given state as it was.
"""

from __future__ import annotations

from dataclasses import dataclass
from random import Random
from typing import List, Optional, Sequence, Tuple

from .actions import (
    apply_jack_ability,
    apply_joker_ability,
    apply_king_ability,
    apply_queen_ability,
    discard_drawn_card,
    draw_card,
    place_drawn_card,
    reveal_initial_cards,
    setup_new_round,
    take_discard_and_replace,
    uncover_card,
)
from .cards import Card, Rank
from .scoring import RoundScore, score_round
from .state import GameState, GameStatus, PlayerState, clone_state
from .validation import (
    GameError,
    get_opponent,
    validate_can_draw,
    validate_discard_not_empty,
    validate_distinct_positions,
    validate_has_drawn_card,
    validate_is_current_player,
    validate_is_face_down,
    validate_is_power_card,
    validate_no_drawn_card,
    validate_playing_phase,
    validate_position,
    validate_reveal_initial_cards,
    validate_round_ended,
    validate_special_abilities,
)

__all__ = [
    "GameError",
    "RoundEndResult",
    "handle_reveal_initial_cards",
    "handle_draw_card",
    "handle_place_drawn_card",
    "handle_discard_drawn_card",
    "handle_uncover_card",
    "handle_take_discard_and_replace",
    "handle_use_jack_ability",
    "handle_use_queen_ability",
    "handle_use_king_ability",
    "handle_use_joker_ability",
    "handle_round_end",
    "handle_start_next_round",
    "initialize_game",
]


@dataclass(frozen=True)
class RoundEndResult:
    state: GameState
    round_scores: List[RoundScore]


def handle_reveal_initial_cards(state: GameState, user_id: str, positions: Sequence[int]) -> GameState:
    player = validate_reveal_initial_cards(state, user_id, positions)
    return reveal_initial_cards(state, player, positions)


def handle_draw_card(state: GameState, user_id: str) -> GameState:
    validate_is_current_player(state, user_id)
    validate_can_draw(state)
    return draw_card(state)


def handle_place_drawn_card(state: GameState, user_id: str, position: int) -> GameState:
    player = validate_is_current_player(state, user_id)
    validate_playing_phase(state)
    validate_has_drawn_card(state)
    validate_position(position, len(player.hand))
    return place_drawn_card(state, player, position)


def handle_discard_drawn_card(state: GameState, user_id: str) -> GameState:
    validate_is_current_player(state, user_id)
    validate_playing_phase(state)
    validate_has_drawn_card(state)
    return discard_drawn_card(state)


def handle_uncover_card(state: GameState, user_id: str, position: int) -> GameState:
    """Reveal a face-down card as a standalone turn (no drawn card pending)."""
    player = validate_is_current_player(state, user_id)
    validate_playing_phase(state)
    validate_no_drawn_card(state)
    validate_position(position, len(player.hand))
    validate_is_face_down(player.hand, position)
    return uncover_card(state, player, position)


def handle_take_discard_and_replace(state: GameState, user_id: str, position: int) -> GameState:
    player = validate_is_current_player(state, user_id)
    validate_playing_phase(state)
    validate_no_drawn_card(state)
    validate_position(position, len(player.hand))
    validate_discard_not_empty(state)
    return take_discard_and_replace(state, player, position)


def _validate_ability(state: GameState, user_id: str, rank: Rank) -> PlayerState:
    player = validate_is_current_player(state, user_id)
    validate_playing_phase(state)
    drawn = validate_has_drawn_card(state)
    validate_special_abilities(state)
    validate_is_power_card(drawn, rank)
    return player


def handle_use_jack_ability(state: GameState, user_id: str, position: int) -> Tuple[GameState, Card]:
    """Peek at one of your own face-down cards. The card is returned to the caller only.

    The drawn card must be a Jack; other power cards are rejected with
    ``NOT_A_POWER_CARD``.
    """
    player = _validate_ability(state, user_id, Rank.JACK)
    validate_position(position, len(player.hand))
    validate_is_face_down(player.hand, position)
    return apply_jack_ability(state, player, position)


def handle_use_queen_ability(
    state: GameState,
    user_id: str,
    opponent_id: str,
    position: int,
) -> Tuple[GameState, Card]:
    """Peek at one of the opponent's face-down cards. Requires a drawn Queen."""
    player = _validate_ability(state, user_id, Rank.QUEEN)
    opponent = get_opponent(state, player, opponent_id)
    validate_position(position, len(opponent.hand))
    validate_is_face_down(opponent.hand, position)
    return apply_queen_ability(state, player, opponent.id, position)


def handle_use_king_ability(
    state: GameState,
    user_id: str,
    my_position: int,
    opponent_id: str,
    opponent_position: int,
) -> GameState:
    """Swap one of your slots with an opponent's slot. Requires a drawn King."""
    player = _validate_ability(state, user_id, Rank.KING)
    validate_position(my_position, len(player.hand))
    opponent = get_opponent(state, player, opponent_id)
    validate_position(opponent_position, len(opponent.hand))
    return apply_king_ability(state, player, my_position, opponent.id, opponent_position)


def handle_use_joker_ability(
    state: GameState,
    user_id: str,
    opponent_id: str,
    pos1: int,
    pos2: int,
) -> GameState:
    """Swap two of an opponent's slots. Requires a drawn Joker."""
    player = _validate_ability(state, user_id, Rank.JOKER)
    opponent = get_opponent(state, player, opponent_id)
    validate_position(pos1, len(opponent.hand))
    validate_position(pos2, len(opponent.hand))
    validate_distinct_positions(pos1, pos2)
    return apply_joker_ability(state, player, opponent.id, pos1, pos2)


# Round lifecycle -------------------------------------------------------------


def handle_round_end(state: GameState) -> RoundEndResult:
    """Score the finished round and add each score to the player's total.

    Applying the same round twice adds the scores twice; callers keep track of
    which rounds they have already applied.
    """
    validate_round_ended(state)
    round_scores = score_round(state)

    next_state = clone_state(state)
    for entry in round_scores:
        player = next_state.player_by_id(entry.player_id)
        assert player is not None
        player.total_score += entry.score

    return RoundEndResult(state=next_state, round_scores=round_scores)


def handle_start_next_round(state: GameState, rng: Optional[Random] = None) -> GameState:
    """Deal the next round, or mark the game finished after the last round."""
    validate_round_ended(state)

    next_state = clone_state(state)
    if next_state.current_round >= next_state.config.total_rounds:
        next_state.status = GameStatus.FINISHED
        return next_state

    next_state.current_round += 1
    next_state.dealer_index = (next_state.dealer_index + 1) % len(next_state.players)
    return setup_new_round(next_state, rng)


def initialize_game(state: GameState, rng: Optional[Random] = None) -> GameState:
    """Deal round one."""
    return setup_new_round(state, rng)

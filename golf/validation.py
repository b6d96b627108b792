"""Precondition guards run before any state transition.

Every guard either returns a value (usually the resolved player) or raises a
:class:`GameError` naming the one rule that was broken. Callers chain guards
and surface the first failure's message to the player unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence

from .cards import Card, Rank
from .state import GameState, GameStatus, PlayerCard, PlayerState


class ErrorKind(Enum):
    NOT_YOUR_TURN = "not_your_turn"
    WRONG_PHASE = "wrong_phase"
    INVALID_POSITION = "invalid_position"
    DECK_EMPTY = "deck_empty"
    DISCARD_EMPTY = "discard_empty"
    NO_DRAWN_CARD = "no_drawn_card"
    DRAW_PENDING = "draw_pending"
    ALREADY_FACE_UP = "already_face_up"
    WRONG_REVEAL_COUNT = "wrong_reveal_count"
    DUPLICATE_POSITION = "duplicate_position"
    ABILITIES_DISABLED = "abilities_disabled"
    NOT_A_POWER_CARD = "not_a_power_card"
    PLAYER_NOT_FOUND = "player_not_found"
    OPPONENT_NOT_FOUND = "opponent_not_found"
    DUPLICATE_SELECTION = "duplicate_selection"
    CURRENT_PLAYER_MISSING = "current_player_missing"
    ALREADY_READY = "already_ready"
    ROUND_NOT_ENDED = "round_not_ended"


class GameError(RuntimeError):
    """Raised when an action breaks a game rule. The state is left untouched."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


_RANK_NAMES = {
    Rank.JACK: "Jack",
    Rank.QUEEN: "Queen",
    Rank.KING: "King",
    Rank.JOKER: "Joker",
}


def get_player(state: GameState, user_id: str) -> PlayerState:
    player = state.player_by_user(user_id)
    if player is None:
        raise GameError(ErrorKind.PLAYER_NOT_FOUND, "Player not in this game")
    return player


def get_current_player(state: GameState) -> PlayerState:
    player = state.player_at(state.current_player_index)
    if player is None:
        raise GameError(ErrorKind.CURRENT_PLAYER_MISSING, "Current player not found")
    return player


def get_opponent(state: GameState, acting: PlayerState, opponent_id: str) -> PlayerState:
    opponent = state.player_by_id(opponent_id)
    if opponent is None or opponent.id == acting.id:
        raise GameError(ErrorKind.OPPONENT_NOT_FOUND, "Opponent not found")
    return opponent


def validate_is_current_player(state: GameState, user_id: str) -> PlayerState:
    current = get_current_player(state)
    if current.user_id != user_id:
        raise GameError(ErrorKind.NOT_YOUR_TURN, "Not your turn")
    return current


def validate_setup_phase(state: GameState) -> None:
    if state.status is not GameStatus.SETUP:
        raise GameError(ErrorKind.WRONG_PHASE, "Game is not in setup phase")


def validate_playing_phase(state: GameState) -> None:
    if not state.status.is_turn_phase:
        raise GameError(ErrorKind.WRONG_PHASE, "Game is not in playing phase")


def validate_round_ended(state: GameState) -> None:
    if state.status is not GameStatus.ROUND_ENDED:
        raise GameError(ErrorKind.ROUND_NOT_ENDED, "Round has not ended")


def validate_position(position: int, hand_size: int) -> None:
    if isinstance(position, bool) or not isinstance(position, int):
        raise GameError(ErrorKind.INVALID_POSITION, f"Invalid position: {position!r}")
    if position < 0 or position >= hand_size:
        raise GameError(ErrorKind.INVALID_POSITION, f"Invalid position: {position}")


def validate_has_drawn_card(state: GameState) -> Card:
    if state.drawn_card is None:
        raise GameError(ErrorKind.NO_DRAWN_CARD, "No card has been drawn")
    return state.drawn_card


def validate_no_drawn_card(state: GameState) -> None:
    if state.drawn_card is not None:
        raise GameError(ErrorKind.DRAW_PENDING, "Must place or discard drawn card first")


def validate_can_draw(state: GameState) -> None:
    validate_playing_phase(state)
    validate_no_drawn_card(state)
    if not state.deck:
        raise GameError(ErrorKind.DECK_EMPTY, "Deck is empty")


def validate_discard_not_empty(state: GameState) -> Card:
    if not state.discard_pile:
        raise GameError(ErrorKind.DISCARD_EMPTY, "Discard pile is empty")
    return state.discard_pile[-1]


def validate_reveal_initial_cards(
    state: GameState,
    user_id: str,
    positions: Sequence[int],
) -> PlayerState:
    validate_setup_phase(state)
    player = get_player(state, user_id)

    if player.setup_complete:
        raise GameError(ErrorKind.ALREADY_READY, "Already completed setup")

    expected = state.config.initial_reveal_count
    if len(positions) != expected:
        raise GameError(ErrorKind.WRONG_REVEAL_COUNT, f"Must reveal exactly {expected} cards")

    if len(set(positions)) != len(positions):
        raise GameError(ErrorKind.DUPLICATE_POSITION, "Duplicate positions")

    for position in positions:
        validate_position(position, len(player.hand))
        if player.hand[position].face_up:
            raise GameError(
                ErrorKind.ALREADY_FACE_UP,
                f"Card at position {position} is already face up",
            )

    return player


def validate_special_abilities(state: GameState) -> None:
    if not state.config.special_abilities:
        raise GameError(ErrorKind.ABILITIES_DISABLED, "Special abilities are not enabled")


def validate_is_power_card(card: Card, expected: Optional[Rank] = None) -> None:
    if not card.is_power_card:
        raise GameError(ErrorKind.NOT_A_POWER_CARD, "Drawn card is not a power card")
    if expected is not None and card.rank is not expected:
        raise GameError(
            ErrorKind.NOT_A_POWER_CARD,
            f"Drawn card is not a {_RANK_NAMES[expected]}",
        )


def validate_is_face_down(hand: Sequence[PlayerCard], position: int) -> None:
    if hand[position].face_up:
        raise GameError(ErrorKind.ALREADY_FACE_UP, "Card is already face up")


def validate_distinct_positions(first: int, second: int) -> None:
    if first == second:
        raise GameError(ErrorKind.DUPLICATE_SELECTION, "Must select two different positions")

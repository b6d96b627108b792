"""State transitions for Card Golf.

Each action takes an already validated state, works on a deep copy and returns
it. Inputs are never mutated, so a caller holding the previous state still
sees it unchanged.
"""

from __future__ import annotations

from random import Random
from typing import List, Optional, Sequence, Tuple

from .cards import Card
from .deck import create_shuffled_deck, deal_cards
from .state import GameState, GameStatus, PlayerCard, PlayerState, clone_state
from .validation import ErrorKind, GameError


def _find(state: GameState, player: PlayerState) -> PlayerState:
    found = state.player_by_id(player.id)
    if found is None:
        raise GameError(ErrorKind.PLAYER_NOT_FOUND, "Player not in this game")
    return found


def reveal_initial_cards(
    state: GameState,
    player: PlayerState,
    positions: Sequence[int],
) -> GameState:
    next_state = clone_state(state)
    p = _find(next_state, player)

    for position in positions:
        p.hand[position].face_up = True
    p.revealed_count = len(positions)
    p.setup_complete = True

    if all(pl.setup_complete for pl in next_state.players):
        next_state.status = GameStatus.PLAYING
        # Player after the dealer opens.
        next_state.current_player_index = (next_state.dealer_index + 1) % len(next_state.players)
        next_state.turn_number = 1

    return next_state


def draw_card(state: GameState) -> GameState:
    next_state = clone_state(state)
    if not next_state.deck:
        raise GameError(ErrorKind.DECK_EMPTY, "Deck is empty")
    next_state.drawn_card = next_state.deck.pop(0)
    return next_state


def _swap_into_hand(state: GameState, player: PlayerState, position: int, card: Card) -> None:
    old = player.hand[position].card
    player.hand[position] = PlayerCard(card, True)
    state.discard_pile.append(old)


def place_drawn_card(state: GameState, player: PlayerState, position: int) -> GameState:
    """Replace the card at ``position`` with the drawn card; the old card is discarded."""
    next_state = clone_state(state)
    p = _find(next_state, player)
    drawn = next_state.drawn_card
    assert drawn is not None
    _swap_into_hand(next_state, p, position, drawn)
    next_state.drawn_card = None
    return advance_turn(next_state, p)


def discard_drawn_card(state: GameState) -> GameState:
    next_state = clone_state(state)
    current = next_state.player_at(next_state.current_player_index)
    if current is None:
        raise GameError(ErrorKind.CURRENT_PLAYER_MISSING, "Current player not found")
    assert next_state.drawn_card is not None
    next_state.discard_pile.append(next_state.drawn_card)
    next_state.drawn_card = None
    return advance_turn(next_state, current)


def uncover_card(state: GameState, player: PlayerState, position: int) -> GameState:
    """Flip one face-down card as a whole turn."""
    next_state = clone_state(state)
    p = _find(next_state, player)
    p.hand[position].face_up = True
    return advance_turn(next_state, p)


def take_discard_and_replace(state: GameState, player: PlayerState, position: int) -> GameState:
    next_state = clone_state(state)
    p = _find(next_state, player)
    if not next_state.discard_pile:
        raise GameError(ErrorKind.DISCARD_EMPTY, "Discard pile is empty")
    taken = next_state.discard_pile.pop()
    _swap_into_hand(next_state, p, position, taken)
    return advance_turn(next_state, p)


# Power cards ---------------------------------------------------------------


def _consume_drawn_card(state: GameState) -> None:
    assert state.drawn_card is not None
    state.discard_pile.append(state.drawn_card)
    state.drawn_card = None


def apply_jack_ability(
    state: GameState,
    player: PlayerState,
    position: int,
) -> Tuple[GameState, Card]:
    """Peek at one of the player's own face-down cards without revealing it."""
    next_state = clone_state(state)
    p = _find(next_state, player)
    peeked = p.hand[position].card
    _consume_drawn_card(next_state)
    return advance_turn(next_state, p), peeked


def apply_queen_ability(
    state: GameState,
    player: PlayerState,
    opponent_id: str,
    position: int,
) -> Tuple[GameState, Card]:
    """Peek at one of the opponent's face-down cards without revealing it."""
    next_state = clone_state(state)
    p = _find(next_state, player)
    opponent = next_state.player_by_id(opponent_id)
    if opponent is None:
        raise GameError(ErrorKind.OPPONENT_NOT_FOUND, "Opponent not found")
    peeked = opponent.hand[position].card
    _consume_drawn_card(next_state)
    return advance_turn(next_state, p), peeked


def apply_king_ability(
    state: GameState,
    player: PlayerState,
    my_position: int,
    opponent_id: str,
    opponent_position: int,
) -> GameState:
    """Swap one own slot with one opponent slot; face state travels with each card."""
    next_state = clone_state(state)
    p = _find(next_state, player)
    opponent = next_state.player_by_id(opponent_id)
    if opponent is None:
        raise GameError(ErrorKind.OPPONENT_NOT_FOUND, "Opponent not found")
    p.hand[my_position], opponent.hand[opponent_position] = (
        opponent.hand[opponent_position],
        p.hand[my_position],
    )
    _consume_drawn_card(next_state)
    return advance_turn(next_state, p)


def apply_joker_ability(
    state: GameState,
    player: PlayerState,
    opponent_id: str,
    pos1: int,
    pos2: int,
) -> GameState:
    """Swap two of the opponent's slots with each other."""
    next_state = clone_state(state)
    p = _find(next_state, player)
    opponent = next_state.player_by_id(opponent_id)
    if opponent is None:
        raise GameError(ErrorKind.OPPONENT_NOT_FOUND, "Opponent not found")
    opponent.hand[pos1], opponent.hand[pos2] = opponent.hand[pos2], opponent.hand[pos1]
    _consume_drawn_card(next_state)
    return advance_turn(next_state, p)


# Turn and round flow ---------------------------------------------------------


def advance_turn(state: GameState, acting_player: PlayerState) -> GameState:
    """Finish the acting player's turn in place.

    Triggers the final-turn phase when the acting player's grid is fully
    revealed, ends the round once every other player has had their last
    turn, and otherwise passes play to the next seat.
    """
    acting_player.revealed_count = acting_player.face_up_count()

    if state.status is GameStatus.PLAYING and acting_player.all_face_up():
        state.status = GameStatus.FINAL_TURN
        state.finish_triggered_by = acting_player.user_id
        state.final_turn_players_remaining = [
            p.user_id for p in state.players if p.user_id != acting_player.user_id
        ]

    if state.status is GameStatus.FINAL_TURN:
        state.final_turn_players_remaining = [
            user_id for user_id in state.final_turn_players_remaining if user_id != acting_player.user_id
        ]
        if not state.final_turn_players_remaining:
            state.status = GameStatus.ROUND_ENDED
            for p in state.players:
                for slot in p.hand:
                    slot.face_up = True
                p.revealed_count = len(p.hand)
            return state

    state.current_player_index = (state.current_player_index + 1) % len(state.players)
    state.turn_number += 1
    return state


def setup_new_round(state: GameState, rng: Optional[Random] = None) -> GameState:
    """Deal a fresh round: new shuffled deck, face-down hands, one card on the discard pile."""
    next_state = clone_state(state)
    config = next_state.config

    next_state.deck = create_shuffled_deck(config.deck_count, config.include_jokers, rng=rng)

    for player in next_state.players:
        dealt: List[Card] = deal_cards(next_state.deck, config.hand_size)
        player.hand = [PlayerCard(card, False) for card in dealt]
        player.setup_complete = False
        player.revealed_count = 0

    next_state.discard_pile = deal_cards(next_state.deck, 1)

    next_state.drawn_card = None
    next_state.finish_triggered_by = None
    next_state.final_turn_players_remaining = []
    next_state.status = GameStatus.SETUP
    next_state.turn_number = 0
    next_state.current_player_index = 0

    return next_state

"""Baseline greedy bot."""

from __future__ import annotations

from typing import List, Optional

from golf.cards import Card, Rank
from golf.state import GameState, PlayerState

from .base import GolfBot, Move, MoveType, opponents_of

# Cards at or below this value are worth keeping even blind.
KEEP_THRESHOLD = 4


def _card_cost(state: GameState, card: Card) -> int:
    if card.is_joker:
        return state.config.joker_single_score
    return card.point_value()


def _column_partner(state: GameState, player: PlayerState, card: Card) -> Optional[int]:
    """Return a face-down slot sharing a column with a face-up card of the same rank."""
    cols = state.config.grid_cols
    for position, slot in enumerate(player.hand):
        if not slot.face_up or slot.card.rank is not card.rank or card.is_joker:
            continue
        for other in range(position % cols, len(player.hand), cols):
            if other != position and not player.hand[other].face_up:
                return other
    return None


def _worst_face_up(state: GameState, player: PlayerState) -> Optional[int]:
    candidates = [i for i, slot in enumerate(player.hand) if slot.face_up]
    if not candidates:
        return None
    return max(candidates, key=lambda i: _card_cost(state, player.hand[i].card))


class GreedyBot(GolfBot):
    name = "Greedy"

    def choose_reveal_positions(self, state: GameState, player: PlayerState) -> List[int]:
        # Spread the reveals across columns first.
        cols = state.config.grid_cols
        face_down = sorted(player.face_down_positions(), key=lambda i: (i // cols, i % cols))
        return face_down[: state.config.initial_reveal_count]

    def choose_opening(self, state: GameState, player: PlayerState) -> Move:
        top = state.top_discard
        if top is not None:
            target = self._target_for(state, player, top)
            if target is not None:
                return Move(MoveType.TAKE_DISCARD, position=target)
        if state.deck:
            return Move(MoveType.DRAW)
        face_down = player.face_down_positions()
        if face_down:
            return Move(MoveType.UNCOVER, position=face_down[0])
        worst = _worst_face_up(state, player)
        return Move(MoveType.TAKE_DISCARD, position=worst if worst is not None else 0)

    def resolve_drawn_card(self, state: GameState, player: PlayerState) -> Move:
        drawn = state.drawn_card
        assert drawn is not None
        target = self._target_for(state, player, drawn)
        if target is not None:
            return Move(MoveType.PLACE, position=target)

        if state.config.special_abilities and drawn.rank is Rank.KING:
            swap = self._king_swap(state, player)
            if swap is not None:
                return swap

        face_down = player.face_down_positions()
        if face_down and _card_cost(state, drawn) <= KEEP_THRESHOLD + 2:
            return Move(MoveType.PLACE, position=face_down[0])
        return Move(MoveType.DISCARD)

    def _target_for(self, state: GameState, player: PlayerState, card: Card) -> Optional[int]:
        partner = _column_partner(state, player, card)
        if partner is not None:
            return partner
        cost = _card_cost(state, card)
        worst = _worst_face_up(state, player)
        if worst is not None and _card_cost(state, player.hand[worst].card) > cost + 2:
            return worst
        face_down = player.face_down_positions()
        if face_down and cost <= KEEP_THRESHOLD:
            return face_down[0]
        return None

    def _king_swap(self, state: GameState, player: PlayerState) -> Optional[Move]:
        worst = _worst_face_up(state, player)
        if worst is None:
            return None
        mine = _card_cost(state, player.hand[worst].card)
        for opponent in opponents_of(state, player):
            for position, slot in enumerate(opponent.hand):
                if slot.face_up and _card_cost(state, slot.card) + 3 < mine:
                    return Move(MoveType.KING, position=worst, opponent_id=opponent.id, other_position=position)
        return None

"""Random baseline bot."""

from __future__ import annotations

import random
from typing import List, Optional

from golf.cards import Rank
from golf.state import GameState, PlayerState

from .base import GolfBot, Move, MoveType, opponents_of


class RandomBot(GolfBot):
    name = "Random"

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def choose_reveal_positions(self, state: GameState, player: PlayerState) -> List[int]:
        return self._rng.sample(player.face_down_positions(), state.config.initial_reveal_count)

    def choose_opening(self, state: GameState, player: PlayerState) -> Move:
        hand_size = len(player.hand)
        options = [Move(MoveType.TAKE_DISCARD, position=self._rng.randrange(hand_size))]
        if state.deck:
            options.append(Move(MoveType.DRAW))
        face_down = player.face_down_positions()
        if face_down:
            options.append(Move(MoveType.UNCOVER, position=self._rng.choice(face_down)))
        return self._rng.choice(options)

    def resolve_drawn_card(self, state: GameState, player: PlayerState) -> Move:
        assert state.drawn_card is not None
        hand_size = len(player.hand)
        options = [
            Move(MoveType.PLACE, position=self._rng.randrange(hand_size)),
            Move(MoveType.DISCARD),
        ]
        if state.config.special_abilities:
            ability = self._ability_move(state, player, state.drawn_card.rank)
            if ability is not None:
                options.append(ability)
        return self._rng.choice(options)

    def _ability_move(self, state: GameState, player: PlayerState, rank: Rank) -> Optional[Move]:
        opponent = self._rng.choice(opponents_of(state, player))
        hand_size = len(player.hand)
        if rank is Rank.JACK:
            face_down = player.face_down_positions()
            if face_down:
                return Move(MoveType.JACK, position=self._rng.choice(face_down))
        elif rank is Rank.QUEEN:
            face_down = opponent.face_down_positions()
            if face_down:
                return Move(MoveType.QUEEN, position=self._rng.choice(face_down), opponent_id=opponent.id)
        elif rank is Rank.KING:
            return Move(
                MoveType.KING,
                position=self._rng.randrange(hand_size),
                opponent_id=opponent.id,
                other_position=self._rng.randrange(len(opponent.hand)),
            )
        elif rank is Rank.JOKER:
            first, second = self._rng.sample(range(len(opponent.hand)), 2)
            return Move(MoveType.JOKER, position=first, opponent_id=opponent.id, other_position=second)
        return None

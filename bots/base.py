"""Common bot strategy interfaces."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional

from golf.state import GameState, PlayerState


class MoveType(Enum):
    DRAW = auto()
    TAKE_DISCARD = auto()
    UNCOVER = auto()
    PLACE = auto()
    DISCARD = auto()
    JACK = auto()
    QUEEN = auto()
    KING = auto()
    JOKER = auto()


@dataclass(frozen=True)
class Move:
    kind: MoveType
    position: Optional[int] = None
    opponent_id: Optional[str] = None
    other_position: Optional[int] = None


def opponents_of(state: GameState, player: PlayerState) -> List[PlayerState]:
    return [p for p in state.players if p.id != player.id]


class GolfBot:
    """Base class for bot policies.

    A turn is two decisions: an opening move (draw, take the discard, or
    uncover), and, after a draw, what to do with the drawn card.
    """

    name: str = "BaseBot"

    def choose_reveal_positions(self, state: GameState, player: PlayerState) -> List[int]:
        """Return the positions to flip during setup."""
        return player.face_down_positions()[: state.config.initial_reveal_count]

    def choose_opening(self, state: GameState, player: PlayerState) -> Move:
        if state.deck:
            return Move(MoveType.DRAW)
        face_down = player.face_down_positions()
        return Move(MoveType.TAKE_DISCARD, position=face_down[0] if face_down else 0)

    def resolve_drawn_card(self, state: GameState, player: PlayerState) -> Move:
        """Return a PLACE, DISCARD or ability move for ``state.drawn_card``."""
        face_down = player.face_down_positions()
        if face_down:
            return Move(MoveType.PLACE, position=face_down[0])
        return Move(MoveType.DISCARD)

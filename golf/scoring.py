"""Hand scoring helpers for Card Golf."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .cards import CARD_VALUES, Rank, count_jokers
from .state import GameState, PlayerCard

DEFAULT_JOKER_SINGLE_SCORE = 15
DEFAULT_JOKER_PAIR_SCORE = -5


class MatchType(Enum):
    SQUARE = "square"
    COLUMN = "column"
    ROW = "row"
    DIAGONAL = "diagonal"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HandMatches:
    """Positions credited to a matching group, plus the lump square penalties."""

    positions: Dict[int, MatchType] = field(default_factory=dict)
    square_penalty: int = 0


@dataclass(frozen=True)
class RoundScore:
    player_id: str
    user_id: str
    score: int
    hand: Tuple[PlayerCard, ...]


def _grid_rows(hand: Sequence[PlayerCard], grid_cols: int) -> int:
    if grid_cols < 1 or len(hand) % grid_cols != 0:
        raise ValueError(f"Hand of {len(hand)} cards does not fit {grid_cols} columns.")
    return len(hand) // grid_cols


def _shared_rank(hand: Sequence[PlayerCard], positions: Sequence[int]) -> Optional[Rank]:
    """Return the rank shared by every face-up, non-Joker member, or None."""
    first = hand[positions[0]].card.rank
    for position in positions:
        slot = hand[position]
        if not slot.face_up or slot.card.is_joker or slot.card.rank is not first:
            return None
    return first


def _columns(rows: int, cols: int) -> List[List[int]]:
    return [[row * cols + col for row in range(rows)] for col in range(cols)]


def _rows(rows: int, cols: int) -> List[List[int]]:
    return [[row * cols + col for col in range(cols)] for row in range(rows)]


def _diagonals(rows: int, cols: int) -> List[List[int]]:
    if rows != cols:
        return []
    return [
        [i * cols + i for i in range(rows)],
        [i * cols + (cols - 1 - i) for i in range(rows)],
    ]


def _squares(rows: int, cols: int) -> List[List[int]]:
    blocks = []
    for row in range(rows - 1):
        for col in range(cols - 1):
            top = row * cols + col
            blocks.append([top, top + 1, top + cols, top + cols + 1])
    return blocks


def _classic_matches(hand: Sequence[PlayerCard], rows: int, cols: int) -> HandMatches:
    positions: Dict[int, MatchType] = {}
    for column in _columns(rows, cols):
        members = [p for p in column if not hand[p].card.is_joker]
        if len(members) > 1 and _shared_rank(hand, members) is not None:
            for position in members:
                positions[position] = MatchType.COLUMN
    return HandMatches(positions=positions)


def _grid_matches(hand: Sequence[PlayerCard], rows: int, cols: int) -> HandMatches:
    positions: Dict[int, MatchType] = {}
    penalty = 0

    for block in _squares(rows, cols):
        if any(positions.get(p) is MatchType.SQUARE for p in block):
            continue
        rank = _shared_rank(hand, block)
        # Only positive values square; K and 2 never do.
        if rank is None or CARD_VALUES[rank] <= 0:
            continue
        for position in block:
            positions[position] = MatchType.SQUARE
        penalty += CARD_VALUES[rank]

    lines = (
        (MatchType.COLUMN, _columns(rows, cols)),
        (MatchType.ROW, _rows(rows, cols)),
        (MatchType.DIAGONAL, _diagonals(rows, cols)),
    )
    for match_type, groups in lines:
        for group in groups:
            if _shared_rank(hand, group) is None:
                continue
            for position in group:
                positions.setdefault(position, match_type)

    return HandMatches(positions=positions, square_penalty=penalty)


def find_matches(hand: Sequence[PlayerCard], grid_cols: int) -> HandMatches:
    """Classify matched positions.

    Grids with fewer than three rows use the classic column rule. Larger grids
    evaluate squares, then columns, rows and diagonals; a position keeps the
    first group type that credited it.
    """
    if not hand:
        return HandMatches()
    rows = _grid_rows(hand, grid_cols)
    if rows < 3:
        return _classic_matches(hand, rows, grid_cols)
    return _grid_matches(hand, rows, grid_cols)


def get_matched_line_types(hand: Sequence[PlayerCard], grid_cols: int) -> Dict[int, MatchType]:
    return dict(find_matches(hand, grid_cols).positions)


def joker_score(
    hand: Sequence[PlayerCard],
    joker_single_score: int = DEFAULT_JOKER_SINGLE_SCORE,
    joker_pair_score: int = DEFAULT_JOKER_PAIR_SCORE,
) -> int:
    face_up_jokers = count_jokers(slot.card for slot in hand if slot.face_up)
    if face_up_jokers == 0:
        return 0
    if face_up_jokers == 1:
        return joker_single_score
    return joker_pair_score


def calculate_score(
    hand: Sequence[PlayerCard],
    grid_cols: int,
    joker_single_score: int = DEFAULT_JOKER_SINGLE_SCORE,
    joker_pair_score: int = DEFAULT_JOKER_PAIR_SCORE,
) -> int:
    matches = find_matches(hand, grid_cols)
    total = 0
    for position, slot in enumerate(hand):
        if slot.card.is_joker or position in matches.positions:
            continue
        total += slot.card.point_value()
    total -= matches.square_penalty
    total += joker_score(hand, joker_single_score, joker_pair_score)
    return total


def score_round(state: GameState) -> List[RoundScore]:
    """Score every player's hand with all cards treated as revealed."""
    config = state.config
    scores = []
    for player in state.players:
        revealed = tuple(PlayerCard(slot.card, True) for slot in player.hand)
        scores.append(
            RoundScore(
                player_id=player.id,
                user_id=player.user_id,
                score=calculate_score(
                    revealed,
                    config.grid_cols,
                    config.joker_single_score,
                    config.joker_pair_score,
                ),
                hand=revealed,
            )
        )
    return scores

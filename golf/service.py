"""In-memory service layer for callers driving the engine.

The service owns what the engine leaves to its caller: serialising calls per
game, applying each round's scores at most once, and building per-player views
that never leak hidden cards.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from random import Random
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from . import game
from .cards import Card
from .rules_schema import DEFAULT_CONFIG, GameConfig
from .scoring import RoundScore, get_matched_line_types
from .state import GameState, GameStatus, PlayerSeed, clone_state, new_game
from .validation import ErrorKind, GameError

logger = logging.getLogger(__name__)

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6

# A handler returns the new state, or the new state and a peeked card.
Outcome = Union[GameState, Tuple[GameState, Card]]


@dataclass
class SlotView:
    card: Optional[str]
    face_up: bool
    match: Optional[str] = None


@dataclass
class PlayerSummaryView:
    id: str
    user_id: str
    player_index: int
    display_name: str
    is_guest: bool
    total_score: int
    setup_complete: bool
    hand: List[SlotView]


@dataclass
class PlayerView:
    id: str
    code: str
    status: str
    config: Dict[str, Any]
    current_round: int
    current_player_index: int
    turn_number: int
    deck_count: int
    discard_top: Optional[str]
    drawn_card: Optional[str]
    finish_triggered_by: Optional[str]
    dealer_index: int
    players: List[PlayerSummaryView]


@dataclass
class PeekView:
    view: PlayerView
    peeked_card: str


@dataclass
class RoundScoreRecord:
    round_number: int
    player_id: str
    player_name: str
    score: int
    hand: List[str]


@dataclass
class PlayerResult:
    player_id: str
    display_name: str
    total_score: int
    rounds: List[RoundScoreRecord]


@dataclass
class GameResults:
    status: str
    players: List[PlayerResult]
    winner_id: Optional[str]


def build_player_view(state: GameState, user_id: str) -> PlayerView:
    """Strip hidden information from ``state`` for the player ``user_id``."""
    viewer = state.player_by_user(user_id)
    current = state.player_at(state.current_player_index)
    reveal_all = state.status in (GameStatus.ROUND_ENDED, GameStatus.FINISHED)
    sees_drawn = viewer is not None and current is not None and current.id == viewer.id

    players = []
    for player in state.players:
        matches = get_matched_line_types(player.hand, state.config.grid_cols) if player.hand else {}
        slots = []
        for position, slot in enumerate(player.hand):
            visible = reveal_all or slot.face_up
            match = matches.get(position)
            slots.append(
                SlotView(
                    card=slot.card.code if visible else None,
                    face_up=slot.face_up,
                    match=match.value if match else None,
                )
            )
        players.append(
            PlayerSummaryView(
                id=player.id,
                user_id=player.user_id,
                player_index=player.player_index,
                display_name=player.display_name,
                is_guest=player.is_guest,
                total_score=player.total_score,
                setup_complete=player.setup_complete,
                hand=slots,
            )
        )

    top = state.top_discard
    return PlayerView(
        id=state.id,
        code=state.code,
        status=state.status.value,
        config=state.config.to_payload(),
        current_round=state.current_round,
        current_player_index=state.current_player_index,
        turn_number=state.turn_number,
        deck_count=len(state.deck),
        discard_top=top.code if top else None,
        drawn_card=state.drawn_card.code if sees_drawn and state.drawn_card else None,
        finish_triggered_by=state.finish_triggered_by,
        dealer_index=state.dealer_index,
        players=players,
    )


def generate_code(rng: Random) -> str:
    return "".join(rng.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


class GameService:
    """Facade around the engine for transport layers and bots."""

    def __init__(self, rng: Optional[Random] = None) -> None:
        self._rng = rng or Random()
        self._games: Dict[str, GameState] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        # game id -> (round number, player id) -> score; guarded by the game's lock.
        self._round_scores: Dict[str, Dict[Tuple[int, str], RoundScore]] = {}

    # Game lifecycle ------------------------------------------------------

    def create_game(
        self,
        players: Sequence[PlayerSeed],
        config: Optional[GameConfig] = None,
        code: Optional[str] = None,
    ) -> GameState:
        game_id = str(uuid.uuid4())
        state = new_game(game_id, code or generate_code(self._rng), players, config or DEFAULT_CONFIG)
        with self._registry_lock:
            self._games[game_id] = state
            self._locks[game_id] = threading.Lock()
            self._round_scores[game_id] = {}
        logger.info("Created game %s (%s) with %d players", game_id, state.code, len(state.players))
        return state

    def start_game(self, game_id: str, user_id: str) -> PlayerView:
        with self._locked(game_id) as state:
            if state.status is not GameStatus.WAITING:
                raise GameError(ErrorKind.WRONG_PHASE, "Game has already started")
            state = game.initialize_game(state, self._rng)
            self._games[game_id] = state
            logger.info("Game %s started", game_id)
            return build_player_view(state, user_id)

    def get_state(self, game_id: str) -> GameState:
        return self._require(game_id)

    def get_view(self, game_id: str, user_id: str) -> PlayerView:
        return build_player_view(self._require(game_id), user_id)

    def abandon(self, game_id: str) -> None:
        with self._locked(game_id) as state:
            if state.status is GameStatus.FINISHED:
                raise GameError(ErrorKind.WRONG_PHASE, "Game is already finished")
            abandoned = clone_state(state)
            abandoned.status = GameStatus.ABANDONED
            self._games[game_id] = abandoned
            logger.info("Game %s abandoned", game_id)

    def remove_game(self, game_id: str) -> None:
        """Forget a game and its round scores once the caller has archived it."""
        with self._locked(game_id):
            with self._registry_lock:
                del self._games[game_id]
                del self._locks[game_id]
                del self._round_scores[game_id]
        logger.info("Game %s removed", game_id)

    # Player actions --------------------------------------------------------

    def reveal_initial_cards(self, game_id: str, user_id: str, positions: Sequence[int]) -> PlayerView:
        return self._apply(game_id, user_id, "reveal_initial_cards", game.handle_reveal_initial_cards, list(positions))

    def draw_card(self, game_id: str, user_id: str) -> PlayerView:
        return self._apply(game_id, user_id, "draw_card", game.handle_draw_card)

    def place_drawn_card(self, game_id: str, user_id: str, position: int) -> PlayerView:
        return self._apply(game_id, user_id, "place_drawn_card", game.handle_place_drawn_card, position)

    def discard_drawn_card(self, game_id: str, user_id: str) -> PlayerView:
        return self._apply(game_id, user_id, "discard_drawn_card", game.handle_discard_drawn_card)

    def uncover_card(self, game_id: str, user_id: str, position: int) -> PlayerView:
        return self._apply(game_id, user_id, "uncover_card", game.handle_uncover_card, position)

    def take_discard_and_replace(self, game_id: str, user_id: str, position: int) -> PlayerView:
        return self._apply(
            game_id, user_id, "take_discard_and_replace", game.handle_take_discard_and_replace, position
        )

    def use_jack_ability(self, game_id: str, user_id: str, position: int) -> PeekView:
        return self._apply_peek(game_id, user_id, "use_jack_ability", game.handle_use_jack_ability, position)

    def use_queen_ability(self, game_id: str, user_id: str, opponent_id: str, position: int) -> PeekView:
        return self._apply_peek(
            game_id, user_id, "use_queen_ability", game.handle_use_queen_ability, opponent_id, position
        )

    def use_king_ability(
        self,
        game_id: str,
        user_id: str,
        my_position: int,
        opponent_id: str,
        opponent_position: int,
    ) -> PlayerView:
        return self._apply(
            game_id,
            user_id,
            "use_king_ability",
            game.handle_use_king_ability,
            my_position,
            opponent_id,
            opponent_position,
        )

    def use_joker_ability(self, game_id: str, user_id: str, opponent_id: str, pos1: int, pos2: int) -> PlayerView:
        return self._apply(
            game_id, user_id, "use_joker_ability", game.handle_use_joker_ability, opponent_id, pos1, pos2
        )

    # Rounds and results ----------------------------------------------------

    def process_round_end(self, game_id: str) -> GameState:
        with self._locked(game_id) as state:
            return self._process_round_end(game_id, state)

    def start_next_round(self, game_id: str, user_id: str) -> PlayerView:
        with self._locked(game_id) as state:
            state = self._process_round_end(game_id, state)
            if state.status is GameStatus.FINISHED:
                return build_player_view(state, user_id)
            try:
                state = game.handle_start_next_round(state, self._rng)
            except GameError as exc:
                logger.warning("Rejected start_next_round for game %s: %s", game_id, exc)
                raise
            self._games[game_id] = state
            if state.status is GameStatus.FINISHED:
                logger.info("Game %s finished after round %d", game_id, state.current_round)
            else:
                logger.info("Game %s dealt round %d", game_id, state.current_round)
            return build_player_view(state, user_id)

    def get_round_scores(self, game_id: str) -> List[RoundScoreRecord]:
        with self._locked(game_id) as state:
            return self._round_records(game_id, state)

    def get_results(self, game_id: str) -> GameResults:
        with self._locked(game_id) as state:
            records = self._round_records(game_id, state)
        results = [
            PlayerResult(
                player_id=player.id,
                display_name=player.display_name,
                total_score=player.total_score,
                rounds=[record for record in records if record.player_id == player.id],
            )
            for player in state.players
        ]
        # Lowest total wins.
        results.sort(key=lambda result: result.total_score)
        winner = results[0].player_id if state.status is GameStatus.FINISHED and results else None
        return GameResults(status=state.status.value, players=results, winner_id=winner)

    # Helpers -----------------------------------------------------------------

    def _require(self, game_id: str) -> GameState:
        try:
            return self._games[game_id]
        except KeyError:
            raise KeyError(f"Unknown game: {game_id}") from None

    @contextmanager
    def _locked(self, game_id: str) -> Iterator[GameState]:
        with self._registry_lock:
            lock = self._locks.get(game_id)
        if lock is None:
            raise KeyError(f"Unknown game: {game_id}")
        with lock:
            yield self._require(game_id)

    def _round_records(self, game_id: str, state: GameState) -> List[RoundScoreRecord]:
        names = {p.id: p.display_name for p in state.players}
        records = [
            RoundScoreRecord(
                round_number=round_number,
                player_id=player_id,
                player_name=names.get(player_id, ""),
                score=entry.score,
                hand=[slot.card.code for slot in entry.hand],
            )
            for (round_number, player_id), entry in self._round_scores[game_id].items()
        ]
        return sorted(records, key=lambda record: (record.round_number, record.player_id))

    def _process_round_end(self, game_id: str, state: GameState) -> GameState:
        if state.status is not GameStatus.ROUND_ENDED:
            return state
        scores = self._round_scores[game_id]
        if state.players and (state.current_round, state.players[0].id) in scores:
            return state

        result = game.handle_round_end(state)
        for entry in result.round_scores:
            scores[(state.current_round, entry.player_id)] = entry
        self._games[game_id] = result.state
        logger.info(
            "Game %s round %d scored: %s",
            game_id,
            state.current_round,
            ", ".join(f"{entry.player_id}={entry.score}" for entry in result.round_scores),
        )
        return result.state

    def _run(
        self, game_id: str, user_id: str, name: str, handler: Callable[..., Outcome], *args: Any
    ) -> Tuple[Outcome, GameState]:
        with self._locked(game_id) as state:
            try:
                outcome = handler(state, user_id, *args)
            except GameError as exc:
                logger.warning("Rejected %s by %s in game %s: %s", name, user_id, game_id, exc)
                raise
            new_state = outcome[0] if isinstance(outcome, tuple) else outcome
            self._games[game_id] = new_state
            logger.debug("Game %s: %s applied for %s (turn %d)", game_id, name, user_id, new_state.turn_number)
            if new_state.status is GameStatus.ROUND_ENDED:
                new_state = self._process_round_end(game_id, new_state)
            return outcome, new_state

    def _apply(
        self, game_id: str, user_id: str, name: str, handler: Callable[..., GameState], *args: Any
    ) -> PlayerView:
        _, state = self._run(game_id, user_id, name, handler, *args)
        return build_player_view(state, user_id)

    def _apply_peek(
        self,
        game_id: str,
        user_id: str,
        name: str,
        handler: Callable[..., Tuple[GameState, Card]],
        *args: Any,
    ) -> PeekView:
        outcome, state = self._run(game_id, user_id, name, handler, *args)
        peeked: Card = outcome[1]
        return PeekView(view=build_player_view(state, user_id), peeked_card=peeked.code)

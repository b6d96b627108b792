"""Game state model for Card Golf."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .cards import Card, parse_card
from .rules_schema import DEFAULT_CONFIG, GameConfig


class GameStatus(Enum):
    WAITING = "waiting"
    SETUP = "setup"
    PLAYING = "playing"
    FINAL_TURN = "final_turn"
    ROUND_ENDED = "round_ended"
    FINISHED = "finished"
    ABANDONED = "abandoned"

    def __str__(self) -> str:
        return self.value

    @property
    def is_turn_phase(self) -> bool:
        return self in (GameStatus.PLAYING, GameStatus.FINAL_TURN)


@dataclass
class PlayerCard:
    """One slot of a player's grid."""

    card: Card
    face_up: bool = False


@dataclass
class PlayerState:
    id: str
    user_id: str
    player_index: int
    hand: List[PlayerCard] = field(default_factory=list)
    revealed_count: int = 0
    total_score: int = 0
    setup_complete: bool = False
    display_name: str = ""
    is_guest: bool = False

    def all_face_up(self) -> bool:
        return all(slot.face_up for slot in self.hand)

    def face_up_count(self) -> int:
        return sum(1 for slot in self.hand if slot.face_up)

    def face_down_positions(self) -> List[int]:
        return [index for index, slot in enumerate(self.hand) if not slot.face_up]


@dataclass
class GameState:
    id: str
    code: str
    config: GameConfig = DEFAULT_CONFIG
    status: GameStatus = GameStatus.WAITING
    current_round: int = 1
    current_player_index: int = 0
    turn_number: int = 0
    deck: List[Card] = field(default_factory=list)
    discard_pile: List[Card] = field(default_factory=list)
    drawn_card: Optional[Card] = None
    finish_triggered_by: Optional[str] = None
    final_turn_players_remaining: List[str] = field(default_factory=list)
    dealer_index: int = 0
    players: List[PlayerState] = field(default_factory=list)

    def player_by_id(self, player_id: str) -> Optional[PlayerState]:
        return next((p for p in self.players if p.id == player_id), None)

    def player_by_user(self, user_id: str) -> Optional[PlayerState]:
        return next((p for p in self.players if p.user_id == user_id), None)

    def player_at(self, player_index: int) -> Optional[PlayerState]:
        return next((p for p in self.players if p.player_index == player_index), None)

    @property
    def top_discard(self) -> Optional[Card]:
        return self.discard_pile[-1] if self.discard_pile else None

    def all_cards(self) -> List[Card]:
        """Every card in play this round: deck, discard, hands and the drawn card."""
        cards = list(self.deck) + list(self.discard_pile)
        for player in self.players:
            cards.extend(slot.card for slot in player.hand)
        if self.drawn_card is not None:
            cards.append(self.drawn_card)
        return cards


def clone_state(state: GameState) -> GameState:
    """Deep copy so that no mutable structure is shared with the input."""
    return copy.deepcopy(state)


@dataclass(frozen=True)
class NewPlayer:
    id: str
    user_id: str
    display_name: str = ""
    is_guest: bool = False


PlayerSeed = Union[NewPlayer, Tuple[str, str, str]]


def new_game(
    game_id: str,
    code: str,
    players: Sequence[PlayerSeed],
    config: Optional[GameConfig] = None,
) -> GameState:
    """Return the empty ``waiting`` state a game starts from, seats in the given order."""
    config = config or DEFAULT_CONFIG
    if len(players) < 2:
        raise ValueError("A game needs at least two players.")
    if len(players) > config.max_players:
        raise ValueError(f"At most {config.max_players} players may join this game.")

    seated: List[PlayerState] = []
    for index, seed in enumerate(players):
        if not isinstance(seed, NewPlayer):
            seed = NewPlayer(*seed)
        seated.append(
            PlayerState(
                id=seed.id,
                user_id=seed.user_id,
                player_index=index,
                display_name=seed.display_name,
                is_guest=seed.is_guest,
            )
        )
    if len({p.user_id for p in seated}) != len(seated):
        raise ValueError("Each player must have a distinct user id.")
    return GameState(id=game_id, code=code, config=config, players=seated)


# Snapshots ---------------------------------------------------------------


def _slot_payload(slot: PlayerCard) -> dict[str, Any]:
    return {"card": slot.card.code, "faceUp": slot.face_up}


def _player_payload(player: PlayerState) -> dict[str, Any]:
    return {
        "id": player.id,
        "userId": player.user_id,
        "playerIndex": player.player_index,
        "hand": [_slot_payload(slot) for slot in player.hand],
        "revealedCount": player.revealed_count,
        "totalScore": player.total_score,
        "setupComplete": player.setup_complete,
        "displayName": player.display_name,
        "isGuest": player.is_guest,
    }


def state_to_payload(state: GameState) -> dict[str, Any]:
    """Return a JSON-compatible mapping of the full state, hidden cards included."""
    return {
        "id": state.id,
        "code": state.code,
        "status": state.status.value,
        "config": state.config.model_dump(by_alias=True),
        "currentRound": state.current_round,
        "currentPlayerIndex": state.current_player_index,
        "turnNumber": state.turn_number,
        "deck": [card.code for card in state.deck],
        "discardPile": [card.code for card in state.discard_pile],
        "drawnCard": state.drawn_card.code if state.drawn_card else None,
        "finishTriggeredBy": state.finish_triggered_by,
        "finalTurnPlayersRemaining": list(state.final_turn_players_remaining),
        "dealerIndex": state.dealer_index,
        "players": [_player_payload(player) for player in state.players],
    }


def _cards(codes: Iterable[str]) -> List[Card]:
    return [parse_card(code) for code in codes]


def state_from_payload(payload: Mapping[str, Any]) -> GameState:
    players = [
        PlayerState(
            id=raw["id"],
            user_id=raw["userId"],
            player_index=raw["playerIndex"],
            hand=[PlayerCard(parse_card(slot["card"]), bool(slot["faceUp"])) for slot in raw["hand"]],
            revealed_count=raw.get("revealedCount", 0),
            total_score=raw.get("totalScore", 0),
            setup_complete=raw.get("setupComplete", False),
            display_name=raw.get("displayName", ""),
            is_guest=raw.get("isGuest", False),
        )
        for raw in payload["players"]
    ]
    drawn = payload.get("drawnCard")
    return GameState(
        id=payload["id"],
        code=payload["code"],
        config=GameConfig.model_validate(payload.get("config", {})),
        status=GameStatus(payload["status"]),
        current_round=payload.get("currentRound", 1),
        current_player_index=payload.get("currentPlayerIndex", 0),
        turn_number=payload.get("turnNumber", 0),
        deck=_cards(payload.get("deck", [])),
        discard_pile=_cards(payload.get("discardPile", [])),
        drawn_card=parse_card(drawn) if drawn else None,
        finish_triggered_by=payload.get("finishTriggeredBy"),
        final_turn_players_remaining=list(payload.get("finalTurnPlayersRemaining", [])),
        dealer_index=payload.get("dealerIndex", 0),
        players=sorted(players, key=lambda p: p.player_index),
    )

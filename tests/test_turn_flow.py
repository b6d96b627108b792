from collections import Counter
from random import Random

import pytest

from golf import game
from golf.cards import parse_card
from golf.rules_schema import GameConfig
from golf.state import GameStatus, PlayerCard, clone_state, new_game
from golf.validation import ErrorKind, GameError


def slots(*codes, face_up=False):
    return [PlayerCard(parse_card(code), face_up) for code in codes]


def playing_state(config=None, players=2):
    seats = [(f"p{i}", f"u{i}", f"Player {i}") for i in range(players)]
    state = new_game("g1", "ABCDEF", seats, config or GameConfig(max_players=max(players, 2)))
    hands = [
        slots("AS", "2S", "3S", "4S", "5S", "6S"),
        slots("AH", "2H", "3H", "4H", "5H", "6H"),
        slots("AD", "2D", "3D", "4D", "5D", "6D"),
    ]
    for player, hand in zip(state.players, hands):
        player.hand = hand
        player.setup_complete = True
    state.status = GameStatus.PLAYING
    state.deck = [parse_card(code) for code in ("KC", "QC", "JC", "TC")]
    state.discard_pile = [parse_card("9C")]
    state.current_player_index = 0
    state.turn_number = 1
    return state


def dealt_state(seed=5):
    state = new_game("g1", "ABCDEF", [("p0", "u0", "Ann"), ("p1", "u1", "Bob")])
    return game.initialize_game(state, Random(seed))


def test_initialize_game_deals_face_down_hands():
    state = dealt_state()
    assert state.status is GameStatus.SETUP
    assert state.turn_number == 0
    assert state.current_player_index == 0
    assert len(state.deck) == 52 - 13
    assert len(state.discard_pile) == 1
    for player in state.players:
        assert len(player.hand) == 6
        assert not any(slot.face_up for slot in player.hand)
        assert not player.setup_complete
    assert len(set(state.all_cards())) == 52


def test_setup_moves_to_playing_only_when_everyone_is_ready():
    state = dealt_state()
    state = game.handle_reveal_initial_cards(state, "u0", [0, 4])
    assert state.status is GameStatus.SETUP
    assert state.players[0].setup_complete
    assert state.players[0].revealed_count == 2
    assert state.players[0].hand[0].face_up and state.players[0].hand[4].face_up

    state = game.handle_reveal_initial_cards(state, "u1", [1, 2])
    assert state.status is GameStatus.PLAYING
    assert state.current_player_index == 1  # seat after the dealer
    assert state.turn_number == 1


def test_wrong_reveal_count_leaves_state_unchanged():
    state = dealt_state()
    before = clone_state(state)
    with pytest.raises(GameError) as excinfo:
        game.handle_reveal_initial_cards(state, "u0", [0, 1, 2])
    assert excinfo.value.kind is ErrorKind.WRONG_REVEAL_COUNT
    assert state == before


def test_reveal_twice_is_rejected():
    state = game.handle_reveal_initial_cards(dealt_state(), "u0", [0, 1])
    with pytest.raises(GameError) as excinfo:
        game.handle_reveal_initial_cards(state, "u0", [2, 3])
    assert excinfo.value.kind is ErrorKind.ALREADY_READY


@pytest.mark.parametrize(
    "call",
    [
        lambda s: game.handle_draw_card(s, "u1"),
        lambda s: game.handle_place_drawn_card(s, "u1", 0),
        lambda s: game.handle_discard_drawn_card(s, "u1"),
        lambda s: game.handle_uncover_card(s, "u1", 0),
        lambda s: game.handle_take_discard_and_replace(s, "u1", 0),
        lambda s: game.handle_use_jack_ability(s, "u1", 0),
        lambda s: game.handle_use_queen_ability(s, "u1", "p0", 0),
        lambda s: game.handle_use_king_ability(s, "u1", 0, "p0", 0),
        lambda s: game.handle_use_joker_ability(s, "u1", "p0", 0, 1),
    ],
)
def test_out_of_turn_actions_are_rejected(call):
    state = playing_state()
    state.drawn_card = parse_card("KD")
    before = clone_state(state)
    with pytest.raises(GameError) as excinfo:
        call(state)
    assert excinfo.value.kind is ErrorKind.NOT_YOUR_TURN
    assert state == before


def test_draw_then_place():
    state = playing_state()
    drawn = game.handle_draw_card(state, "u0")
    assert drawn.drawn_card == parse_card("KC")
    assert drawn.deck == [parse_card(code) for code in ("QC", "JC", "TC")]
    assert state.drawn_card is None  # input untouched

    placed = game.handle_place_drawn_card(drawn, "u0", 2)
    assert placed.drawn_card is None
    assert placed.players[0].hand[2] == PlayerCard(parse_card("KC"), True)
    assert placed.discard_pile[-1] == parse_card("3S")
    assert placed.current_player_index == 1
    assert placed.turn_number == 2
    assert placed.players[0].revealed_count == 1


def test_draw_guards():
    state = game.handle_draw_card(playing_state(), "u0")
    with pytest.raises(GameError) as excinfo:
        game.handle_draw_card(state, "u0")
    assert excinfo.value.kind is ErrorKind.DRAW_PENDING

    with pytest.raises(GameError) as excinfo:
        game.handle_place_drawn_card(playing_state(), "u0", 0)
    assert excinfo.value.kind is ErrorKind.NO_DRAWN_CARD

    with pytest.raises(GameError) as excinfo:
        game.handle_place_drawn_card(state, "u0", 6)
    assert excinfo.value.kind is ErrorKind.INVALID_POSITION

    empty = playing_state()
    empty.deck = []
    with pytest.raises(GameError) as excinfo:
        game.handle_draw_card(empty, "u0")
    assert excinfo.value.kind is ErrorKind.DECK_EMPTY


def test_discard_ends_the_turn():
    state = game.handle_draw_card(playing_state(), "u0")
    state = game.handle_discard_drawn_card(state, "u0")
    assert state.drawn_card is None
    assert state.discard_pile == [parse_card("9C"), parse_card("KC")]
    assert state.current_player_index == 1
    assert not any(slot.face_up for slot in state.players[0].hand)

    with pytest.raises(GameError) as excinfo:
        game.handle_discard_drawn_card(state, "u1")
    assert excinfo.value.kind is ErrorKind.NO_DRAWN_CARD


def test_uncover_is_a_standalone_turn():
    state = game.handle_uncover_card(playing_state(), "u0", 3)
    assert state.players[0].hand[3].face_up
    assert state.current_player_index == 1
    assert state.turn_number == 2

    pending = game.handle_draw_card(playing_state(), "u0")
    with pytest.raises(GameError) as excinfo:
        game.handle_uncover_card(pending, "u0", 3)
    assert excinfo.value.kind is ErrorKind.DRAW_PENDING

    revealed = playing_state()
    revealed.players[0].hand[3].face_up = True
    with pytest.raises(GameError) as excinfo:
        game.handle_uncover_card(revealed, "u0", 3)
    assert excinfo.value.kind is ErrorKind.ALREADY_FACE_UP


def test_take_discard_and_replace():
    state = game.handle_take_discard_and_replace(playing_state(), "u0", 5)
    assert state.players[0].hand[5] == PlayerCard(parse_card("9C"), True)
    assert state.discard_pile == [parse_card("6S")]
    assert state.current_player_index == 1

    empty = playing_state()
    empty.discard_pile = []
    with pytest.raises(GameError) as excinfo:
        game.handle_take_discard_and_replace(empty, "u0", 5)
    assert excinfo.value.kind is ErrorKind.DISCARD_EMPTY

    pending = game.handle_draw_card(playing_state(), "u0")
    with pytest.raises(GameError) as excinfo:
        game.handle_take_discard_and_replace(pending, "u0", 5)
    assert excinfo.value.kind is ErrorKind.DRAW_PENDING


def test_actions_outside_play_are_rejected():
    state = dealt_state()
    with pytest.raises(GameError) as excinfo:
        game.handle_draw_card(state, "u0")
    assert excinfo.value.kind is ErrorKind.WRONG_PHASE


def test_revealing_last_card_triggers_final_turn():
    state = playing_state()
    for slot in state.players[0].hand[:5]:
        slot.face_up = True

    state = game.handle_uncover_card(state, "u0", 5)
    assert state.status is GameStatus.FINAL_TURN
    assert state.finish_triggered_by == "u0"
    assert state.final_turn_players_remaining == ["u1"]
    assert state.current_player_index == 1

    state = game.handle_draw_card(state, "u1")
    state = game.handle_discard_drawn_card(state, "u1")
    assert state.status is GameStatus.ROUND_ENDED
    assert state.final_turn_players_remaining == []
    assert all(slot.face_up for player in state.players for slot in player.hand)
    assert state.current_player_index == 1


def test_final_turn_gives_every_other_player_one_turn():
    state = playing_state(GameConfig(max_players=3), players=3)
    for slot in state.players[1].hand[:5]:
        slot.face_up = True
    state.current_player_index = 1

    state = game.handle_place_drawn_card(game.handle_draw_card(state, "u1"), "u1", 5)
    assert state.status is GameStatus.FINAL_TURN
    assert sorted(state.final_turn_players_remaining) == ["u0", "u2"]

    turns_after_trigger = 0
    while state.status is GameStatus.FINAL_TURN:
        current = state.players[state.current_player_index]
        assert current.user_id != "u1"
        state = game.handle_take_discard_and_replace(state, current.user_id, 0)
        turns_after_trigger += 1

    assert turns_after_trigger == len(state.players) - 1
    assert state.status is GameStatus.ROUND_ENDED
    assert all(player.all_face_up() for player in state.players)


def test_final_turn_player_finishing_their_hand_does_not_retrigger():
    state = playing_state()
    for player in state.players:
        for slot in player.hand[:5]:
            slot.face_up = True
    state = game.handle_uncover_card(state, "u0", 5)
    state = game.handle_uncover_card(state, "u1", 5)
    assert state.status is GameStatus.ROUND_ENDED
    assert state.finish_triggered_by == "u0"


def test_turn_actions_conserve_cards():
    state = playing_state()
    total = Counter(state.all_cards())
    state = game.handle_draw_card(state, "u0")
    assert Counter(state.all_cards()) == total
    state = game.handle_place_drawn_card(state, "u0", 0)
    assert Counter(state.all_cards()) == total
    state = game.handle_take_discard_and_replace(state, "u1", 1)
    assert Counter(state.all_cards()) == total
    state = game.handle_uncover_card(state, "u0", 4)
    assert Counter(state.all_cards()) == total

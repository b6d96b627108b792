from golf.cards import parse_card
from golf.scoring import MatchType, calculate_score, get_matched_line_types, joker_score
from golf.state import PlayerCard


def hand(*codes, face_up=True):
    return [PlayerCard(parse_card(code), face_up) for code in codes]


def test_column_match_scores_zero():
    cards = hand("7S", "2D", "9H", "7C", "3D", "4S")
    # column 0 = 7S/7C matched, column 1 = -2 + 3, column 2 = 9 + 4
    assert calculate_score(cards, 3) == 14
    assert get_matched_line_types(cards, 3) == {0: MatchType.COLUMN, 3: MatchType.COLUMN}


def test_face_values():
    cards = hand("AS", "TS", "JS", "QH", "KH", "2H")
    assert calculate_score(cards, 3) == 1 + 10 + 10 + 10 + 0 - 2
    assert get_matched_line_types(cards, 3) == {}


def test_matching_negative_column_loses_the_minus_points():
    cards = hand("2S", "5D", "6H", "2C", "8D", "9S")
    assert calculate_score(cards, 3) == 5 + 6 + 8 + 9


def test_face_down_cards_do_not_match():
    cards = hand("7S", "2D", "9H", "7C", "3D", "4S")
    cards[3].face_up = False
    assert get_matched_line_types(cards, 3) == {}
    assert calculate_score(cards, 3) == 7 + 7 + 1 + 13


def test_jokers_are_left_out_of_column_matching():
    cards = hand("*S", "5D", "6H", "8C", "5H", "6S")
    assert get_matched_line_types(cards, 3) == {1: MatchType.COLUMN, 4: MatchType.COLUMN, 2: MatchType.COLUMN, 5: MatchType.COLUMN}
    # the lone 8 scores, the Joker scores through the Joker rule
    assert calculate_score(cards, 3) == 8 + 15


def test_single_joker_adds_single_score():
    cards = hand("*H", "KD", "KH", "AC", "KS", "KC")
    assert calculate_score(cards, 3) == 1 + 15
    assert calculate_score(cards, 3, joker_single_score=20) == 21


def test_joker_pair_scores_once_wherever_the_jokers_sit():
    together = hand("*S", "KD", "KH", "*H", "KS", "KC")
    apart = hand("*S", "KD", "KH", "KS", "KC", "*H")
    assert calculate_score(together, 3) == -5
    assert calculate_score(apart, 3) == -5
    assert calculate_score(apart, 3, joker_pair_score=-12) == -12
    assert get_matched_line_types(together, 3) == {1: MatchType.COLUMN, 4: MatchType.COLUMN, 2: MatchType.COLUMN, 5: MatchType.COLUMN}


def test_three_jokers_still_score_the_pair_value_once():
    cards = hand("*S", "*H", "*S", "KS", "KC", "KD")
    assert calculate_score(cards, 3) == -5


def test_face_down_jokers_are_not_counted():
    cards = hand("*S", "*H", "KD", "KS", "KC", "KH")
    cards[1].face_up = False
    assert joker_score(cards) == 15
    cards[0].face_up = False
    assert joker_score(cards) == 0

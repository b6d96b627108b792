"""Card-related data structures and helpers for Card Golf."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class Suit(Enum):
    SPADES = "S"
    HEARTS = "H"
    DIAMONDS = "D"
    CLUBS = "C"

    def __str__(self) -> str:
        return self.name.lower()


class Rank(Enum):
    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "T"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    JOKER = "*"

    def __str__(self) -> str:
        return self.name.lower()


# Ranks of a standard 52-card deck, in deck order.
STANDARD_RANKS: list[Rank] = [rank for rank in Rank if rank is not Rank.JOKER]

# Suit tags carried by the two Jokers of each deck.
JOKER_SUITS: tuple[Suit, Suit] = (Suit.SPADES, Suit.HEARTS)

# Score values per rank. Jokers are scored by the Joker rule instead.
CARD_VALUES: dict[Rank, int] = {
    Rank.ACE: 1,
    Rank.TWO: -2,
    Rank.THREE: 3,
    Rank.FOUR: 4,
    Rank.FIVE: 5,
    Rank.SIX: 6,
    Rank.SEVEN: 7,
    Rank.EIGHT: 8,
    Rank.NINE: 9,
    Rank.TEN: 10,
    Rank.JACK: 10,
    Rank.QUEEN: 10,
    Rank.KING: 0,
    Rank.JOKER: 0,
}

POWER_RANKS: frozenset[Rank] = frozenset({Rank.JACK, Rank.QUEEN, Rank.KING, Rank.JOKER})


@dataclass(frozen=True)
class Card:
    """Immutable representation of a playing card."""

    rank: Rank
    suit: Suit

    @property
    def code(self) -> str:
        return f"{self.rank.value}{self.suit.value}"

    @property
    def is_joker(self) -> bool:
        return self.rank is Rank.JOKER

    @property
    def is_power_card(self) -> bool:
        return self.rank in POWER_RANKS

    def point_value(self) -> int:
        return CARD_VALUES[self.rank]

    def __str__(self) -> str:
        return self.code


def parse_card(code: str) -> Card:
    """Parse a two-character card code such as ``"TH"`` or ``"*S"``."""
    if not isinstance(code, str) or len(code) != 2:
        raise ValueError(f"Malformed card code: {code!r}")
    try:
        return Card(Rank(code[0].upper()), Suit(code[1].upper()))
    except ValueError as exc:
        raise ValueError(f"Unknown card code: {code!r}") from exc


def count_jokers(cards: Iterable[Card]) -> int:
    return sum(1 for card in cards if card.is_joker)

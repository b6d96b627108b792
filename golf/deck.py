"""Deck creation utilities for Card Golf."""

from __future__ import annotations

from random import Random
from typing import List, MutableSequence, Optional, TypeVar

from .cards import JOKER_SUITS, STANDARD_RANKS, Card, Rank, Suit

T = TypeVar("T")

STANDARD_DECK_SIZE = 52
JOKERS_PER_DECK = len(JOKER_SUITS)


def create_deck(deck_count: int = 1, with_jokers: bool = False) -> List[Card]:
    """Return ``deck_count`` ordered 52-card decks, each followed by two Jokers when enabled."""
    if deck_count < 1:
        raise ValueError("deck_count must be at least 1.")
    cards: List[Card] = []
    for _ in range(deck_count):
        cards.extend(Card(rank, suit) for rank in STANDARD_RANKS for suit in Suit)
        if with_jokers:
            cards.extend(Card(Rank.JOKER, suit) for suit in JOKER_SUITS)
    return cards


def shuffle(cards: MutableSequence[T], rng: Optional[Random] = None) -> MutableSequence[T]:
    """Fisher-Yates shuffle in place. Returns the same sequence."""
    if rng is None:
        rng = Random()
    for i in range(len(cards) - 1, 0, -1):
        j = rng.randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]
    return cards


def create_shuffled_deck(
    deck_count: int = 1,
    with_jokers: bool = False,
    *,
    rng: Optional[Random] = None,
) -> List[Card]:
    cards = create_deck(deck_count, with_jokers)
    shuffle(cards, rng)
    return cards


def deal_cards(deck: List[Card], count: int) -> List[Card]:
    """Remove and return the first ``count`` cards of ``deck``."""
    if count > len(deck):
        raise ValueError(f"Cannot deal {count} cards from a deck of {len(deck)}.")
    dealt = deck[:count]
    del deck[:count]
    return dealt


def total_card_count(deck_count: int, with_jokers: bool) -> int:
    per_deck = STANDARD_DECK_SIZE + (JOKERS_PER_DECK if with_jokers else 0)
    return deck_count * per_deck

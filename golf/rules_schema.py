"""Validation schema for Card Golf game configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .deck import total_card_count


class GameConfig(BaseModel):
    """Immutable per-game settings.

    Accepts both ``grid_cols`` and ``gridCols`` style keys so stored payloads
    load without a translation step.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    max_players: int = Field(2, ge=2, description="Number of seats at the table.")
    grid_rows: int = Field(2, ge=1, description="Rows in each player's grid.")
    grid_cols: int = Field(3, ge=1, description="Columns in each player's grid.")
    deck_count: int = Field(1, ge=1, description="Standard decks shuffled together.")
    initial_reveal_count: int = Field(2, ge=0, description="Cards each player flips during setup.")
    total_rounds: int = Field(9, ge=1, description="Rounds played before the game finishes.")
    special_abilities: bool = Field(False, description="Enable Jack/Queen/King/Joker abilities.")
    include_jokers: bool = Field(False, description="Add two Jokers per deck.")
    joker_single_score: int = Field(15, description="Points for exactly one face-up Joker.")
    joker_pair_score: int = Field(-5, description="Points for two or more face-up Jokers.")

    @property
    def hand_size(self) -> int:
        return self.grid_rows * self.grid_cols

    @field_validator("max_players")
    @classmethod
    def limit_players(cls, value: int) -> int:
        if value > 8:
            raise ValueError("At most eight players are supported.")
        return value

    @model_validator(mode="after")
    def check_deal_fits(self) -> "GameConfig":
        if self.initial_reveal_count > self.hand_size:
            raise ValueError(
                f"Cannot reveal {self.initial_reveal_count} cards from a hand of {self.hand_size}."
            )
        needed = self.max_players * self.hand_size + 1
        available = total_card_count(self.deck_count, self.include_jokers)
        if needed > available:
            raise ValueError(f"Deck of {available} cards cannot deal {needed} cards.")
        return self

    def to_payload(self) -> dict[str, object]:
        return self.model_dump()


DEFAULT_CONFIG = GameConfig()

NINE_CARD_CONFIG = GameConfig(grid_rows=3, grid_cols=3)

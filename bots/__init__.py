"""Bot strategies for Card Golf."""

from .base import GolfBot, Move, MoveType
from .baseline_greedy import GreedyBot
from .random_bot import RandomBot

__all__ = ["GolfBot", "GreedyBot", "Move", "MoveType", "RandomBot"]

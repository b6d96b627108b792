"""Core engine package for Card Golf."""

__all__ = [
    "cards",
    "deck",
    "rules_schema",
    "state",
    "validation",
    "scoring",
    "actions",
    "game",
    "service",
]

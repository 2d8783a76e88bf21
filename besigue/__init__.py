"""Core engine package for Bésigue."""

__all__ = [
    "cards",
    "deck",
    "errors",
    "player",
    "melds",
    "trick",
    "mechanics",
    "scoring",
    "state",
    "events",
    "game",
    "rules_schema",
    "service",
]

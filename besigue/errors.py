"""Rule rejection and invariant errors for the Bésigue engine."""

from __future__ import annotations


class EngineError(RuntimeError):
    """Base class for rejected engine actions."""

    code = "engine_error"


class InvalidActor(EngineError):
    """Raised when a player acts while another player is expected."""

    code = "invalid_actor"


class InvalidPhase(EngineError):
    """Raised when an action is not allowed in the current phase."""

    code = "invalid_phase"


class IllegalCard(EngineError):
    """Raised when a card is not held or breaks the playability rule."""

    code = "illegal_card"


class HandFull(EngineError):
    """Raised when a draw would push the held pile past the hand-size cap."""

    code = "hand_full"


class IllegalMeld(EngineError):
    """Raised when meld declaration rules are violated."""

    code = "illegal_meld"


class InvariantViolation(AssertionError):
    """Raised when the 132-card conservation invariant is broken."""

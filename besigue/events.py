"""Engine event notifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List

from .state import GameSnapshot

logger = logging.getLogger(__name__)


class EventType(Enum):
    CARD_DRAWN = "card_drawn"
    CARD_PLAYED = "card_played"
    TRICK_COMPLETED = "trick_completed"
    MELD_DECLARED = "meld_declared"
    PHASE_CHANGED = "phase_changed"
    ROUND_SCORED = "round_scored"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class GameEvent:
    event_type: EventType
    snapshot: GameSnapshot
    payload: Dict[str, Any] = field(default_factory=dict)


Subscriber = Callable[[GameEvent], None]


class EventBus:
    """Synchronous fan-out to subscribers; a failing subscriber never stops the engine."""

    def __init__(self) -> None:
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: GameEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("Subscriber %r failed on %s", callback, event.event_type.value)

    def __len__(self) -> int:
        return len(self._subscribers)

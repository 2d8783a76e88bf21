"""Round state and immutable snapshots for Bésigue."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple

from .cards import Suit, TrackedCard
from .deck import Deck
from .melds import MeldType
from .trick import CompletedTrick, Trick


class Phase(Enum):
    SETUP = auto()
    DEALER_DETERMINATION = auto()
    PLAYING = auto()
    ENDGAME = auto()
    SCORING = auto()
    GAME_OVER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class TurnStep(Enum):
    DRAW = auto()
    PLAY = auto()


@dataclass
class RoundState:
    round_number: int
    player_count: int
    deck: Deck
    phase: Phase = Phase.SETUP
    trump: Optional[Suit] = None
    dealer: Optional[int] = None
    current_trick: Optional[Trick] = None
    history: List[CompletedTrick] = field(default_factory=list)
    endgame: bool = False
    first_trick: bool = True
    step: TurnStep = TurnStep.PLAY
    draw_pointer: Optional[int] = None
    play_pointer: Optional[int] = None
    has_drawn: List[bool] = field(default_factory=list)
    meld_window: Optional[int] = None
    window_types: List[MeldType] = field(default_factory=list)
    dealer_draw_pointer: int = 0
    dealer_draw_cards: List[Tuple[int, TrackedCard]] = field(default_factory=list)
    last_trick_winner: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.has_drawn:
            self.has_drawn = [False] * self.player_count

    def seats_from(self, start: int) -> List[int]:
        return [(start + offset) % self.player_count for offset in range(self.player_count)]


@dataclass(frozen=True)
class PlayerSnapshot:
    seat: int
    name: str
    is_human: bool
    score: int
    tricks_won: int
    brisques: int
    held: Tuple[int, ...]
    melded: Tuple[int, ...]
    melds: Tuple[Tuple[str, int], ...]
    is_dealer: bool
    is_current: bool


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of the engine taken after a transition."""

    phase: Phase
    round_number: int
    trump: Optional[Suit]
    dealer: Optional[int]
    expected_actor: Optional[int]
    step: Optional[TurnStep]
    draw_pile: int
    endgame: bool
    meld_window: Optional[int]
    trick_leader: Optional[int]
    trick: Tuple[Tuple[int, int], ...]
    tricks_played: int
    last_trick_winner: Optional[int]
    players: Tuple[PlayerSnapshot, ...]
    ranking: Tuple[int, ...] = ()

    @property
    def scores(self) -> Tuple[int, ...]:
        return tuple(player.score for player in self.players)

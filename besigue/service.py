"""Convenience service layer for UI and agents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .cards import TrackedCard, card_label, serialize_card
from .errors import EngineError, IllegalCard
from .game import ActionResult, BesigueGame
from .melds import Meld
from .state import Phase
from .trick import CompletedTrick, Trick


class ActionRejected(RuntimeError):
    """Raised when the engine refuses an action requested through the service."""

    def __init__(self, error: EngineError) -> None:
        super().__init__(str(error))
        self.error = error
        self.code = error.code


@dataclass
class TrickPlayView:
    player: int
    card: dict
    label: str


@dataclass
class TrickView:
    leader: int
    plays: list[TrickPlayView]
    winner: Optional[int] = None


@dataclass
class MeldView:
    meld_type: str
    points: int
    cards: list[dict]
    labels: list[str]


@dataclass
class PlayerView:
    seat: int
    name: str
    is_human: bool
    score: int
    tricks_won: int
    brisques: int
    held_count: int
    melded: list[dict]
    melds: list[MeldView]
    is_dealer: bool
    is_current: bool


@dataclass
class GameView:
    phase: str
    round_number: int
    perspective: int
    trump: Optional[str]
    dealer: Optional[int]
    expected_actor: Optional[int]
    step: Optional[str]
    draw_pile: int
    endgame: bool
    meld_window: Optional[int]
    hand: list[dict]
    hand_labels: list[str]
    legal_moves: list[dict]
    legal_move_labels: list[str]
    possible_melds: list[MeldView]
    players: list[PlayerView]
    trick: Optional[TrickView]
    last_trick: Optional[TrickView]
    standings: list[dict]


class GameService:
    """Facade around BesigueGame for UI consumers; cards are addressed by slot."""

    def __init__(self, game: Optional[BesigueGame] = None) -> None:
        self.game = game or BesigueGame()

    # Lifecycle ---------------------------------------------------------

    def start_new_game(self, perspective: int = 0) -> GameView:
        self._check(self.game.start_new_game())
        return self.get_game_view(perspective)

    # Actions -----------------------------------------------------------

    def draw_for_dealer(self, player: int) -> GameView:
        self._check(self.game.draw_for_dealer(player))
        return self.get_game_view(player)

    def draw_card(self, player: int) -> GameView:
        self._check(self.game.draw_card(player))
        return self.get_game_view(player)

    def play_card(self, player: int, slot: int) -> GameView:
        card = self._card(slot)
        self._check(self.game.play_card(player, card))
        return self.get_game_view(player)

    def declare_meld(self, player: int, slots: Sequence[int]) -> GameView:
        cards = [self._card(slot) for slot in slots]
        self._check(self.game.declare_meld(player, cards))
        return self.get_game_view(player)

    # Views -------------------------------------------------------------

    def get_game_view(self, perspective: int = 0) -> GameView:
        game = self.game
        state = game.round
        player = game.players[perspective]
        held = sorted(player.held, key=lambda card: (str(card.suit), card.slot))
        legal = game.playable_cards(perspective)

        trick_view: Optional[TrickView] = None
        last_trick: Optional[TrickView] = None
        step: Optional[str] = None
        if state is not None:
            if state.current_trick is not None and not state.current_trick.is_empty():
                trick_view = _trick_view(state.current_trick)
            if state.history:
                last_trick = _trick_view(state.history[-1])
            if state.phase is Phase.DEALER_DETERMINATION:
                step = "dealer_draw"
            elif game.expected_actor() is not None:
                step = "draw" if game.expects_draw() else "play"

        return GameView(
            phase=str(game.phase),
            round_number=game.round_number,
            perspective=perspective,
            trump=str(game.trump) if game.trump is not None else None,
            dealer=state.dealer if state is not None else None,
            expected_actor=game.expected_actor(),
            step=step,
            draw_pile=len(state.deck) if state is not None else 0,
            endgame=state.endgame if state is not None else False,
            meld_window=state.meld_window if state is not None else None,
            hand=[serialize_card(card) for card in held],
            hand_labels=[card_label(card) for card in held],
            legal_moves=[serialize_card(card) for card in legal],
            legal_move_labels=[card_label(card) for card in legal],
            possible_melds=[_meld_view(meld) for meld in game.possible_melds(perspective)],
            players=[
                PlayerView(
                    seat=p.seat,
                    name=p.name,
                    is_human=p.is_human,
                    score=p.score,
                    tricks_won=p.tricks_won,
                    brisques=p.brisques,
                    held_count=len(p.held),
                    melded=[serialize_card(card) for card in p.melded],
                    melds=[_meld_view(meld) for meld in p.melds],
                    is_dealer=p.is_dealer,
                    is_current=p.is_current,
                )
                for p in game.players
            ],
            trick=trick_view,
            last_trick=last_trick,
            standings=[
                {"seat": seat, "name": name, "score": score} for seat, name, score in game.standings()
            ],
        )

    # Helpers -----------------------------------------------------------

    def _card(self, slot: int) -> TrackedCard:
        card = self.game.find_card(slot)
        if card is None:
            raise ActionRejected(IllegalCard(f"No card in slot {slot}."))
        return card

    @staticmethod
    def _check(result: ActionResult) -> ActionResult:
        if not result.ok:
            assert result.error is not None
            raise ActionRejected(result.error)
        return result


def _trick_view(trick: Trick | CompletedTrick) -> TrickView:
    return TrickView(
        leader=trick.leader,
        plays=[
            TrickPlayView(player=seat, card=serialize_card(card), label=card_label(card))
            for seat, card in trick.plays
        ],
        winner=trick.winner if isinstance(trick, CompletedTrick) else None,
    )


def _meld_view(meld: Meld) -> MeldView:
    return MeldView(
        meld_type=meld.meld_type.value,
        points=meld.points,
        cards=[serialize_card(card) for card in meld.cards],
        labels=[card_label(card) for card in meld.cards],
    )

"""High-level game orchestration for Bésigue."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from random import Random
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .cards import DECK_SIZE, CardLocation, Rank, Suit, TrackedCard, card_label
from .deck import Deck
from .errors import (
    EngineError,
    HandFull,
    IllegalCard,
    InvalidActor,
    InvalidPhase,
    InvariantViolation,
)
from .events import EventBus, EventType, GameEvent
from .mechanics import legal_moves
from .melds import Meld, possible_melds, validate_meld
from .player import Player
from .rules_schema import RuleSet
from .scoring import RoundScoreResult, resolve_ties, score_round
from .state import GameSnapshot, Phase, PlayerSnapshot, RoundState, TurnStep
from .trick import CompletedTrick, Trick

logger = logging.getLogger(__name__)

ACTIVE_PHASES = (Phase.PLAYING, Phase.ENDGAME)


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    error: Optional[EngineError] = None
    card: Optional[TrackedCard] = None
    meld: Optional[Meld] = None

    @property
    def code(self) -> Optional[str]:
        return self.error.code if self.error is not None else None

    @property
    def message(self) -> str:
        return str(self.error) if self.error is not None else ""


class BesigueGame:
    """Turn-ordered Bésigue engine for two to four seats."""

    def __init__(
        self,
        rules: Optional[RuleSet] = None,
        *,
        player_names: Optional[Sequence[str]] = None,
        human_seats: Sequence[int] = (),
        seed: Optional[int] = None,
        rng: Optional[Random] = None,
        verify_invariants: bool = False,
        events: Optional[EventBus] = None,
    ) -> None:
        self.rules = rules or RuleSet()
        count = self.rules.player_count
        names = list(player_names) if player_names is not None else [f"Player {seat + 1}" for seat in range(count)]
        if len(names) != count:
            raise ValueError(f"Expected {count} player names, got {len(names)}.")
        self.players = [
            Player(seat=seat, name=name, is_human=seat in human_seats) for seat, name in enumerate(names)
        ]
        self.rng = rng or Random(seed)
        self.verify_invariants = verify_invariants
        self.events = events or EventBus()
        self.round: Optional[RoundState] = None
        self.round_results: List[RoundScoreResult] = []
        self.final_ranking: List[int] = []

    # Lifecycle ---------------------------------------------------------

    @property
    def player_count(self) -> int:
        return self.rules.player_count

    @property
    def phase(self) -> Phase:
        return self.round.phase if self.round is not None else Phase.SETUP

    @property
    def round_number(self) -> int:
        return self.round.round_number if self.round is not None else 0

    @property
    def trump(self) -> Optional[Suit]:
        return self.round.trump if self.round is not None else None

    @property
    def is_over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    def start_new_game(self) -> ActionResult:
        for player in self.players:
            player.reset()
        self.round_results.clear()
        self.final_ranking = []
        self._begin_round(1)
        logger.info("New game with %d players", self.player_count)
        return self._finish(ActionResult(ok=True))

    # Actions -----------------------------------------------------------

    def draw_for_dealer(self, seat: int) -> ActionResult:
        return self._attempt("draw_for_dealer", self._draw_for_dealer, seat)

    def draw_card(self, seat: int) -> ActionResult:
        return self._attempt("draw_card", self._draw_card, seat)

    def play_card(self, seat: int, card: TrackedCard) -> ActionResult:
        return self._attempt("play_card", self._play_card, seat, card)

    def declare_meld(self, seat: int, cards: Sequence[TrackedCard]) -> ActionResult:
        return self._attempt("declare_meld", self._declare_meld, seat, cards)

    # Queries -----------------------------------------------------------

    def expected_actor(self) -> Optional[int]:
        state = self.round
        if state is None:
            return None
        if state.phase is Phase.DEALER_DETERMINATION:
            return state.dealer_draw_pointer
        if state.phase in ACTIVE_PHASES:
            return state.draw_pointer if state.step is TurnStep.DRAW else state.play_pointer
        return None

    def expects_draw(self) -> bool:
        state = self.round
        return state is not None and state.phase in ACTIVE_PHASES and state.step is TurnStep.DRAW

    def playable_cards(self, seat: int) -> List[TrackedCard]:
        state = self.round
        if state is None or state.phase not in ACTIVE_PHASES or state.step is not TurnStep.PLAY:
            return []
        if seat != state.play_pointer or state.current_trick is None:
            return []
        return legal_moves(
            self.players[seat].held,
            state.current_trick,
            state.trump,
            endgame=state.endgame,
        )

    def possible_melds(self, seat: int) -> List[Meld]:
        state = self.round
        if state is None or state.phase is not Phase.PLAYING or state.meld_window != seat:
            return []
        return possible_melds(
            self.players[seat],
            state.trump,
            state.round_number,
            self.rules,
            window_types=state.window_types,
        )

    def find_card(self, slot: int) -> Optional[TrackedCard]:
        for card in self._all_cards():
            if card.slot == slot:
                return card
        return None

    def card_count(self) -> int:
        return len(self._all_cards())

    def check_conservation(self) -> None:
        """Raise InvariantViolation if the 132-card pool is not intact."""
        cards = self._all_cards()
        slots = {card.slot for card in cards}
        if len(cards) != DECK_SIZE or len(slots) != DECK_SIZE:
            raise InvariantViolation(f"Card pool holds {len(cards)} cards over {len(slots)} slots, expected {DECK_SIZE}.")
        state = self.round
        if state is not None and not state.deck.is_empty():
            for player in self.players:
                if len(player.held) > self.rules.hand_size:
                    raise InvariantViolation(f"{player.name} holds {len(player.held)} cards.")

    def standings(self) -> List[Tuple[int, str, int]]:
        order = self.final_ranking or sorted(
            range(self.player_count), key=lambda seat: -self.players[seat].score
        )
        return [(seat, self.players[seat].name, self.players[seat].score) for seat in order]

    def snapshot(self) -> GameSnapshot:
        state = self.round
        trick = state.current_trick if state is not None else None
        return GameSnapshot(
            phase=self.phase,
            round_number=self.round_number,
            trump=state.trump if state is not None else None,
            dealer=state.dealer if state is not None else None,
            expected_actor=self.expected_actor(),
            step=state.step if state is not None and state.phase in ACTIVE_PHASES else None,
            draw_pile=len(state.deck) if state is not None else 0,
            endgame=state.endgame if state is not None else False,
            meld_window=state.meld_window if state is not None else None,
            trick_leader=trick.leader if trick is not None else None,
            trick=tuple((seat, card.slot) for seat, card in trick.plays) if trick is not None else (),
            tricks_played=len(state.history) if state is not None else 0,
            last_trick_winner=state.last_trick_winner if state is not None else None,
            players=tuple(
                PlayerSnapshot(
                    seat=player.seat,
                    name=player.name,
                    is_human=player.is_human,
                    score=player.score,
                    tricks_won=player.tricks_won,
                    brisques=player.brisques,
                    held=tuple(card.slot for card in player.held),
                    melded=tuple(card.slot for card in player.melded),
                    melds=tuple((meld.meld_type.value, meld.points) for meld in player.melds),
                    is_dealer=player.is_dealer,
                    is_current=player.is_current,
                )
                for player in self.players
            ),
            ranking=tuple(self.final_ranking),
        )

    # Internal transitions ------------------------------------------------

    def _attempt(self, action: str, handler: Callable[..., ActionResult], *args: Any) -> ActionResult:
        try:
            result = handler(*args)
        except EngineError as exc:
            logger.debug("Rejected %s%r: %s", action, args, exc)
            return ActionResult(ok=False, error=exc)
        return self._finish(result)

    def _finish(self, result: ActionResult) -> ActionResult:
        self._mark_current()
        if self.verify_invariants:
            self.check_conservation()
        return result

    def _require_round(self, *phases: Phase) -> RoundState:
        state = self.round
        if state is None or state.phase not in phases:
            raise InvalidPhase(f"Action not allowed in phase {self.phase}.")
        return state

    def _begin_round(self, round_number: int) -> None:
        for player in self.players:
            player.reset_for_round()
        deck = Deck(rng=self.rng)
        deck.shuffle()
        self.round = RoundState(round_number=round_number, player_count=self.player_count, deck=deck)
        if self.rules.dealer_determination == "draw_jacks":
            self._set_phase(Phase.DEALER_DETERMINATION)
            return
        self._deal(self.rng.randrange(self.player_count))

    def _deal(self, dealer: int) -> None:
        state = self.round
        assert state is not None
        state.dealer = dealer
        self.players[dealer].is_dealer = True
        hands = state.deck.deal_initial(
            self.player_count,
            self.rules.hand_size,
            packet_size=self.rules.deal_packet_size,
        )
        leader = (dealer + 1) % self.player_count
        for offset, hand in enumerate(hands):
            self.players[(leader + offset) % self.player_count].cards.add_cards(hand)
        state.current_trick = Trick(leader=leader, player_count=self.player_count)
        state.first_trick = True
        state.step = TurnStep.PLAY
        state.play_pointer = leader
        logger.debug("Round %d dealt by %s", state.round_number, self.players[dealer].name)
        self._set_phase(Phase.PLAYING)
        self._check_endgame()

    def _draw_for_dealer(self, seat: int) -> ActionResult:
        state = self._require_round(Phase.DEALER_DETERMINATION)
        if seat != state.dealer_draw_pointer:
            raise InvalidActor(f"Seat {state.dealer_draw_pointer} draws for dealer next, not seat {seat}.")
        card = state.deck.draw()
        if card is None:
            raise InvalidPhase("The deck ran out while drawing for dealer.")
        card.move_to(CardLocation.DEALER_DRAW, seat)
        state.dealer_draw_cards.append((seat, card))
        self._emit(EventType.CARD_DRAWN, seat=seat, slot=card.slot, dealer_draw=True)

        if card.rank is Rank.JACK:
            logger.debug("%s draws %s and deals", self.players[seat].name, card_label(card))
            state.deck.return_cards(drawn for _, drawn in state.dealer_draw_cards)
            state.dealer_draw_cards.clear()
            state.deck.shuffle()
            self._deal(seat)
        else:
            state.dealer_draw_pointer = (seat + 1) % self.player_count
        return ActionResult(ok=True, card=card)

    def _draw_card(self, seat: int) -> ActionResult:
        state = self._require_round(*ACTIVE_PHASES)
        if state.deck.is_empty() and seat == self.expected_actor():
            # Nothing left to draw; the requirement is already met.
            return ActionResult(ok=True)
        if state.step is not TurnStep.DRAW:
            raise InvalidPhase("No draw is due before this play.")
        if seat != state.draw_pointer:
            raise InvalidActor(f"Seat {state.draw_pointer} draws next, not seat {seat}.")
        player = self.players[seat]
        if len(player.held) >= self.rules.hand_size:
            raise HandFull(f"{player.name} already holds {self.rules.hand_size} cards.")

        card = state.deck.draw()
        if card is not None:
            player.cards.add_cards([card])
        state.has_drawn[seat] = True
        if state.meld_window == seat:
            self._close_meld_window()
        self._check_endgame()
        self._advance_draw()
        self._emit(EventType.CARD_DRAWN, seat=seat, slot=card.slot if card is not None else None)
        return ActionResult(ok=True, card=card)

    def _play_card(self, seat: int, card: TrackedCard) -> ActionResult:
        state = self._require_round(*ACTIVE_PHASES)
        if state.step is not TurnStep.PLAY:
            raise InvalidPhase("Cards must be drawn before playing.")
        if seat != state.play_pointer:
            raise InvalidActor(f"Seat {state.play_pointer} plays next, not seat {seat}.")
        player = self.players[seat]
        if not player.cards.holds(card):
            raise IllegalCard(f"{card_label(card)} is not in {player.name}'s hand.")
        if card not in self.playable_cards(seat):
            raise IllegalCard(f"{card_label(card)} cannot be played now.")
        trick = state.current_trick
        assert trick is not None

        card = player.cards.remove_card(card)
        card.move_to(CardLocation.TRICK, seat)
        trick.add_play(seat, card)
        if state.meld_window == seat:
            self._close_meld_window()
        if not trick.is_full():
            state.play_pointer = trick.next_seat()
        self._emit(EventType.CARD_PLAYED, seat=seat, slot=card.slot)
        if trick.is_full():
            self._complete_trick()
        return ActionResult(ok=True, card=card)

    def _declare_meld(self, seat: int, cards: Sequence[TrackedCard]) -> ActionResult:
        state = self._require_round(Phase.PLAYING)
        if state.meld_window != seat:
            raise InvalidActor(f"Seat {seat} has no meld to offer right now.")
        player = self.players[seat]
        meld = validate_meld(
            player,
            list(cards),
            state.trump,
            state.round_number,
            self.rules,
            window_types=state.window_types,
        )

        if state.trump is None:
            state.trump = meld.suit
            logger.info("Trump set to %s by %s", state.trump, player.name)
        for card in meld.cards:
            player.cards.move_to_melded(card)
            card.meld_tags.add(meld.meld_type)
        player.melds.append(meld)
        player.add_points(meld.points)
        state.window_types.append(meld.meld_type)
        logger.debug("%s declares %s", player.name, meld.describe())
        self._emit(
            EventType.MELD_DECLARED,
            seat=seat,
            meld_type=meld.meld_type.value,
            points=meld.points,
            slots=list(meld.slots),
        )
        return ActionResult(ok=True, meld=meld)

    def _complete_trick(self) -> None:
        state = self.round
        assert state is not None and state.current_trick is not None
        trick = state.current_trick
        winner = trick.winner(state.trump)
        completed = CompletedTrick(leader=trick.leader, winner=winner, plays=tuple(trick.plays))
        for card in completed.cards:
            card.move_to(CardLocation.HISTORY, winner)
        state.history.append(completed)
        state.last_trick_winner = winner
        state.first_trick = False

        player = self.players[winner]
        player.tricks_won += 1
        player.brisques += completed.brisque_count()
        sevens = completed.sevens_of(state.trump)
        if sevens:
            player.add_points(sevens * self.rules.scoring.seven_of_trump_bonus)
        logger.debug("%s wins trick %d", player.name, len(state.history))

        state.current_trick = Trick(leader=winner, player_count=self.player_count)
        state.window_types = []
        state.has_drawn = [False] * self.player_count
        state.meld_window = None if state.endgame else winner
        self._emit(EventType.TRICK_COMPLETED, winner=winner, slots=[card.slot for card in completed.cards])

        if all(len(p.cards) == 0 for p in self.players):
            state.meld_window = None
            self._score_round()
            return
        if state.deck.is_empty():
            state.step = TurnStep.PLAY
            state.play_pointer = winner
        else:
            state.step = TurnStep.DRAW
            self._advance_draw()

    def _advance_draw(self) -> None:
        """Point at the next seat owed a draw, or switch to play once nobody is."""
        state = self.round
        assert state is not None and state.current_trick is not None
        leader = state.current_trick.leader
        if not state.deck.is_empty():
            for seat in state.seats_from(leader):
                if state.has_drawn[seat]:
                    continue
                if len(self.players[seat].held) >= self.rules.hand_size:
                    continue
                state.draw_pointer = seat
                return
        state.draw_pointer = None
        state.step = TurnStep.PLAY
        state.play_pointer = leader

    def _check_endgame(self) -> None:
        state = self.round
        assert state is not None
        if state.endgame or not state.deck.is_empty():
            return
        state.endgame = True
        self._close_meld_window()
        for player in self.players:
            player.cards.return_melded_to_held()
        logger.debug("Draw pile empty; round %d enters the endgame", state.round_number)
        self._set_phase(Phase.ENDGAME)

    def _close_meld_window(self) -> None:
        state = self.round
        assert state is not None
        state.meld_window = None
        state.window_types = []

    def _score_round(self) -> None:
        state = self.round
        assert state is not None
        self._set_phase(Phase.SCORING)
        result = score_round(
            prior_scores=[player.score for player in self.players],
            brisques=[player.brisques for player in self.players],
            last_trick_winner=state.last_trick_winner,
            config=self.rules.scoring,
        )
        for player, score in zip(self.players, result.new_scores):
            player.score = score
        self.round_results.append(result)
        logger.info("Round %d scored: %s", state.round_number, list(result.new_scores))
        self._emit(EventType.ROUND_SCORED, scores=list(result.new_scores), brisque_points=list(result.brisque_points))

        if result.reached(self.rules.target_score):
            self.final_ranking = resolve_ties([player.score for player in self.players], self.rng)
            self._set_phase(Phase.GAME_OVER)
            winner = self.players[self.final_ranking[0]]
            logger.info("Game over after %d rounds; %s wins with %d", state.round_number, winner.name, winner.score)
            self._emit(EventType.GAME_OVER, ranking=list(self.final_ranking))
            return
        self._begin_round(state.round_number + 1)

    def _set_phase(self, phase: Phase) -> None:
        state = self.round
        assert state is not None
        previous = state.phase
        state.phase = phase
        if previous is not phase:
            self._emit(EventType.PHASE_CHANGED, previous=str(previous), phase=str(phase))

    def _emit(self, event_type: EventType, **payload: Any) -> None:
        if not len(self.events):
            return
        self._mark_current()
        self.events.publish(GameEvent(event_type, self.snapshot(), payload))

    def _mark_current(self) -> None:
        actor = self.expected_actor()
        for player in self.players:
            player.is_current = player.seat == actor

    def _all_cards(self) -> List[TrackedCard]:
        state = self.round
        if state is None:
            return []
        cards: List[TrackedCard] = list(state.deck.cards)
        cards.extend(card for _, card in state.dealer_draw_cards)
        for player in self.players:
            cards.extend(player.held)
            cards.extend(player.melded)
        if state.current_trick is not None:
            cards.extend(state.current_trick.cards)
        for trick in state.history:
            cards.extend(trick.cards)
        return cards

"""Round scoring and final tie-break helpers for Bésigue."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import groupby
from random import Random
from typing import List, Optional, Sequence, Tuple

from .cards import Rank, card_label
from .deck import Deck
from .rules_schema import ScoringConfig

logger = logging.getLogger(__name__)

MAX_TIE_BREAK_PASSES = 50


class ScoringError(ValueError):
    """Raised when round scoring inputs are inconsistent."""


@dataclass(frozen=True)
class RoundScoreResult:
    new_scores: Tuple[int, ...]
    final_trick_bonus: Tuple[int, ...]
    brisque_points: Tuple[int, ...]
    converted: Tuple[bool, ...]
    cutoff_reached: bool

    def reached(self, target: int) -> bool:
        return any(score >= target for score in self.new_scores)


def score_round(
    *,
    prior_scores: Sequence[int],
    brisques: Sequence[int],
    last_trick_winner: Optional[int],
    config: ScoringConfig,
) -> RoundScoreResult:
    """Apply the final-trick bonus, then convert brisques or apply the penalty."""
    if len(prior_scores) != len(brisques):
        raise ScoringError("Scores and brisque counts must cover the same players.")
    if last_trick_winner is not None and not 0 <= last_trick_winner < len(prior_scores):
        raise ScoringError(f"Unknown last trick winner: {last_trick_winner}")

    scores = list(prior_scores)
    bonus = [0] * len(scores)
    if last_trick_winner is not None:
        bonus[last_trick_winner] = config.final_trick_bonus
        scores[last_trick_winner] += config.final_trick_bonus

    cutoff_reached = any(score >= config.brisque_cutoff for score in scores)
    brisque_points = [0] * len(scores)
    converted = [False] * len(scores)
    for seat, count in enumerate(brisques):
        eligible = (
            not cutoff_reached
            and count >= config.min_brisques
            and scores[seat] >= config.min_score_for_brisques
        )
        if eligible:
            brisque_points[seat] = count * config.brisque_value
            converted[seat] = True
        else:
            brisque_points[seat] = config.penalty

    new_scores = [score + points for score, points in zip(scores, brisque_points)]
    return RoundScoreResult(
        new_scores=tuple(new_scores),
        final_trick_bonus=tuple(bonus),
        brisque_points=tuple(brisque_points),
        converted=tuple(converted),
        cutoff_reached=cutoff_reached,
    )


def resolve_ties(
    scores: Sequence[int],
    rng: Optional[Random] = None,
    *,
    max_passes: int = MAX_TIE_BREAK_PASSES,
) -> List[int]:
    """Rank seats by score, breaking ties by drawing for Jacks.

    Each tied group draws one card per player from a fresh shuffled deck. Jack
    drawers drop below the rest and both subsets are resolved again. A pass
    without a Jack keeps the current order; a pass where everyone draws a Jack
    is repeated.
    """
    rng = rng or Random()
    order = sorted(range(len(scores)), key=lambda seat: -scores[seat])
    ranking: List[int] = []
    for _, group in groupby(order, key=lambda seat: scores[seat]):
        ranking.extend(_resolve_group(list(group), rng, max_passes))
    return ranking


def _resolve_group(group: List[int], rng: Random, passes_left: int) -> List[int]:
    if len(group) < 2:
        return group
    while passes_left > 0:
        passes_left -= 1
        deck = Deck(rng=rng)
        deck.shuffle()
        jack_drawers: List[int] = []
        others: List[int] = []
        for seat in group:
            card = deck.draw()
            assert card is not None
            logger.debug("Tie-break: seat %d draws %s", seat, card_label(card))
            (jack_drawers if card.rank is Rank.JACK else others).append(seat)
        if not jack_drawers:
            return group
        if not others:
            continue
        return _resolve_group(others, rng, passes_left) + _resolve_group(jack_drawers, rng, passes_left)
    logger.info("Tie-break gave up after repeated all-Jack passes; keeping seat order")
    return group

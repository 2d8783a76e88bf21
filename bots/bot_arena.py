"""Simple bot arena for Bésigue."""

from __future__ import annotations

import argparse
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from besigue.game import BesigueGame
from besigue.rules_schema import RuleSet

from .base import DecisionProvider
from .baseline_greedy import GreedyBot
from .random_bot import RandomBot
from .scheduler import TurnScheduler

logger = logging.getLogger(__name__)

BOT_REGISTRY: Dict[str, type[DecisionProvider]] = {
    "greedy": GreedyBot,
    "random": RandomBot,
}


def play_game(
    game: BesigueGame,
    bots: Sequence[DecisionProvider],
    *,
    delay: float = 0.0,
) -> List[tuple[int, str, int]]:
    """Play one complete game with a bot in every seat and return the standings."""
    scheduler = TurnScheduler(game, dict(enumerate(bots)), delay=delay)
    scheduler.start_game()
    scheduler.run_until_human()
    if not game.is_over:
        raise RuntimeError("Bots stopped before the game finished.")
    return game.standings()


def run_match(
    bots: Sequence[DecisionProvider],
    *,
    n_games: int = 10,
    seed: Optional[int] = None,
    rules: Optional[RuleSet] = None,
    verify_invariants: bool = False,
) -> dict:
    rules = rules or RuleSet(player_count=len(bots))
    if rules.player_count != len(bots):
        raise ValueError(f"{rules.player_count} seats need {rules.player_count} bots, got {len(bots)}.")
    names = [f"{bot.name} {seat + 1}" for seat, bot in enumerate(bots)]
    wins = [0] * len(bots)
    history = []
    for index in range(n_games):
        game_seed = None if seed is None else seed + index
        game = BesigueGame(rules, player_names=names, seed=game_seed, verify_invariants=verify_invariants)
        standings = play_game(game, bots)
        wins[standings[0][0]] += 1
        history.append(
            {
                "standings": standings,
                "rounds": game.round_number,
            }
        )
        logger.info("Game %d won by %s with %d", index + 1, standings[0][1], standings[0][2])
    return {"names": names, "wins": wins, "history": history}


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run a bot match.")
    parser.add_argument(
        "--bots",
        nargs="+",
        default=["greedy", "random"],
        choices=BOT_REGISTRY.keys(),
        help="One bot per seat, two to four seats.",
    )
    parser.add_argument("--n", type=int, default=10, help="Number of games to play.")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--dealer", default="random", choices=["random", "draw_jacks"])
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    bots = [BOT_REGISTRY[name]() for name in args.bots]
    rules = RuleSet(player_count=len(bots), dealer_determination=args.dealer)
    results = run_match(bots, n_games=args.n, seed=args.seed, rules=rules)

    for name, wins in zip(results["names"], results["wins"]):
        print(f"{name}: {wins}/{args.n} wins")
    rounds = [entry["rounds"] for entry in results["history"]]
    print(f"Average rounds per game: {sum(rounds) / max(len(rounds), 1):.1f}")


if __name__ == "__main__":
    main()

"""Decision providers for Bésigue."""

from .base import DecisionProvider
from .baseline_greedy import GreedyBot
from .random_bot import RandomBot
from .scheduler import TurnScheduler

__all__ = ["DecisionProvider", "GreedyBot", "RandomBot", "TurnScheduler"]

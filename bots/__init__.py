"""Trading bots: strategy policies, sizing and the agent that runs them."""

from bots.agent import BotAgent
from bots.base import StrategyPolicy
from bots.registry import create_policy, register, registered_strategies
from bots.sizing import LotSizer

__all__ = [
    "BotAgent",
    "LotSizer",
    "StrategyPolicy",
    "create_policy",
    "register",
    "registered_strategies",
]

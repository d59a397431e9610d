"""Strategy registry: maps ``BotStrategy`` tags to policy classes.

Usage::

    from bots.registry import create_policy

    policy = create_policy(BotStrategy.MOMENTUM, config.strategies, rng)
"""

from __future__ import annotations

from typing import Type

from bots.base import StrategyPolicy
from models.bot import BotStrategy
from models.config import StrategyTable
from simulation.random_source import RandomNumberSource

# ---------------------------------------------------------------------------
# Registry mapping
# ---------------------------------------------------------------------------
_REGISTRY: dict[BotStrategy, Type[StrategyPolicy]] = {}


def register(strategy: BotStrategy):
    """Decorator to register a ``StrategyPolicy`` subclass under *strategy*."""

    def _decorator(cls: Type[StrategyPolicy]) -> Type[StrategyPolicy]:
        if strategy in _REGISTRY:
            raise ValueError(f"Strategy '{strategy.value}' is already registered.")
        cls.strategy = strategy
        _REGISTRY[strategy] = cls
        return cls

    return _decorator


def create_policy(
    strategy: BotStrategy,
    table: StrategyTable,
    rng: RandomNumberSource,
) -> StrategyPolicy:
    """Instantiate the policy registered for *strategy*.

    Raises ``KeyError`` if *strategy* has no registered policy.
    """
    _ensure_builtins_loaded()

    key = BotStrategy(strategy)
    if key not in _REGISTRY:
        available = ", ".join(sorted(s.value for s in _REGISTRY)) or "(none)"
        raise KeyError(f"Unknown strategy '{key.value}'. Available: {available}.")
    return _REGISTRY[key](table, rng)


def registered_strategies() -> list[BotStrategy]:
    _ensure_builtins_loaded()
    return list(_REGISTRY)


def _ensure_builtins_loaded() -> None:
    """Import built-in policy modules so their ``@register`` calls execute."""
    import bots.policies  # noqa: F401

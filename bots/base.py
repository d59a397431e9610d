"""Abstract base class for bot decision policies.

Every strategy implements this interface so a ``BotAgent`` can run any of
them interchangeably. A policy only produces a signal for one instrument;
sizing and execution belong to the agent.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from models.bot import BotStrategy, Signal
from models.config import StrategyTable
from models.instrument import Commodity
from simulation.ledger import Ledger
from simulation.price_engine import PriceEngine
from simulation.random_source import RandomNumberSource


class StrategyPolicy(ABC):
    """Common interface for bot strategies.

    Lifecycle:
        1. ``__init__`` receives the session's strategy table and random source.
        2. ``signal`` is called once per decision cycle for a single,
           randomly chosen instrument.
    """

    strategy: BotStrategy

    def __init__(self, table: StrategyTable, rng: RandomNumberSource) -> None:
        self.table = table
        self.rng = rng

    @abstractmethod
    def signal(self, ticker: Commodity, engine: PriceEngine, ledger: Ledger) -> Signal:
        """Return BUY, SELL or HOLD for *ticker* given current market state."""

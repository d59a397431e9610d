"""Data models for the commodity market simulation.

The engine (``simulation``), the bots (``bots``) and the CLI all import from
models.
"""

from models.bot import BotDecision, BotStrategy, Signal
from models.config import (
    BotSpec,
    DipRallyThresholds,
    EventConfig,
    HodlThresholds,
    MeanReversionThresholds,
    MomentumThresholds,
    RandomThresholds,
    RoundingPolicy,
    SimulationConfig,
    SizingConfig,
    StrategyTable,
    ThinkInterval,
)
from models.events import AppliedEvent, MarketEvent
from models.instrument import Commodity, Instrument, PricePoint, PriceQuote
from models.ledger import LedgerSnapshot, TraderIdentity, TraderView
from models.log import SessionLog
from models.ranking import RankingEntry
from models.session import SessionSnapshot, SessionState
from models.trade import ExecutedTrade, TradeAction, TradeResult

__all__ = [
    # bot
    "BotDecision",
    "BotStrategy",
    "Signal",
    # config
    "BotSpec",
    "DipRallyThresholds",
    "EventConfig",
    "HodlThresholds",
    "MeanReversionThresholds",
    "MomentumThresholds",
    "RandomThresholds",
    "RoundingPolicy",
    "SimulationConfig",
    "SizingConfig",
    "StrategyTable",
    "ThinkInterval",
    # events
    "AppliedEvent",
    "MarketEvent",
    # instrument
    "Commodity",
    "Instrument",
    "PricePoint",
    "PriceQuote",
    # ledger
    "LedgerSnapshot",
    "TraderIdentity",
    "TraderView",
    # log
    "SessionLog",
    # ranking
    "RankingEntry",
    # session
    "SessionSnapshot",
    "SessionState",
    # trade
    "ExecutedTrade",
    "TradeAction",
    "TradeResult",
]

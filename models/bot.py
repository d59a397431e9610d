"""Bot strategy tags and decision models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from models.instrument import Commodity
from models.trade import TradeAction


class BotStrategy(str, Enum):
    """Decision policies a bot can run."""

    RANDOM = "random"
    MOMENTUM = "momentum"
    MEAN_REVERT = "mean_revert"
    HODL = "hodl"
    AGGRESSIVE = "aggressive"
    CONSERVATIVE = "conservative"


class Signal(str, Enum):
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class BotDecision(BaseModel):
    """A sized, pre-validated trade a bot has decided to make."""

    bot_id: str
    ticker: Commodity
    action: TradeAction
    quantity: float
    price: float

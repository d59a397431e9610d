"""Trade request and execution models: TradeAction, ExecutedTrade, TradeResult."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel

from models.instrument import Commodity


class TradeAction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class ExecutedTrade(BaseModel):
    """Single executed fill against one trader's ledger."""

    trade_id: str
    trader_id: str
    ticker: Commodity
    action: TradeAction
    quantity: float
    price: float
    total: float  # Credits moved: cost for a buy, proceeds for a sell
    timestamp: float | None = None


class TradeResult(BaseModel):
    """Outcome of an externally requested trade.

    Execution is all-or-nothing: either the trade is accepted and ``trade``
    holds the fill, or it is rejected and the ledger is untouched. When
    rejected, ``reason`` is a stable code and ``message`` explains it.
    """

    status: Literal["accepted", "rejected"]
    trade: ExecutedTrade | None = None
    reason: str | None = None
    message: str = ""

    @property
    def accepted(self) -> bool:
        return self.status == "accepted"

"""Session state and observer snapshot models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from models.events import AppliedEvent
from models.instrument import PriceQuote
from models.ledger import TraderView
from models.ranking import RankingEntry


class SessionState(str, Enum):
    RUNNING = "running"
    ENDED = "ended"


class SessionSnapshot(BaseModel):
    """Everything an observer may read after a tick.

    Net worth and ranks are derived at snapshot time; a snapshot must not be
    treated as authoritative once another tick or trade has happened.
    """

    state: SessionState
    time_remaining: int
    elapsed: float
    prices: list[PriceQuote]
    traders: list[TraderView]
    leaderboard: list[RankingEntry]
    last_event: AppliedEvent | None = None

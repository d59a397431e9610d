"""Ranking models."""

from pydantic import BaseModel


class RankingEntry(BaseModel):
    """One row of the leaderboard (1-based rank)."""

    rank: int
    trader_id: str
    name: str
    net_worth: float
    is_player: bool

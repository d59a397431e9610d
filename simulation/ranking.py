"""Leaderboard computation.

Rankings are a pure function of the ledgers and the current prices. Nothing
is cached: every call recomputes net worth from scratch.
"""

from __future__ import annotations

from typing import Iterable

from models.instrument import Commodity
from models.ranking import RankingEntry
from simulation.ledger import Ledger


class RankingService:
    """Orders traders by net worth, highest first.

    Ties keep their input order (Python's sort is stable), so passing the
    player first and then the bots in roster order gives a deterministic
    result.
    """

    def rank(
        self,
        traders: Iterable[Ledger],
        prices: dict[Commodity, float],
    ) -> list[RankingEntry]:
        scored = [(ledger, ledger.net_worth(prices)) for ledger in traders]
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return [
            RankingEntry(
                rank=idx + 1,
                trader_id=ledger.trader_id,
                name=ledger.name,
                net_worth=net_worth,
                is_player=not ledger.is_bot,
            )
            for idx, (ledger, net_worth) in enumerate(scored)
        ]

    def leaderboard(
        self,
        traders: Iterable[Ledger],
        prices: dict[Commodity, float],
        top_k: int = 5,
    ) -> list[RankingEntry]:
        """The first *top_k* entries of ``rank``."""
        return self.rank(traders, prices)[:top_k]

    def position_of(
        self,
        trader_id: str,
        traders: Iterable[Ledger],
        prices: dict[Commodity, float],
    ) -> int:
        """1-based rank of *trader_id*. Raises ``KeyError`` if absent."""
        for entry in self.rank(traders, prices):
            if entry.trader_id == trader_id:
                return entry.rank
        raise KeyError(f"Unknown trader: {trader_id}")
